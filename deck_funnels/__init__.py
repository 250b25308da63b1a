"""
Funnel charts for reveal.js slide decks.

Finds funnel chart containers on the active slide, resolves their data from
inline comment configs, JSON files or CSV files, and keeps the rendered
charts in sync with navigation and viewport resizes.

Key components:
- data: canonical FunnelData model, parsers, data sources, cache, resolver
- charts: chart instance lifecycle (create / draw / teardown)
- renderers: renderer interface and the FunnelGraph markup renderer
- deck: deck document model, events and the coordinator

Example usage:
    from deck_funnels import FunnelChartCoordinator, FunnelGraphRenderer, LocalDataSource, SlideDeck

    async with LocalDataSource("slides") as source:
        coordinator = FunnelChartCoordinator(FunnelGraphRenderer(), source)
        deck = SlideDeck.from_path("slides/index.html", viewport=coordinator.viewport)
        coordinator.attach(deck)
        await deck.start()
"""

from deck_funnels.charts import ChartInstanceRecord, ChartLifecycleManager, get_preferred_direction
from deck_funnels.data import (
    ContainerDescriptor,
    DataResolver,
    Direction,
    FunnelData,
    FunnelDataCache,
    HttpDataSource,
    LocalDataSource,
    SourceFormat,
    parse_csv,
    parse_inline_config,
)
from deck_funnels.deck import FunnelChartCoordinator, SlideDeck
from deck_funnels.renderers import ChartRenderer, FunnelGraphRenderer

__version__ = "0.1.0"

__all__ = [
    "ChartInstanceRecord",
    "ChartLifecycleManager",
    "ChartRenderer",
    "ContainerDescriptor",
    "DataResolver",
    "Direction",
    "FunnelChartCoordinator",
    "FunnelData",
    "FunnelDataCache",
    "FunnelGraphRenderer",
    "HttpDataSource",
    "LocalDataSource",
    "SlideDeck",
    "SourceFormat",
    "get_preferred_direction",
    "parse_csv",
    "parse_inline_config",
]
