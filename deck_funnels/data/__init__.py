"""
Data module for funnel charts.

Contains the canonical data model, source parsers, data sources, the
resolution cache and the resolver that ties them together.
"""

from deck_funnels.data.cache import FunnelDataCache
from deck_funnels.data.defaults import FALLBACK_FUNNEL, FUNNEL_PALETTE
from deck_funnels.data.formatters import (
    get_formatter,
    list_formatters,
    register_formatter,
)
from deck_funnels.data.parsers import parse_csv, parse_inline_config, synthesize_colors
from deck_funnels.data.resolver import DataResolver
from deck_funnels.data.schemas import (
    ChartOptions,
    ContainerDescriptor,
    Direction,
    FunnelData,
    SourceFormat,
)
from deck_funnels.data.sources import DataSource, HttpDataSource, LocalDataSource

__all__ = [
    # Model
    "ChartOptions",
    "ContainerDescriptor",
    "Direction",
    "FunnelData",
    "SourceFormat",
    # Parsing
    "parse_csv",
    "parse_inline_config",
    "synthesize_colors",
    "get_formatter",
    "list_formatters",
    "register_formatter",
    # Resolution
    "DataResolver",
    "DataSource",
    "HttpDataSource",
    "LocalDataSource",
    "FunnelDataCache",
    "FALLBACK_FUNNEL",
    "FUNNEL_PALETTE",
]
