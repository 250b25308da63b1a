"""
Chart renderers.

The lifecycle manager only talks to the ChartRenderer interface, so a
renderer with a real teardown can replace FunnelGraphRenderer without
touching it.
"""

from deck_funnels.renderers.base import ChartRenderer
from deck_funnels.renderers.funnel_graph import (
    FunnelGraphHandle,
    FunnelGraphRenderer,
    FunnelGraphSpec,
)

__all__ = [
    "ChartRenderer",
    "FunnelGraphHandle",
    "FunnelGraphRenderer",
    "FunnelGraphSpec",
]
