"""Chart instance lifecycle."""

from deck_funnels.charts.lifecycle import (
    ChartInstanceRecord,
    ChartLifecycleManager,
    get_preferred_direction,
)

__all__ = [
    "ChartInstanceRecord",
    "ChartLifecycleManager",
    "get_preferred_direction",
]
