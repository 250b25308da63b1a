"""
Presentation host model and the navigation/resize coordinator.
"""

from deck_funnels.deck.coordinator import (
    FunnelChartCoordinator,
    SlideRenderResult,
    always_reinitialize,
    reinitialize_on_horizontal_only,
)
from deck_funnels.deck.events import (
    EventEmitter,
    ReadyEvent,
    ResizeEvent,
    SlideChangedEvent,
)
from deck_funnels.deck.markup import (
    MountPoint,
    Slide,
    SlideDeck,
    describe_container,
    is_horizontal_navigation,
)

__all__ = [
    "FunnelChartCoordinator",
    "SlideRenderResult",
    "always_reinitialize",
    "reinitialize_on_horizontal_only",
    "EventEmitter",
    "ReadyEvent",
    "ResizeEvent",
    "SlideChangedEvent",
    "MountPoint",
    "Slide",
    "SlideDeck",
    "describe_container",
    "is_horizontal_navigation",
]
