"""Renderer capability used by the chart lifecycle manager."""

from abc import ABC, abstractmethod
from typing import Any

from deck_funnels.data.schemas import ChartOptions, FunnelData


class ChartRenderer(ABC):
    """Creates, redraws and tears down chart instances in mount points.

    Handles returned by create() are opaque to callers.
    """

    @abstractmethod
    def create(self, mount: Any, data: FunnelData, options: ChartOptions) -> Any:
        """Create a chart instance bound to ``mount`` without drawing it."""

    @abstractmethod
    def redraw(self, handle: Any, *, animation: bool, animation_duration: int) -> None:
        """Render (or re-render) the instance into its mount point."""

    @abstractmethod
    def teardown(self, handle: Any) -> None:
        """Discard the instance and any content it rendered."""
