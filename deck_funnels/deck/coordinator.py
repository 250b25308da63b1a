"""
Module: coordinator

Purpose: Keep funnel charts in sync with slide navigation and resizes.

Key Classes:
- FunnelChartCoordinator: owns the data cache, resolver and lifecycle
  manager; handles ready / slidechanged / resize events
- SlideRenderResult: what happened to each container on a slide

Architecture Notes:
- One coordinator per deck; no module-level state
- Containers are processed one at a time in document order
- A failing container is logged and skipped, never aborting its siblings
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

import numpy as np

from deck_funnels.charts.lifecycle import ChartInstanceRecord, ChartLifecycleManager
from deck_funnels.data.cache import FunnelDataCache
from deck_funnels.data.resolver import DataResolver
from deck_funnels.data.schemas import Viewport
from deck_funnels.data.sources import DataSource
from deck_funnels.deck.events import (
    READY,
    RESIZE,
    SLIDE_CHANGED,
    ReadyEvent,
    ResizeEvent,
    SlideChangedEvent,
)
from deck_funnels.deck.markup import (
    MountPoint,
    Slide,
    describe_container,
    is_horizontal_navigation,
)
from deck_funnels.exceptions import FunnelChartError
from deck_funnels.renderers.base import ChartRenderer
from deck_funnels.settings import Settings, get_settings

logger = logging.getLogger(__name__)


# =============================================================================
# REINITIALIZATION POLICIES
# =============================================================================

ReinitPolicy = Callable[[Slide | None, Slide], bool]


def always_reinitialize(previous: Slide | None, current: Slide) -> bool:
    """Rebuild charts on every navigation."""
    return True


def reinitialize_on_horizontal_only(previous: Slide | None, current: Slide) -> bool:
    """Keep existing charts when moving within a vertical stack."""
    return is_horizontal_navigation(previous, current)


# =============================================================================
# RESULTS
# =============================================================================


@dataclass
class SlideRenderResult:
    """Outcome of processing the containers on one slide."""

    drawn: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    errors: dict[str, str] = field(default_factory=dict)

    @property
    def container_count(self) -> int:
        return len(self.drawn) + len(self.skipped) + len(self.errors)


# =============================================================================
# COORDINATOR
# =============================================================================


class FunnelChartCoordinator:
    """Drives chart creation and redraws from presentation events.

    Usage:
        async with LocalDataSource("slides") as source:
            coordinator = FunnelChartCoordinator(FunnelGraphRenderer(), source)
            deck = SlideDeck.from_path("slides/index.html", viewport=coordinator.viewport)
            coordinator.attach(deck)
            await deck.start()
    """

    def __init__(
        self,
        renderer: ChartRenderer,
        source: DataSource,
        *,
        settings: Settings | None = None,
        viewport: Viewport | None = None,
        reinit_policy: ReinitPolicy = always_reinitialize,
    ):
        self.settings = settings or get_settings()
        self.viewport = viewport or Viewport(
            width=self.settings.viewport_width,
            height=self.settings.viewport_height,
        )
        self.reinit_policy = reinit_policy

        rng = np.random.default_rng(self.settings.color_seed)
        self.cache = FunnelDataCache()
        self.resolver = DataResolver(
            source,
            self.cache,
            color_policy=self.settings.color_policy,
            rng=rng,
            default_data_source=self.settings.default_data_source,
        )
        self.lifecycle = ChartLifecycleManager(
            self.resolver,
            renderer,
            viewport=self.viewport,
            vertical_breakpoint=self.settings.vertical_breakpoint,
            animation_duration_ms=self.settings.animation_duration_ms,
            color_policy=self.settings.color_policy,
            rng=rng,
        )
        self._host: Any = None

    def attach(self, host: Any) -> None:
        """Subscribe to a presentation host's lifecycle events.

        The host must provide add_event_listener(name, listener) and
        get_current_slide().
        """
        self._host = host
        host.add_event_listener(READY, self.on_ready)
        host.add_event_listener(SLIDE_CHANGED, self.on_slide_changed)
        host.add_event_listener(RESIZE, self.on_resize)

    # -------------------------------------------------------------------------
    # Event handlers
    # -------------------------------------------------------------------------

    async def on_ready(self, event: ReadyEvent) -> SlideRenderResult:
        return await self.process_slide(event.current_slide, force_reinit=True)

    async def on_slide_changed(self, event: SlideChangedEvent) -> SlideRenderResult:
        force = self.reinit_policy(event.previous_slide, event.current_slide)
        return await self.process_slide(event.current_slide, force_reinit=force)

    async def on_resize(self, event: ResizeEvent) -> SlideRenderResult:
        self.viewport.width = event.width
        self.viewport.height = event.height

        slide = self._host.get_current_slide() if self._host is not None else None
        if slide is None:
            return SlideRenderResult()
        return await self.process_slide(slide, force_reinit=True)

    # -------------------------------------------------------------------------
    # Processing
    # -------------------------------------------------------------------------

    async def process_slide(self, slide: Slide, force_reinit: bool = True) -> SlideRenderResult:
        """Initialize and draw every funnel container on a slide."""
        result = SlideRenderResult()
        mounts = slide.find_mount_points(self.settings.container_prefix)
        if not mounts:
            return result

        logger.info(f"Found {len(mounts)} funnel charts on slide {slide!r}")

        for mount in mounts:
            try:
                record = await self.initialize_chart(mount, force_reinit)
                if record is None:
                    result.skipped.append(mount.id)
                    continue
                self.draw_chart(mount.id)
                result.drawn.append(mount.id)
            except FunnelChartError as e:
                logger.warning(f"Skipping funnel chart {mount.id}: {e.message}")
                result.errors[mount.id] = e.message
            except Exception as e:
                logger.exception(f"Unexpected error rendering funnel chart {mount.id}")
                result.errors[mount.id] = str(e)

        return result

    async def initialize_chart(
        self,
        mount: MountPoint,
        force_reinit: bool = True,
    ) -> ChartInstanceRecord | None:
        """Create (or reuse) the chart instance for a mount point."""
        container = describe_container(
            mount,
            self.viewport,
            default_data_source=self.settings.default_data_source,
        )
        return await self.lifecycle.ensure_chart(container, force_reinit)

    def draw_chart(self, container_id: str) -> ChartInstanceRecord | None:
        """Draw an initialized chart; no-op for unknown ids."""
        return self.lifecycle.draw(container_id)
