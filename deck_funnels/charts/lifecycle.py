"""
Chart lifecycle management.

Owns one ChartInstanceRecord per container id and decides when a chart is
created, redrawn or torn down. Stale resolutions are discarded: if a newer
ensure_chart() for the same container starts while an older one is waiting
on data, the older result is dropped.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

import numpy as np

from deck_funnels.data.parsers import ColorPolicy, synthesize_colors
from deck_funnels.data.resolver import DataResolver
from deck_funnels.data.schemas import (
    ChartOptions,
    ContainerDescriptor,
    Direction,
    FunnelData,
    Viewport,
)
from deck_funnels.renderers.base import ChartRenderer

logger = logging.getLogger(__name__)


VERTICAL_BREAKPOINT = 768


def get_preferred_direction(width: int, breakpoint: int = VERTICAL_BREAKPOINT) -> Direction:
    """Vertical layout for narrow viewports, horizontal otherwise."""
    return Direction.VERTICAL if width <= breakpoint else Direction.HORIZONTAL


@dataclass
class ChartInstanceRecord:
    """A live chart instance for one container."""

    container_id: str
    handle: Any
    data: FunnelData
    options: ChartOptions
    generation: int = 0
    has_drawn: bool = False


class ChartLifecycleManager:
    """Creates, redraws and tears down chart instances.

    Usage:
        manager = ChartLifecycleManager(resolver, FunnelGraphRenderer(), viewport=viewport)
        record = await manager.ensure_chart(container, force_reinit=True)
        if record:
            manager.draw(container.id)
    """

    def __init__(
        self,
        resolver: DataResolver,
        renderer: ChartRenderer,
        *,
        viewport: Viewport | None = None,
        vertical_breakpoint: int = VERTICAL_BREAKPOINT,
        animation_duration_ms: int = 1000,
        color_policy: ColorPolicy = "palette",
        rng: np.random.Generator | None = None,
    ):
        self.resolver = resolver
        self.renderer = renderer
        self.viewport = viewport or Viewport()
        self.vertical_breakpoint = vertical_breakpoint
        self.animation_duration_ms = animation_duration_ms
        self.color_policy = color_policy
        self.rng = rng if rng is not None else np.random.default_rng()

        self._records: dict[str, ChartInstanceRecord] = {}
        self._generations: dict[str, int] = {}

    @property
    def records(self) -> Mapping[str, ChartInstanceRecord]:
        """Read-only view of the live records."""
        return MappingProxyType(self._records)

    def get(self, container_id: str) -> ChartInstanceRecord | None:
        return self._records.get(container_id)

    def preferred_direction(self) -> Direction:
        """Preferred direction for the viewport as it is right now."""
        return get_preferred_direction(self.viewport.width, self.vertical_breakpoint)

    async def ensure_chart(
        self,
        container: ContainerDescriptor,
        force_reinit: bool = True,
    ) -> ChartInstanceRecord | None:
        """Make sure a chart instance exists for the container.

        Args:
            container: The container to chart
            force_reinit: Rebuild the instance even if one already exists

        Returns:
            The current record, or None when no data could be resolved or a
            newer call for the same container superseded this one

        Raises:
            DataValidationError: If the resolved data can't be rendered
            RendererError: If the renderer can't create the instance
        """
        existing = self._records.get(container.id)
        if existing is not None and not force_reinit:
            return existing

        generation = self._generations.get(container.id, 0) + 1
        self._generations[container.id] = generation

        data = await self.resolver.resolve(container)

        if self._generations[container.id] != generation:
            logger.debug(f"Discarding stale resolution for {container.id} (generation {generation})")
            return None

        if data is None:
            return None

        data = self._prepare(data)

        # Re-read: a record may have been created while we awaited
        existing = self._records.get(container.id)
        if existing is not None:
            self.renderer.teardown(existing.handle)

        options = ChartOptions(
            direction=container.direction or self.preferred_direction(),
            gradient_direction=container.gradient_direction,
            display_percent=container.display_percent,
            width=container.width,
            height=container.height,
        )
        handle = self.renderer.create(container.mount_point, data, options)

        record = ChartInstanceRecord(
            container_id=container.id,
            handle=handle,
            data=data,
            options=options,
            generation=generation,
        )
        self._records[container.id] = record
        logger.debug(f"Initialized chart {container.id} ({options.direction.value})")
        return record

    def draw(self, container_id: str) -> ChartInstanceRecord | None:
        """Draw (or redraw) an initialized chart; no-op without a record."""
        record = self._records.get(container_id)
        if record is None:
            return None

        # Vertical layouts skip animation to keep up with stack transitions
        self.renderer.redraw(
            record.handle,
            animation=self.preferred_direction() is Direction.HORIZONTAL,
            animation_duration=self.animation_duration_ms,
        )
        record.has_drawn = True
        return record

    def discard(self, container_id: str) -> bool:
        """Tear down and forget a chart. Returns False if there was none."""
        record = self._records.pop(container_id, None)
        if record is None:
            return False
        self.renderer.teardown(record.handle)
        return True

    def _prepare(self, data: FunnelData) -> FunnelData:
        data.ensure_renderable()
        if not data.colors:
            data = data.with_colors(
                synthesize_colors(
                    data.stage_count, len(data.sub_labels), self.color_policy, self.rng
                )
            )
        return data
