"""
Module: schemas

Purpose: Data model shared by the resolver, lifecycle manager and renderer.

- FunnelData: canonical {labels, subLabels, values, colors} shape (Pydantic v2)
- ContainerDescriptor: a chart mount point as described by its markup
- ChartOptions: layout options handed to the renderer
"""

import math
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from deck_funnels.exceptions import DataValidationError


# =============================================================================
# ENUMS
# =============================================================================


class Direction(str, Enum):
    """Funnel layout direction."""

    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"


class SourceFormat(str, Enum):
    """Format of a fetched data file."""

    JSON = "json"
    CSV = "csv"


# =============================================================================
# CANONICAL FUNNEL DATA
# =============================================================================


ColorSpec = str | list[str]


class FunnelData(BaseModel):
    """Canonical funnel data.

    Accepts ragged rows and NaN values so that CSV input can be carried
    through unchanged; call ensure_renderable() before handing the data to
    a renderer.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        arbitrary_types_allowed=True,
    )

    labels: list[str]
    sub_labels: list[str] = Field(default_factory=list, alias="subLabels")
    values: list[list[float]]
    colors: list[ColorSpec] | None = None

    # Resolved from the formatter registry; never serialized
    value_formatter: Callable[[float], str] | None = Field(
        default=None, alias="valueFormatter", exclude=True
    )

    @property
    def stage_count(self) -> int:
        return len(self.labels)

    @property
    def segment_count(self) -> int:
        """Expected number of values per stage."""
        return len(self.sub_labels) or 1

    def shape_errors(self) -> list[str]:
        """List every violation of the canonical shape invariants."""
        problems: list[str] = []

        if not self.labels:
            problems.append("labels must not be empty")

        if len(self.values) != len(self.labels):
            problems.append(
                f"expected {len(self.labels)} value rows, got {len(self.values)}"
            )

        expected = self.segment_count
        for i, row in enumerate(self.values):
            stage = self.labels[i] if i < len(self.labels) else f"#{i}"
            if len(row) != expected:
                problems.append(
                    f"stage {stage!r} has {len(row)} values, expected {expected}"
                )
            if any(not math.isfinite(v) for v in row):
                problems.append(f"stage {stage!r} has non-numeric values")

        return problems

    def ensure_renderable(self) -> "FunnelData":
        """Validate the shape invariants.

        Returns:
            self, for chaining

        Raises:
            DataValidationError: If any invariant is violated
        """
        problems = self.shape_errors()
        if problems:
            raise DataValidationError(
                f"Funnel data is not renderable: {'; '.join(problems)}",
                field="values",
                problems=problems,
            )
        return self

    def with_colors(self, colors: list[ColorSpec]) -> "FunnelData":
        """Return a copy with the given colors."""
        return self.model_copy(update={"colors": colors})

    def format_value(self, value: float) -> str:
        """Format a single value with the configured formatter."""
        if self.value_formatter is None:
            return f"{value:g}"
        return self.value_formatter(value)

    def to_dict(self) -> dict[str, Any]:
        """Convert to the wire (camelCase) shape used by data files."""
        return self.model_dump(by_alias=True, exclude_none=True)


# =============================================================================
# CONTAINERS
# =============================================================================


@dataclass
class ContainerDescriptor:
    """A chart mount point, described by its markup attributes."""

    id: str
    data_source_id: str = "default"
    format: SourceFormat = SourceFormat.JSON
    direction: Direction | None = None  # None = derive from viewport
    gradient_direction: Direction = Direction.HORIZONTAL
    display_percent: bool = True
    width: int = 0
    height: int = 0

    # Raw text of HTML comments found inside the container
    inline_configs: list[str] = field(default_factory=list)

    # Backing markup element (MountPoint), if any
    mount_point: Any = field(default=None, repr=False, compare=False)

    @property
    def cache_key(self) -> tuple[str, SourceFormat]:
        return (self.data_source_id, self.format)


@dataclass
class Viewport:
    """Current viewport size in CSS pixels; updated in place on resize."""

    width: int = 1280
    height: int = 720


@dataclass(frozen=True)
class ChartOptions:
    """Layout options handed to the renderer when creating an instance."""

    direction: Direction
    gradient_direction: Direction = Direction.HORIZONTAL
    display_percent: bool = True
    width: int = 0
    height: int = 0
    responsive: bool = True
