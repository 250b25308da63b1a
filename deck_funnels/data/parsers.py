"""
Parsers converting raw source text into canonical funnel data.

- parse_csv: CSV text (``Stage,<sub1>,<sub2>,...`` header) -> FunnelData
- parse_inline_config: comment text inside a container -> config dict or None
- synthesize_colors: per-stage colors for sources that carry none
"""

import json
import logging
import re
from typing import Any, Literal

import numpy as np

from deck_funnels.data.defaults import (
    FUNNEL_PALETTE,
    RANDOM_LIGHTNESS,
    RANDOM_SATURATION,
)
from deck_funnels.data.formatters import (
    is_formatter_reference,
    resolve_formatter_reference,
)
from deck_funnels.data.schemas import ColorSpec, FunnelData
from deck_funnels.exceptions import FunnelChartError, InlineConfigError

logger = logging.getLogger(__name__)

ColorPolicy = Literal["palette", "random"]

_LINE_BREAKS = re.compile(r"\r\n|\n|\r|\t")
_FUNCTION_STRING = re.compile(r"^\s*(function\b|\(?[\w\s,]*\)?\s*=>)")
_CALLABLE_KEY = re.compile(r"(formatter|callback)s?$", re.IGNORECASE)


# =============================================================================
# COLORS
# =============================================================================


def synthesize_colors(
    stage_count: int,
    segment_count: int,
    policy: ColorPolicy = "palette",
    rng: np.random.Generator | None = None,
) -> list[ColorSpec]:
    """Create one list of colors per stage, aligned to sub-segments.

    Args:
        stage_count: Number of funnel stages
        segment_count: Number of sub-segments per stage (at least 1 is used)
        policy: "palette" cycles FUNNEL_PALETTE deterministically,
                "random" samples a uniform hue at fixed saturation/lightness
        rng: Random generator for the "random" policy

    Returns:
        List of color lists, one per stage
    """
    segment_count = max(segment_count, 1)

    if policy == "palette":
        n = len(FUNNEL_PALETTE)
        return [
            [FUNNEL_PALETTE[(stage + seg) % n] for seg in range(segment_count)]
            for stage in range(stage_count)
        ]

    if policy == "random":
        rng = rng if rng is not None else np.random.default_rng()
        hues = rng.uniform(0, 360, size=(stage_count, segment_count))
        return [
            [f"hsl({hue:.0f}, {RANDOM_SATURATION}%, {RANDOM_LIGHTNESS}%)" for hue in row]
            for row in hues
        ]

    raise ValueError(f"Unknown color policy: {policy}")


# =============================================================================
# CSV
# =============================================================================


def _to_number(cell: str) -> float:
    """Parse a numeric cell; anything non-numeric becomes NaN."""
    try:
        return float(cell.strip())
    except ValueError:
        return float("nan")


def parse_csv(
    text: str,
    *,
    color_policy: ColorPolicy = "palette",
    rng: np.random.Generator | None = None,
) -> FunnelData:
    """Parse CSV funnel data.

    Expected format:
        Stage,US,EU
        Top,100,50
        Mid,60,20

    The first header cell is ignored; the remaining header cells become
    sub-labels. Each following row contributes one stage label and one value
    vector. Rows whose length differs from the header are kept as-is and
    non-numeric cells become NaN; FunnelData.ensure_renderable() reports both.

    Args:
        text: Raw CSV text
        color_policy: How to synthesize stage colors
        rng: Random generator for the "random" color policy

    Returns:
        FunnelData with synthesized colors
    """
    rows = [line.split(",") for line in text.strip().splitlines()]
    if not rows:
        return FunnelData(labels=[], sub_labels=[], values=[], colors=[])

    header, body = rows[0], rows[1:]
    sub_labels = [cell.strip() for cell in header[1:]]

    labels: list[str] = []
    values: list[list[float]] = []
    for row in body:
        labels.append(row[0].strip())
        values.append([_to_number(cell) for cell in row[1:]])

    if any(len(row) != len(header) for row in body):
        logger.debug(f"CSV has rows that don't match the header width ({len(header)})")

    colors = synthesize_colors(len(labels), len(sub_labels), color_policy, rng)
    return FunnelData(labels=labels, sub_labels=sub_labels, values=values, colors=colors)


# =============================================================================
# INLINE CONFIG
# =============================================================================


def _resolve_references(value: Any, callable_slot: bool = False) -> Any:
    """Replace formatter references in a parsed JSON tree.

    Function source is only rejected under keys that take a callable
    (``valueFormatter``, ``callbacks``...); elsewhere it is plain text.
    """
    if isinstance(value, dict):
        return {
            k: _resolve_references(v, callable_slot or bool(_CALLABLE_KEY.search(k)))
            for k, v in value.items()
        }
    if isinstance(value, list):
        return [_resolve_references(v, callable_slot) for v in value]
    if is_formatter_reference(value):
        return resolve_formatter_reference(value)
    if callable_slot and isinstance(value, str) and _FUNCTION_STRING.match(value):
        raise InlineConfigError(
            "Inline configs cannot embed functions; use a 'formatter:<name>' reference",
            raw_text=value,
        )
    return value


def parse_inline_config(text: str) -> dict[str, Any] | None:
    """Parse a config blob found in an HTML comment inside a container.

    Line breaks and tabs are removed first, then the text is parsed as JSON.
    ``"formatter:<name>"`` strings are replaced with registered formatters.
    Function source under a formatter or callback key makes the whole config
    unusable; the same text in labels or other fields is kept as-is.

    Returns:
        The config mapping, or None when the text isn't a usable config
        (the normal "no inline override" case)
    """
    cleaned = _LINE_BREAKS.sub("", text).strip()
    if not cleaned:
        return None

    try:
        config = json.loads(cleaned)
    except json.JSONDecodeError:
        return None

    if not isinstance(config, dict):
        return None

    try:
        return _resolve_references(config)
    except FunnelChartError as e:
        logger.warning(f"Ignoring inline config: {e.message}")
        return None
