"""Named value formatters that inline configs can reference.

Inline configs cannot carry code. Instead a string value of the form
``"formatter:<name>"`` is replaced with the callable registered here under
``<name>``.
"""

import logging
from collections.abc import Callable
from decimal import ROUND_HALF_UP, Decimal

from deck_funnels.exceptions import FormatterNotFoundError

logger = logging.getLogger(__name__)

Formatter = Callable[[float], str]

FORMATTER_PREFIX = "formatter:"

_FORMATTERS: dict[str, Formatter] = {}


def register_formatter(name: str) -> Callable[[Formatter], Formatter]:
    """Decorator registering a formatter under ``name``."""

    def decorator(func: Formatter) -> Formatter:
        if name in _FORMATTERS:
            logger.warning(f"Replacing registered formatter: {name}")
        _FORMATTERS[name] = func
        return func

    return decorator


def get_formatter(name: str) -> Formatter:
    """Look up a formatter by name.

    Raises:
        FormatterNotFoundError: If no formatter is registered under ``name``
    """
    try:
        return _FORMATTERS[name]
    except KeyError:
        raise FormatterNotFoundError(
            f"Unknown formatter: {name}",
            formatter_name=name,
            available=list_formatters(),
        ) from None


def list_formatters() -> list[str]:
    return sorted(_FORMATTERS)


def is_formatter_reference(value: object) -> bool:
    return isinstance(value, str) and value.startswith(FORMATTER_PREFIX)


def resolve_formatter_reference(value: str) -> Formatter:
    """Resolve ``"formatter:<name>"`` to its callable."""
    return get_formatter(value[len(FORMATTER_PREFIX):].strip())


# =============================================================================
# BUILT-IN FORMATTERS
# =============================================================================


def _round_half_up(value: float, places: int) -> str:
    """Fixed-point text with ties rounded away from zero (2.5 -> "3")."""
    quantum = Decimal(1).scaleb(-places)
    return str(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))


@register_formatter("raw")
def format_raw(value: float) -> str:
    return f"{value:g}"


@register_formatter("compact")
def format_compact(value: float) -> str:
    """138028 -> "138K", 2500000 -> "2.5M"."""
    if value >= 1_000_000:
        return f"{_round_half_up(value / 1_000_000, 1)}M"
    if value >= 1_000:
        return f"{_round_half_up(value / 1_000, 0)}K"
    return f"{value:g}"


@register_formatter("thousands")
def format_thousands(value: float) -> str:
    if float(value).is_integer():
        return f"{int(value):,}"
    return f"{value:,.2f}"


@register_formatter("percent")
def format_percent(value: float) -> str:
    """Format a 0-1 ratio as a percentage."""
    return f"{value * 100:.1f}%"
