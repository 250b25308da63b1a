"""
Module: exceptions

Purpose: Domain-specific exception hierarchy for funnel chart rendering.

Errors are raised at the layer that detects them and converted into
"skip this container" decisions by the coordinator. Data-resolution misses
(no inline config, failed fetch) are signalled with None, not exceptions.
"""

from typing import Any


class FunnelChartError(Exception):
    """Base exception for all funnel chart errors."""

    def __init__(self, message: str, *, context: dict[str, Any] | None = None) -> None:
        self.message = message
        self.context = context or {}
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message={self.message!r}, context={self.context!r})"


class DataValidationError(FunnelChartError):
    """Raised when funnel data fails shape or value validation."""

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        value: Any = None,
        problems: list[str] | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        ctx = context or {}
        if field is not None:
            ctx["field"] = field
        if value is not None:
            ctx["value"] = value
        if problems is not None:
            ctx["problems"] = problems
        super().__init__(message, context=ctx)
        self.field = field
        self.value = value
        self.problems = problems or []


class DataSourceError(FunnelChartError):
    """Raised when a data file cannot be fetched or decoded."""

    def __init__(
        self,
        message: str,
        *,
        data_source_id: str | None = None,
        source_format: str | None = None,
        status_code: int | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        ctx = context or {}
        if data_source_id is not None:
            ctx["data_source_id"] = data_source_id
        if source_format is not None:
            ctx["format"] = source_format
        if status_code is not None:
            ctx["status_code"] = status_code
        super().__init__(message, context=ctx)
        self.data_source_id = data_source_id
        self.source_format = source_format
        self.status_code = status_code


class InlineConfigError(FunnelChartError):
    """Raised when an inline comment config cannot be interpreted."""

    def __init__(
        self,
        message: str,
        *,
        raw_text: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        ctx = context or {}
        if raw_text is not None:
            # Truncate for logging
            ctx["raw_text"] = raw_text[:200]
        super().__init__(message, context=ctx)
        self.raw_text = raw_text


class FormatterNotFoundError(InlineConfigError):
    """Raised when an inline config references an unregistered formatter."""

    def __init__(
        self,
        message: str,
        *,
        formatter_name: str,
        available: list[str] | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        ctx = context or {}
        ctx["formatter_name"] = formatter_name
        if available is not None:
            ctx["available"] = available
        super().__init__(message, context=ctx)
        self.formatter_name = formatter_name
        self.available = available or []


class DeckMarkupError(FunnelChartError):
    """Raised when a deck document doesn't have the expected slide structure."""

    def __init__(
        self,
        message: str,
        *,
        source: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        ctx = context or {}
        if source is not None:
            ctx["source"] = source
        super().__init__(message, context=ctx)
        self.source = source


class RendererError(FunnelChartError):
    """Raised when the chart renderer cannot create or draw an instance."""

    def __init__(
        self,
        message: str,
        *,
        container_id: str | None = None,
        operation: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        ctx = context or {}
        if container_id is not None:
            ctx["container_id"] = container_id
        if operation is not None:
            ctx["operation"] = operation
        super().__init__(message, context=ctx)
        self.container_id = container_id
        self.operation = operation
