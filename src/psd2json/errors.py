"""Structured conversion errors.

Every fatal failure surfaces as a single :class:`PSDConversionError` carrying
an :class:`ErrorCode`. Per-layer failures never become fatal; they are
captured as :class:`LayerResult` values by :func:`safe_layer_conversion`.
"""

import dataclasses
import enum
import logging
from typing import Any, Callable, NoReturn

logger = logging.getLogger(__name__)


class ErrorCode(str, enum.Enum):
    INVALID_BUFFER = "INVALID_BUFFER"
    INVALID_PSD_FORMAT = "INVALID_PSD_FORMAT"
    INVALID_OPTIONS = "INVALID_OPTIONS"
    PARSING_FAILED = "PARSING_FAILED"
    INVALID_DIMENSIONS = "INVALID_DIMENSIONS"
    LAYER_CONVERSION_FAILED = "LAYER_CONVERSION_FAILED"
    UNSUPPORTED_FEATURE = "UNSUPPORTED_FEATURE"
    MEMORY_ERROR = "MEMORY_ERROR"
    RESOURCE_LIMIT_EXCEEDED = "RESOURCE_LIMIT_EXCEEDED"


class PSDConversionError(Exception):
    """Conversion failure with a machine readable code.

    Args:
        message: Human readable description.
        code: Error category.
        details: Optional underlying cause or extra context.
    """

    def __init__(self, message: str, code: ErrorCode, details: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = ErrorCode(code)
        self.details = details

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.message}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code.value,
            "message": self.message,
            "details": None if self.details is None else str(self.details),
        }


def handle_conversion_error(error: BaseException, context: str) -> NoReturn:
    """Re-raise an error as a PSDConversionError.

    Structured errors pass through unchanged. Anything else is categorized by
    its type and message, and chained as the cause.
    """
    if isinstance(error, PSDConversionError):
        raise error

    message = str(error)
    if isinstance(error, MemoryError):
        raise PSDConversionError(
            f"Out of memory during {context}", ErrorCode.MEMORY_ERROR, error
        ) from error

    lowered = message.lower()
    if "invalid psd" in lowered or "signature" in lowered:
        raise PSDConversionError(
            f"Invalid PSD file format: {message}",
            ErrorCode.INVALID_PSD_FORMAT,
            error,
        ) from error

    raise PSDConversionError(
        f"Failed during {context}: {message or type(error).__name__}",
        ErrorCode.PARSING_FAILED,
        error,
    ) from error


@dataclasses.dataclass(frozen=True)
class LayerResult:
    """Outcome of converting one layer.

    Exactly one of ``record`` and ``error`` is meaningful: a successful
    conversion that yields no output has both set to None.
    """

    name: str
    record: dict[str, Any] | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def safe_layer_conversion(
    name: str, fn: Callable[[], dict[str, Any] | None]
) -> LayerResult:
    """Run a single layer conversion and capture any failure."""
    try:
        return LayerResult(name=name, record=fn())
    except Exception as e:
        message = str(e) or type(e).__name__
        logger.warning(f"Failed to convert layer '{name}': {message}")
        logger.debug("Layer conversion traceback", exc_info=True)
        return LayerResult(name=name, error=message)
