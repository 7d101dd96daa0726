import logging
import math
import re
from typing import Any, Mapping

logger = logging.getLogger(__name__)

DEFAULT_NUMBER_DIGITS = 2

# Properties that stay unitless when rendered as CSS text.
UNITLESS_PROPERTIES = {"opacity", "lineHeight", "fontWeight", "zIndex"}

_UPPER_RE = re.compile(r"([A-Z])")


def num2str(num: int | float | bool, digit: int = DEFAULT_NUMBER_DIGITS) -> str:
    """Convert a number to a string, using the specified format for floats."""
    if isinstance(num, bool):
        return "true" if num else "false"
    if isinstance(num, int):
        return str(num)
    if isinstance(num, float):
        if num.is_integer():
            return str(int(num))
        # Format float with specified number of digits, and trim trailing zeros
        number = f"{num:.{digit}f}"
        if float(number) == 0.0:
            return "0"
        return f"{number[0]}{number[1:].rstrip('0').rstrip('.')}"
    raise ValueError(f"Unsupported type: {type(num)}")


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from negative infinity."""
    return int(math.floor(value + 0.5))


def px(value: int | float) -> str:
    """Format a length in pixels."""
    return f"{num2str(value)}px"


def format_percent(value: float) -> str:
    """Format a percentage clamped to [0, 100].

    Values below 1 keep two decimals, larger values one decimal.
    """
    if not math.isfinite(value):
        return "0.0"
    value = max(0.0, min(100.0, value))
    return f"{value:.2f}" if value < 1 else f"{value:.1f}"


def camel_to_kebab(name: str) -> str:
    """Convert a camelCase style property to its CSS name.

    Vendor prefixed properties such as ``WebkitTextFillColor`` become
    ``-webkit-text-fill-color``.
    """
    return _UPPER_RE.sub(lambda m: "-" + m.group(1).lower(), name)


def to_css(record: Mapping[str, Any], selector: str | None = None) -> str:
    """Render a style record as CSS declarations.

    The ``value`` entry carries layer content and is not rendered. Numeric
    values of length properties get a ``px`` unit.

    Example::

        to_css({"position": "absolute", "left": 10, "opacity": 0.5})
        # 'position: absolute; left: 10px; opacity: 0.5;'
    """
    declarations = []
    for key, value in record.items():
        if key == "value" or value is None:
            continue
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            text = num2str(value) if key in UNITLESS_PROPERTIES else px(value)
        else:
            text = str(value)
        declarations.append(f"{camel_to_kebab(key)}: {text};")
    body = " ".join(declarations)
    if selector is None:
        return body
    return "%s {\n  %s\n}" % (selector, "\n  ".join(declarations))
