import logging
import math
from typing import Any, Iterator

from psd2json.css_utils import format_percent, num2str
from psd2json.core.color_utils import color_to_hex
from psd2json.core.model import GradientSpec, GradientStop

logger = logging.getLogger(__name__)

NOISE_GRADIENT = "linear-gradient(45deg, #888888, #aaaaaa)"


def normalize_stop_location(location: Any) -> float:
    """Normalize a stop location of unknown unit to a percentage.

    Fractions, percent, 12-bit (0-4096) and 16-bit locations are detected by
    magnitude. Non-numeric or non-finite locations return NaN.
    """
    try:
        n = float(location)
    except (TypeError, ValueError):
        return math.nan
    if not math.isfinite(n):
        return math.nan
    if n < 0:
        return 0.0
    if n <= 1:
        return n * 100.0
    if n <= 100:
        return n
    if n <= 4096:
        return n / 4096.0 * 100.0
    return n / 65535.0 * 100.0


def css_angle(angle: float) -> float:
    """Convert a document angle to a CSS linear-gradient angle.

    Document angles are measured from the positive x axis; CSS angles are
    clockwise from "up".
    """
    return (90.0 - angle) % 360.0


class GradientStops:
    """Color stops of a gradient, normalized for CSS.

    Example::

        stops = GradientStops(spec.stops)
        for position, color in stops:
            # position: float (0.0-100.0)
            # color: str ("#rrggbb")

    Args:
        stops: Gradient stops with locations of any supported unit.
    """

    def __init__(self, stops: list[GradientStop]):
        self.stops = stops
        self._build_positions()

    def _build_positions(self) -> None:
        """Normalize, redistribute, clamp and sort stop positions."""
        positions = [normalize_stop_location(stop.location) for stop in self.stops]
        count = len(positions)
        finite = [p for p in positions if math.isfinite(p)]
        if not finite or (len(finite) == count and min(finite) == max(finite)):
            # Degenerate locations, spread the stops evenly.
            if count > 1:
                logger.debug("Degenerate gradient stops, redistributing evenly.")
            positions = [i / (count - 1) * 100.0 if count > 1 else 0.0 for i in range(count)]
        positions = [
            min(100.0, max(0.0, p)) if math.isfinite(p) else 0.0 for p in positions
        ]
        # Stable order: position first, then document order.
        self.order = sorted(range(count), key=lambda i: (positions[i], i))
        self.positions = positions

    def __len__(self) -> int:
        return len(self.stops)

    def __iter__(self) -> Iterator[tuple[float, str]]:
        for index in self.order:
            color = self.stops[index].color
            hex_color = color_to_hex(color) if color is not None else "#000000"
            yield self.positions[index], hex_color

    def to_css(self) -> str:
        """Render stops as ``#rrggbb P%`` fragments."""
        return ", ".join(
            f"{color} {format_percent(position)}%" for position, color in self
        )


def render_gradient(spec: GradientSpec) -> str:
    """Render a gradient as a CSS gradient function.

    Args:
        spec: Gradient stops, style and angle.

    Returns:
        CSS gradient string, or "transparent" when there are no stops.
    """
    if spec.noise:
        # Noise gradients have no CSS counterpart.
        return NOISE_GRADIENT

    if not spec.stops:
        return "transparent"

    color_stops = GradientStops(spec.stops).to_css()
    angle = spec.angle if spec.angle is not None else 0.0
    linear_angle = num2str(float(css_angle(angle)))

    style = (spec.style or "linear").lower()
    if style == "radial":
        return f"radial-gradient(circle at center, {color_stops})"
    if style == "angle":
        return f"conic-gradient(from {num2str(float(angle))}deg at center, {color_stops})"
    if style == "reflected":
        return f"repeating-linear-gradient({linear_angle}deg, {color_stops})"
    if style == "diamond":
        # Closest approximation, CSS has no diamond gradient.
        return f"radial-gradient(ellipse at center, {color_stops})"
    if style != "linear":
        logger.warning(f"Unsupported gradient style '{spec.style}', using linear.")
    return f"linear-gradient({linear_angle}deg, {color_stops})"
