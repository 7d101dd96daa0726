"""Color normalization.

Colors arrive in many colorspaces. Each colorspace is a small dataclass, and
:func:`normalize_color` dispatches on the type to produce a canonical
:class:`NormalizedColor` with 8-bit RGB channels and a 0-1 alpha.

CMYK and LAB conversions use the textbook formulas and are approximations;
they ignore color profiles.
"""

import colorsys
import dataclasses
import logging
import math
from typing import Any, Callable, Mapping, NamedTuple, Sequence, Union

import numpy as np

from psd2json.css_utils import round_half_up

logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class RGBColor:
    """8-bit RGB color with optional alpha."""

    r: float
    g: float
    b: float
    alpha: float | None = None


@dataclasses.dataclass(frozen=True)
class FloatRGBColor:
    """RGB color with channels in [0, 1]."""

    r: float
    g: float
    b: float
    alpha: float | None = None


@dataclasses.dataclass(frozen=True)
class GrayscaleColor:
    """Grayscale ink amount in [0, 255], where 0 is white."""

    k: float


@dataclasses.dataclass(frozen=True)
class HSBColor:
    """Hue in degrees, saturation and brightness in percent."""

    h: float
    s: float
    b: float


@dataclasses.dataclass(frozen=True)
class CMYKColor:
    """CMYK ink amounts in percent."""

    c: float
    m: float
    y: float
    k: float = 0.0


@dataclasses.dataclass(frozen=True)
class LabColor:
    """CIE L*a*b* color with L in [0, 100]."""

    l: float  # noqa: E741
    a: float
    b: float


@dataclasses.dataclass(frozen=True)
class LooseColor:
    """Numeric channels of unknown bit depth.

    Channel depth is guessed per value, see :func:`normalize_channel` and
    :func:`normalize_alpha`.
    """

    r: Any = 0
    g: Any = 0
    b: Any = 0
    a: Any = None


Color = Union[
    RGBColor, FloatRGBColor, GrayscaleColor, HSBColor, CMYKColor, LabColor, LooseColor
]


class NormalizedColor(NamedTuple):
    """Canonical color: 8-bit channels and alpha in [0, 1]."""

    r: int
    g: int
    b: int
    a: float = 1.0

    def to_hex(self, alpha: bool = True) -> str:
        """Render as ``#rrggbb``, or ``rgba()`` when translucent."""
        return to_hex(self.r, self.g, self.b, self.a if alpha else None)


# sRGB primaries and D65 reference white.
_D65_WHITE = np.array([0.95047, 1.0, 1.08883])
_XYZ_TO_LINEAR_SRGB = np.array(
    [
        [3.2404542, -1.5371385, -0.4985314],
        [-0.9692660, 1.8760108, 0.0415560],
        [0.0556434, -0.2040259, 1.0572252],
    ]
)


def _to_number(value: Any) -> float:
    """Coerce a value to float, or NaN when it is not numeric."""
    if value is None:
        return math.nan
    try:
        return float(value)
    except (TypeError, ValueError):
        return math.nan


def _finite(value: Any, default: float = 0.0) -> float:
    """Coerce a value to a finite float, or the default."""
    n = _to_number(value)
    return n if math.isfinite(n) else default


def clip_int(value: int | float, min_value: int = 0, max_value: int = 255) -> int:
    """Clip an int value to the specified range."""
    return max(min_value, min(max_value, int(value)))


def float2uint8(v: float) -> int:
    """Convert a float in the range [0.0, 1.0] to an integer in the range [0, 255]."""
    if not math.isfinite(v):
        return 0
    return clip_int(round_half_up(255 * v))


def normalize_channel(value: Any) -> int:
    """Normalize a channel value of unknown bit depth to [0, 255].

    Values in (0, 1] are fractions, (1, 255] are 8-bit, (255, 4095] are
    12-bit and anything larger is 16-bit.
    """
    n = _to_number(value)
    if not math.isfinite(n) or n <= 0:
        return 0
    if n <= 1:
        return float2uint8(n)
    if n <= 255:
        return clip_int(round_half_up(n))
    if n <= 4095:
        return clip_int(round_half_up(n / 4095 * 255))
    return clip_int(round_half_up(n / 65535 * 255))


def normalize_alpha(value: Any) -> float:
    """Normalize an alpha value of unknown scale to [0, 1].

    ``None`` means fully opaque.
    """
    if value is None:
        return 1.0
    n = _to_number(value)
    if not math.isfinite(n) or n <= 0:
        return 0.0
    if n <= 1:
        return n
    if n <= 100:
        return n / 100
    if n <= 255:
        return n / 255
    if n <= 4095:
        return n / 4095
    return min(1.0, n / 65535)


def to_hex(r: int, g: int, b: int, a: float | None = None) -> str:
    """Render 8-bit channels as ``#rrggbb``.

    A translucent alpha renders ``rgba(R, G, B, A)`` instead so that the
    transparency is not lost.
    """
    if a is not None and a < 1:
        return f"rgba({int(r)}, {int(g)}, {int(b)}, {a:.2f})"
    return f"#{int(r):02x}{int(g):02x}{int(b):02x}"


def hsb2rgb(h: float, s: float, v: float) -> tuple[float, float, float]:
    """Convert HSB (hue in degrees, s and v in [0, 1]) to RGB in [0, 1]."""
    return colorsys.hsv_to_rgb((h % 360.0) / 360.0, s, v)


def cmyk2rgb(values: Sequence[float]) -> tuple[float, float, float]:
    """Convert CMYK color in [0, 1] to RGB color in [0, 255]."""
    assert len(values) == 4
    c, m, y, k = (min(1.0, max(0.0, v)) for v in values)
    return (
        255.0 * (1.0 - c) * (1.0 - k),
        255.0 * (1.0 - m) * (1.0 - k),
        255.0 * (1.0 - y) * (1.0 - k),
    )


def lab2rgb(l: float, a: float, b: float) -> tuple[float, float, float]:  # noqa: E741
    """Convert CIE L*a*b* to sRGB in [0, 1] through XYZ (D65)."""
    fy = (l + 16.0) / 116.0
    f = np.array([fy + a / 500.0, fy, fy - b / 200.0])
    cubed = f**3
    xyz = np.where(cubed > 0.008856, cubed, (f - 16.0 / 116.0) / 7.787) * _D65_WHITE
    linear = _XYZ_TO_LINEAR_SRGB @ xyz
    srgb = np.where(
        linear > 0.0031308,
        1.055 * np.power(np.clip(linear, 0.0, None), 1.0 / 2.4) - 0.055,
        12.92 * linear,
    )
    return tuple(float(c) for c in np.clip(srgb, 0.0, 1.0))  # type: ignore[return-value]


def _normalize_rgb(color: RGBColor) -> NormalizedColor:
    channels = (_to_number(v) for v in (color.r, color.g, color.b))
    r, g, b = (clip_int(round_half_up(c)) if math.isfinite(c) else 0 for c in channels)
    return NormalizedColor(r, g, b, normalize_alpha(color.alpha))


def _normalize_float_rgb(color: FloatRGBColor) -> NormalizedColor:
    r, g, b = (float2uint8(_to_number(v)) for v in (color.r, color.g, color.b))
    return NormalizedColor(r, g, b, normalize_alpha(color.alpha))


def _normalize_grayscale(color: GrayscaleColor) -> NormalizedColor:
    k = _to_number(color.k)
    value = 1.0 - (k / 255.0 if math.isfinite(k) else 0.0)
    gray = float2uint8(min(1.0, max(0.0, value)))
    return NormalizedColor(gray, gray, gray)


def _normalize_hsb(color: HSBColor) -> NormalizedColor:
    s = min(1.0, max(0.0, _finite(color.s) / 100.0))
    v = min(1.0, max(0.0, _finite(color.b) / 100.0))
    r, g, b = (float2uint8(c) for c in hsb2rgb(_finite(color.h), s, v))
    return NormalizedColor(r, g, b)


def _normalize_cmyk(color: CMYKColor) -> NormalizedColor:
    values = [_finite(v) / 100.0 for v in (color.c, color.m, color.y, color.k)]
    r, g, b = (clip_int(round_half_up(c)) for c in cmyk2rgb(values))
    return NormalizedColor(r, g, b)


def _normalize_lab(color: LabColor) -> NormalizedColor:
    srgb = lab2rgb(_finite(color.l), _finite(color.a), _finite(color.b))
    r, g, b = (float2uint8(c) for c in srgb)
    return NormalizedColor(r, g, b)


def _normalize_loose(color: LooseColor) -> NormalizedColor:
    return NormalizedColor(
        normalize_channel(color.r),
        normalize_channel(color.g),
        normalize_channel(color.b),
        normalize_alpha(color.a),
    )


_NORMALIZERS: dict[type, Callable[[Any], NormalizedColor]] = {
    RGBColor: _normalize_rgb,
    FloatRGBColor: _normalize_float_rgb,
    GrayscaleColor: _normalize_grayscale,
    HSBColor: _normalize_hsb,
    CMYKColor: _normalize_cmyk,
    LabColor: _normalize_lab,
    LooseColor: _normalize_loose,
}


def _first(data: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


def color_from_mapping(data: Mapping[str, Any]) -> Color:
    """Pick a color variant from the fields present in a mapping."""
    keys = set(data)
    if "l" in keys:
        return LabColor(
            l=_to_number(data["l"]),
            a=_to_number(data.get("a", 0)),
            b=_to_number(data.get("b", 0)),
        )
    if "h" in keys:
        return HSBColor(
            h=_to_number(data["h"]),
            s=_to_number(data.get("s", 0)),
            b=_to_number(data.get("b", 0)),
        )
    if {"c", "m", "y"} <= keys:
        return CMYKColor(
            c=_to_number(data["c"]),
            m=_to_number(data["m"]),
            y=_to_number(data["y"]),
            k=_to_number(data.get("k", 0)),
        )
    if "fr" in keys:
        return FloatRGBColor(
            r=_to_number(data["fr"]),
            g=_to_number(data.get("fg", 0)),
            b=_to_number(data.get("fb", 0)),
            alpha=_first(data, "a", "alpha"),
        )
    if "k" in keys and not keys & {"r", "red"}:
        return GrayscaleColor(k=_to_number(data["k"]))
    return LooseColor(
        r=_first(data, "r", "red", default=0),
        g=_first(data, "g", "green", default=0),
        b=_first(data, "b", "blue", default=0),
        a=_first(data, "a", "alpha"),
    )


def normalize_color(color: Color | Mapping[str, Any]) -> NormalizedColor:
    """Normalize a color in any supported colorspace.

    Args:
        color: A color variant, or a mapping dispatched by its fields.

    Returns:
        NormalizedColor with channels in [0, 255] and alpha in [0, 1].
    """
    if isinstance(color, Mapping):
        color = color_from_mapping(color)
    normalizer = _NORMALIZERS.get(type(color))
    if normalizer is None:
        raise TypeError(f"Unsupported color: {color!r}")
    return normalizer(color)


def color_to_css(color: Color | Mapping[str, Any], opacity: float = 1.0) -> str:
    """Render a color as ``#rrggbb`` or ``rgba()``, folding in an opacity."""
    normalized = normalize_color(color)
    alpha = min(1.0, max(0.0, normalized.a * opacity))
    return normalized._replace(a=alpha).to_hex()


def color_to_hex(color: Color | Mapping[str, Any]) -> str:
    """Render a color as ``#rrggbb``, ignoring alpha."""
    return normalize_color(color).to_hex(alpha=False)
