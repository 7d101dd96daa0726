"""Layer geometry.

Plain layers use their stored rectangle. Text layers carry a text box in
their own coordinate space plus an affine transform, so the on-canvas box is
the axis-aligned hull of the transformed corners.
"""

import dataclasses
import logging
import math
from typing import NamedTuple, Sequence

import numpy as np

from psd2json.css_utils import round_half_up
from psd2json.core.model import LayerNode, Rect, TextPayload

logger = logging.getLogger(__name__)


class Bounds(NamedTuple):
    """Resolved on-canvas box in integer document pixels."""

    left: int
    top: int
    right: int
    bottom: int
    width: int
    height: int


@dataclasses.dataclass(frozen=True)
class Transform:
    """Affine transform matrix.

    Coefficients follow the ``(a, b, c, d, e, f)`` order, i.e.
    ``x' = xx * x + xy * y + tx`` and ``y' = yx * x + yy * y + ty``.
    """

    xx: float
    yx: float
    xy: float
    yy: float
    tx: float
    ty: float

    @classmethod
    def from_sequence(cls, values: Sequence[float] | None) -> "Transform | None":
        """Build a transform, or None when absent or all coefficients are zero."""
        if values is None:
            return None
        coefficients = []
        for value in list(values)[:6]:
            try:
                number = float(value)
            except (TypeError, ValueError):
                number = 0.0
            coefficients.append(number if math.isfinite(number) else 0.0)
        coefficients += [0.0] * (6 - len(coefficients))
        if not any(coefficients):
            return None
        return cls(*coefficients)

    @property
    def matrix(self) -> np.ndarray:
        """2x3 matrix acting on homogeneous column vectors."""
        return np.array([[self.xx, self.xy, self.tx], [self.yx, self.yy, self.ty]])

    @property
    def scale_x(self) -> float:
        """Magnitude of the horizontal basis vector."""
        return math.hypot(self.xx, self.yx)

    def apply(self, points: np.ndarray) -> np.ndarray:
        """Transform an (N, 2) array of points."""
        homogeneous = np.hstack([points, np.ones((len(points), 1))])
        return homogeneous @ self.matrix.T

    def transform_rect(self, rect: Rect) -> Rect:
        """Axis-aligned bounding box of the transformed rectangle corners."""
        corners = np.array(
            [
                [rect.left, rect.top],
                [rect.right, rect.top],
                [rect.right, rect.bottom],
                [rect.left, rect.bottom],
            ],
            dtype=float,
        )
        transformed = self.apply(corners)
        xs, ys = transformed[:, 0], transformed[:, 1]
        return Rect(
            left=float(xs.min()),
            top=float(ys.min()),
            right=float(xs.max()),
            bottom=float(ys.max()),
        )


def round_rect(rect: Rect) -> Bounds:
    """Round each edge, then derive the size from the rounded edges."""
    left = round_half_up(rect.left)
    top = round_half_up(rect.top)
    right = round_half_up(rect.right)
    bottom = round_half_up(rect.bottom)
    return Bounds(
        left=left,
        top=top,
        right=right,
        bottom=bottom,
        width=max(0, right - left),
        height=max(0, bottom - top),
    )


def get_nominal_text_box(layer: LayerNode) -> Rect:
    """Text box before the transform: box bounds, bounding box or layer rect."""
    text = layer.text
    if text is not None:
        if text.box_bounds is not None:
            return text.box_bounds
        if text.bounding_box is not None:
            return text.bounding_box
    return layer.rect


def get_text_box(layer: LayerNode) -> Rect:
    """Unrounded on-canvas box of a text layer."""
    nominal = get_nominal_text_box(layer)
    transform = Transform.from_sequence(layer.text.transform if layer.text else None)
    if transform is None:
        return nominal
    return transform.transform_rect(nominal)


def resolve_bounds(layer: LayerNode) -> Bounds:
    """Resolve the on-canvas box of a layer in document pixels."""
    if layer.text is not None and layer.text.text:
        return round_rect(get_text_box(layer))
    return round_rect(layer.rect)


def effective_font_size(text: TextPayload) -> float | None:
    """Font size corrected by the horizontal scale of the text transform.

    Returns None when the text has no font size.
    """
    font_size = text.style.font_size
    if font_size is None:
        return None
    transform = Transform.from_sequence(text.transform)
    if transform is None:
        return font_size
    scaled = font_size * transform.scale_x
    if scaled <= 0:
        return font_size
    return scaled
