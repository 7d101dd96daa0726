import enum
import logging
from typing import Iterator

from psd2json.core.base import ConverterProtocol, StyleRecord
from psd2json.core.constants import BLEND_MODES
from psd2json.core.geometry import Bounds, resolve_bounds
from psd2json.core.model import LayerNode
from psd2json.errors import ErrorCode, PSDConversionError

logger = logging.getLogger(__name__)


class LayerKind(str, enum.Enum):
    TEXT = "text"
    IMAGE = "image"
    UNSUPPORTED = "unsupported"


class LayerConverter(ConverterProtocol):
    """Main layer converter mixin."""

    def iter_layers(self) -> Iterator[LayerNode]:
        """Walk the layer tree depth-first, parents before children.

        Every node is yielded regardless of visibility; filtering happens per
        node in :meth:`should_include`.

        Raises:
            PSDConversionError: RESOURCE_LIMIT_EXCEEDED when the nesting is
                deeper than the configured limit.
        """
        limits = self.context.limits
        stack = [(layer, 1) for layer in reversed(self.document.children)]
        while stack:
            layer, depth = stack.pop()
            if limits.is_layer_depth_limited() and depth > limits.max_layer_depth:
                raise PSDConversionError(
                    f"Layer nesting depth exceeds the limit of "
                    f"{limits.max_layer_depth}: '{layer.name}'",
                    ErrorCode.RESOURCE_LIMIT_EXCEEDED,
                    {"depth": depth, "max_layer_depth": limits.max_layer_depth},
                )
            yield layer
            stack.extend((child, depth + 1) for child in reversed(layer.children))

    def classify(self, layer: LayerNode) -> LayerKind:
        if layer.text is not None and layer.text.text:
            return LayerKind.TEXT
        if layer.raster is not None:
            return LayerKind.IMAGE
        return LayerKind.UNSUPPORTED

    def should_include(self, layer: LayerNode) -> bool:
        if layer.visible or self.context.options.include_hidden:
            return True
        logger.debug(f"Layer '{layer.name}' is invisible, skipping.")
        return False

    def convert_text_layer(self, layer: LayerNode) -> StyleRecord:
        """Convert a text layer to a style record."""
        styles = self.create_base_styles(layer, resolve_bounds(layer))
        self.apply_text_styles(layer, styles)
        self.apply_effects(styles, layer.effects, is_text=True)
        styles["value"] = layer.text.text if layer.text is not None else ""
        return styles

    def convert_image_layer(self, layer: LayerNode) -> StyleRecord:
        """Convert a raster layer to a style record."""
        styles = self.create_base_styles(layer, resolve_bounds(layer))
        self.apply_effects(styles, layer.effects, is_text=False)
        styles["value"] = self.context.encode_image(layer.raster)
        if styles["value"] is None:
            logger.debug(f"Layer '{layer.name}' has no encoded image data.")
        return styles

    def create_base_styles(self, layer: LayerNode, bounds: Bounds) -> StyleRecord:
        """Position, size, opacity and blend mode."""
        styles: StyleRecord = {"position": "absolute"}
        if self.context.options.units == "percent":
            width, height = self.context.width, self.context.height
            styles["left"] = to_percent(bounds.left, width)
            styles["top"] = to_percent(bounds.top, height)
            styles["width"] = to_percent(bounds.width, width)
            styles["height"] = to_percent(bounds.height, height)
        else:
            styles["left"] = bounds.left
            styles["top"] = bounds.top
            styles["width"] = bounds.width
            styles["height"] = bounds.height
        self.set_opacity(layer.opacity, styles)
        self.set_blend_mode(layer.blend_mode, styles)
        return styles

    def set_opacity(self, opacity: float, styles: StyleRecord) -> None:
        if opacity is not None and opacity < 1.0:
            styles["opacity"] = max(0.0, float(opacity))

    def set_blend_mode(self, blend_mode: str | None, styles: StyleRecord) -> None:
        if not blend_mode:
            return
        mode = str(blend_mode).strip().lower()
        if mode in BLEND_MODES:
            styles["mixBlendMode"] = mode
        else:
            logger.debug(f"Unsupported blend mode '{blend_mode}', omitting.")


def to_percent(value: float, reference: float) -> str:
    """Format a length relative to a reference length."""
    if not reference:
        return "0.00%"
    return f"{value / reference * 100:.2f}%"
