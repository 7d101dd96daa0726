import dataclasses
import logging
from typing import Any, Callable, Iterator, Protocol

from psd2json.core.geometry import Bounds
from psd2json.core.model import Document, EffectSet, LayerNode
from psd2json.image_utils import get_image_size
from psd2json.options import ConversionOptions
from psd2json.resource_limits import ResourceLimits

logger = logging.getLogger(__name__)

StyleRecord = dict[str, Any]
ImageEncoder = Callable[[Any], "str | None"]


@dataclasses.dataclass(frozen=True)
class ConversionContext:
    """Per-conversion state shared by the converter mixins.

    Args:
        width: Document width in pixels.
        height: Document height in pixels.
        options: Validated conversion options.
        image_encoder: Renders a raster payload to a data URI. When None, image
            layers get ``value=None``.
        limits: Resource limits.
    """

    width: int
    height: int
    options: ConversionOptions = dataclasses.field(default_factory=ConversionOptions)
    image_encoder: ImageEncoder | None = None
    limits: ResourceLimits = dataclasses.field(default_factory=ResourceLimits)

    def encode_image(self, payload: Any) -> str | None:
        """Encode a raster payload, or None when it cannot be encoded.

        Encoder failures are logged and never propagate.
        """
        if payload is None or self.image_encoder is None:
            return None

        if self.limits.is_image_dimension_limited():
            size = get_image_size(payload)
            if size is not None and max(size) > self.limits.max_image_dimension:
                logger.warning(
                    f"Image size {size[0]}x{size[1]} exceeds the maximum dimension "
                    f"{self.limits.max_image_dimension}, skipping encoding."
                )
                return None

        try:
            return self.image_encoder(payload)
        except Exception as e:
            logger.warning(f"Failed to encode image: {e}")
            return None


class ConverterProtocol(Protocol):
    """Converter state protocol."""

    document: Document
    context: ConversionContext

    # Layer methods
    def iter_layers(self) -> Iterator[LayerNode]: ...
    def classify(self, layer: LayerNode) -> str: ...
    def should_include(self, layer: LayerNode) -> bool: ...
    def create_base_styles(self, layer: LayerNode, bounds: Bounds) -> StyleRecord: ...
    def set_opacity(self, opacity: float, styles: StyleRecord) -> None: ...
    def set_blend_mode(self, blend_mode: str | None, styles: StyleRecord) -> None: ...
    def convert_text_layer(self, layer: LayerNode) -> StyleRecord: ...
    def convert_image_layer(self, layer: LayerNode) -> StyleRecord: ...

    # Text methods
    def apply_text_styles(self, layer: LayerNode, styles: StyleRecord) -> None: ...

    # Layer effects
    def apply_effects(
        self, styles: StyleRecord, effects: EffectSet | None, is_text: bool
    ) -> None: ...
