import dataclasses
import functools
import logging
from typing import Any, Callable

from psd2json.core.base import ConversionContext, StyleRecord
from psd2json.core.effects import EffectConverter
from psd2json.core.layer import LayerConverter, LayerKind
from psd2json.core.model import Document, LayerNode
from psd2json.core.text import TextConverter
from psd2json.errors import LayerResult, safe_layer_conversion

logger = logging.getLogger(__name__)


@dataclasses.dataclass
class ConversionResult:
    """Style records partitioned by layer kind, in traversal order.

    ``errors`` lists the layers that failed to convert, as
    ``{"name": ..., "message": ...}`` entries.
    """

    texts: list[StyleRecord] = dataclasses.field(default_factory=list)
    images: list[StyleRecord] = dataclasses.field(default_factory=list)
    errors: list[dict[str, str]] = dataclasses.field(default_factory=list)

    def __len__(self) -> int:
        return len(self.texts) + len(self.images)

    def to_dict(self) -> dict[str, list[StyleRecord]]:
        return {"texts": self.texts, "images": self.images}


class Converter(LayerConverter, TextConverter, EffectConverter):
    """Converter main class.

    Example usage:

        from psd2json.core.converter import Converter
        from psd2json.core.model import Document

        converter = Converter(document, ConversionContext(document.width, document.height))
        result = converter.build()
        result.to_dict()  # {"texts": [...], "images": [...]}

    Args:
        document: Decoded document to convert.
        context: Conversion context holding options, limits and the image
            encoder.
    """

    def __init__(self, document: Document, context: ConversionContext) -> None:
        if not isinstance(document, Document):
            raise TypeError("document must be an instance of Document")
        self.document = document
        self.context = context

    def build(self) -> ConversionResult:
        """Convert every included layer and collect the records."""
        result = ConversionResult()
        registry: dict[LayerKind, tuple[Callable[[LayerNode], StyleRecord], list]] = {
            LayerKind.TEXT: (self.convert_text_layer, result.texts),
            LayerKind.IMAGE: (self.convert_image_layer, result.images),
        }

        for layer in self.iter_layers():
            if not self.should_include(layer):
                continue
            kind = self.classify(layer)
            if kind == LayerKind.UNSUPPORTED:
                logger.debug(f"Layer '{layer.name}' has no text or pixels, skipping.")
                continue

            self.log(f"Converting {kind.value} layer: '{layer.name}'")
            layer_fn, records = registry[kind]
            layer_result = safe_layer_conversion(
                layer.name, functools.partial(layer_fn, layer)
            )
            self.collect(layer_result, records, result)

        self.log(
            f"Converted {len(result.texts)} text and {len(result.images)} image layers"
            + (f", {len(result.errors)} failed" if result.errors else "")
        )
        return result

    def collect(
        self, layer_result: LayerResult, records: list, result: ConversionResult
    ) -> None:
        if not layer_result.ok:
            result.errors.append(
                {"name": layer_result.name, "message": str(layer_result.error)}
            )
        elif layer_result.record is not None:
            records.append(layer_result.record)

    def log(self, message: str, *args: Any) -> None:
        """Emit a progress message when the logging option is on."""
        if self.context.options.logging:
            logger.info(message, *args)
