from psd2json.core.base import ConversionContext
from psd2json.core.converter import ConversionResult, Converter
from psd2json.core.model import Document, LayerNode

__all__ = [
    "ConversionContext",
    "ConversionResult",
    "Converter",
    "Document",
    "LayerNode",
]
