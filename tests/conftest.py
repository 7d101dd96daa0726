import logging
from typing import Any

import numpy as np
import pytest

from psd2json.core.base import ConversionContext
from psd2json.core.converter import Converter
from psd2json.core.model import Document, LayerNode, TextPayload
from psd2json.options import ConversionOptions
from psd2json.resource_limits import ResourceLimits

logger = logging.getLogger(__name__)


def make_text_layer(name: str = "Text", text: str = "Hello", **kwargs: Any) -> LayerNode:
    """Create a text layer spanning (100, 50)-(500, 120) by default."""
    kwargs.setdefault("left", 100)
    kwargs.setdefault("top", 50)
    kwargs.setdefault("right", 500)
    kwargs.setdefault("bottom", 120)
    payload = kwargs.pop("payload", None) or TextPayload(text=text)
    return LayerNode(name=name, text=payload, **kwargs)


def make_image_layer(name: str = "Image", **kwargs: Any) -> LayerNode:
    """Create a raster layer with a small opaque red pixel array."""
    kwargs.setdefault("left", 10)
    kwargs.setdefault("top", 20)
    kwargs.setdefault("right", 42)
    kwargs.setdefault("bottom", 36)
    if "raster" not in kwargs:
        raster = np.zeros((16, 32, 4), dtype=np.uint8)
        raster[:, :, 0] = 255
        raster[:, :, 3] = 255
        kwargs["raster"] = raster
    return LayerNode(name=name, **kwargs)


def make_document(*layers: LayerNode, width: int = 1920, height: int = 1080) -> Document:
    return Document(width=width, height=height, children=list(layers))


def make_converter(
    document: Document | None = None,
    image_encoder: Any = None,
    limits: ResourceLimits | None = None,
    **options: Any,
) -> Converter:
    """Create a converter with a fresh context."""
    document = document or make_document()
    context = ConversionContext(
        width=document.width,
        height=document.height,
        options=ConversionOptions(**options),
        image_encoder=image_encoder,
        limits=limits or ResourceLimits(),
    )
    return Converter(document, context)


@pytest.fixture
def converter() -> Converter:
    """Converter over an empty 1920x1080 document."""
    return make_converter()
