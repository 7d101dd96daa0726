import base64
import io
import logging
from typing import Any

import numpy as np
from PIL import Image

logger = logging.getLogger(__name__)

DEFAULT_IMAGE_FORMAT = "PNG"


def to_pil(payload: Any) -> Image.Image:
    """Convert a raster payload to a PIL image.

    Accepts PIL images and numpy arrays of shape (H, W), (H, W, 3) or
    (H, W, 4). Float arrays are assumed to be in [0, 1].
    """
    if isinstance(payload, Image.Image):
        return payload
    if isinstance(payload, np.ndarray):
        array = payload
        if array.dtype.kind == "f":
            array = np.clip(array * 255.0 + 0.5, 0, 255)
        array = array.astype(np.uint8)
        if array.ndim == 3 and array.shape[2] == 1:
            array = array[:, :, 0]
        if array.ndim == 2 or (array.ndim == 3 and array.shape[2] in (3, 4)):
            # Mode is inferred as L, RGB or RGBA.
            return Image.fromarray(array)
        raise ValueError(f"Unsupported pixel array shape: {payload.shape}")
    raise TypeError(f"Unsupported raster payload: {type(payload).__name__}")


def get_image_size(payload: Any) -> tuple[int, int] | None:
    """Return (width, height) of a raster payload, or None if unknown."""
    if isinstance(payload, Image.Image):
        return payload.size
    if isinstance(payload, np.ndarray) and payload.ndim >= 2:
        return int(payload.shape[1]), int(payload.shape[0])
    return None


def encode_image(image: Image.Image, format: str = DEFAULT_IMAGE_FORMAT) -> bytes:
    """Encode a PIL image to bytes in the specified format.

    For JPEG format, RGBA images are automatically converted to RGB with a white background.
    """
    if format.upper() == "JPEG" and image.mode == "RGBA":
        rgb_image = Image.new("RGB", image.size, (255, 255, 255))
        rgb_image.paste(image, mask=image.split()[3])  # Use alpha as mask
        image = rgb_image

    with io.BytesIO() as output:
        image.save(output, format=format.upper())
        return output.getvalue()


def encode_data_uri(payload: Any, format: str = DEFAULT_IMAGE_FORMAT) -> str:
    """Encode a raster payload as a base64 data URI."""
    image_bytes = encode_image(to_pil(payload), format)
    base64_data = base64.b64encode(image_bytes).decode("utf-8")
    return f"data:image/{format.lower()};base64,{base64_data}"


def decode_data_uri(data_uri: str, mode: str | None = None) -> Image.Image:
    """Decode a base64 data URI to a PIL image."""
    _, base64_data = data_uri.split(",", 1)
    with io.BytesIO(base64.b64decode(base64_data)) as input:
        image = Image.open(input)
        image.load()
    if mode is not None:
        return image.convert(mode)
    return image
