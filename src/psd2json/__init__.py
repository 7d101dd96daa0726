from logging import getLogger
from typing import Any

from psd_tools import PSDImage

from psd2json.core.base import ConversionContext, ImageEncoder
from psd2json.core.converter import ConversionResult, Converter
from psd2json.core.model import Document, LayerNode
from psd2json.errors import (
    ErrorCode,
    PSDConversionError,
    handle_conversion_error,
)
from psd2json.image_utils import encode_data_uri
from psd2json.options import ConversionOptions
from psd2json.reader import DocumentReader, Source, decode, read_source
from psd2json.resource_limits import ResourceLimits
from psd2json.version import __version__ as __version__

logger = getLogger(__name__)

__all__ = [
    "ConversionOptions",
    "ConversionResult",
    "Document",
    "ErrorCode",
    "LayerNode",
    "PSDConversionError",
    "ResourceLimits",
    "convert_document",
    "psd2json",
    "resolve_limits",
]


def psd2json(
    source: Source | PSDImage,
    limits: ResourceLimits | None = None,
    **options: Any,
) -> ConversionResult:
    """Convert a PSD to style records.

    Example::

        from psd2json import psd2json

        result = psd2json("example.psd", include_hidden=True)
        result.to_dict()  # {"texts": [...], "images": [...]}

    Args:
        source: PSD bytes, a file path, a binary file object or a decoded
            PSDImage.
        limits: Resource limits. Defaults to ``ResourceLimits.default()``.
        **options: See :class:`~psd2json.options.ConversionOptions`.

    Raises:
        PSDConversionError: On invalid input, options or any fatal failure.
    """
    conversion_options = ConversionOptions.from_kwargs(**options)
    limits = resolve_limits(limits)

    try:
        if isinstance(source, PSDImage):
            psdimage = source
        else:
            data = read_source(source, limits)
            if conversion_options.logging:
                logger.info(f"Parsing PSD buffer ({len(data)} bytes)")
            psdimage = decode(data)
        reader = DocumentReader(psdimage, limits)
        document = reader.read()
    except Exception as e:
        handle_conversion_error(e, "PSD parsing")

    result = _convert(document, encode_data_uri, limits, conversion_options)
    result.errors[:0] = reader.errors
    return result


def convert_document(
    document: Document,
    image_encoder: ImageEncoder | None = encode_data_uri,
    limits: ResourceLimits | None = None,
    **options: Any,
) -> ConversionResult:
    """Convert an already decoded document to style records.

    Args:
        document: Document model, e.g. from :func:`psd2json.reader.read_psd` or
            built by hand.
        image_encoder: Renders raster payloads to data URIs. Pass None to skip
            image encoding.
        limits: Resource limits. Defaults to ``ResourceLimits.default()``.
        **options: See :class:`~psd2json.options.ConversionOptions`.
    """
    conversion_options = ConversionOptions.from_kwargs(**options)
    limits = resolve_limits(limits)
    return _convert(document, image_encoder, limits, conversion_options)


def resolve_limits(limits: ResourceLimits | None) -> ResourceLimits:
    """Return the given limits, or the defaults from the environment.

    Raises:
        PSDConversionError: INVALID_OPTIONS when an environment variable is
            malformed.
    """
    if limits is not None:
        return limits
    try:
        return ResourceLimits.default()
    except ValueError as e:
        raise PSDConversionError(str(e), ErrorCode.INVALID_OPTIONS, e) from e


def _convert(
    document: Document,
    image_encoder: ImageEncoder | None,
    limits: ResourceLimits,
    options: ConversionOptions,
) -> ConversionResult:
    if document.width <= 0 or document.height <= 0:
        raise PSDConversionError(
            f"Invalid document dimensions: {document.width}x{document.height}",
            ErrorCode.INVALID_DIMENSIONS,
            {"width": document.width, "height": document.height},
        )
    if options.logging:
        logger.info(
            f"Converting document {document.width}x{document.height} "
            f"with {len(document)} top-level layers"
        )

    context = ConversionContext(
        width=document.width,
        height=document.height,
        options=options,
        image_encoder=image_encoder,
        limits=limits,
    )
    try:
        return Converter(document, context).build()
    except Exception as e:
        handle_conversion_error(e, "layer conversion")
