"""PSD reader.

Validates raw PSD bytes, decodes them with psd-tools and adapts the decoded
:class:`~psd_tools.PSDImage` into the :mod:`psd2json.core.model` tree.

Example::

    from psd2json.reader import read_psd

    document = read_psd(open("example.psd", "rb").read())
"""

import io
import logging
import os
from typing import IO, Any, Callable, Iterable, Union

from PIL import Image
from psd_tools import PSDImage
from psd_tools.api import layers, pil_io
from psd_tools.psd.descriptor import Descriptor
from psd_tools.terminology import Enum, Key, Klass

from psd2json.core.color_utils import (
    CMYKColor,
    Color,
    FloatRGBColor,
    GrayscaleColor,
    HSBColor,
    LabColor,
    RGBColor,
)
from psd2json.core.model import (
    Bevel,
    CharacterStyle,
    Document,
    DropShadow,
    EffectSet,
    Glow,
    GradientOverlay,
    GradientSpec,
    GradientStop,
    InnerShadow,
    LayerNode,
    ParagraphStyle,
    PatternOverlay,
    Stroke,
    TextPayload,
)
from psd2json.errors import ErrorCode, PSDConversionError, handle_conversion_error
from psd2json.resource_limits import ResourceLimits
from psd2json.typesetting import ParagraphSheet, StyleSheet, TypeSetting

logger = logging.getLogger(__name__)

Source = Union[bytes, bytearray, memoryview, str, os.PathLike, IO[bytes]]

PSD_SIGNATURE = b"8BPS"
MIN_PSD_SIZE = 26  # File header length.

# Gradient type enums of gradient overlays.
GRADIENT_STYLES: dict[bytes, str] = {
    Enum.Linear.value: "linear",
    Enum.Radial.value: "radial",
    b"Angl": "angle",
    b"Rflc": "reflected",
    b"Dmnd": "diamond",
}

STROKE_POSITIONS: dict[bytes, str] = {
    Enum.InsetFrame.value: "inside",
    Enum.OutsetFrame.value: "outside",
    Enum.CenteredFrame.value: "center",
}


def read_source(source: Source, limits: ResourceLimits | None = None) -> bytes:
    """Read the raw bytes of a PSD from bytes, a path or a binary file object.

    Raises:
        PSDConversionError: INVALID_BUFFER for unsupported or empty input,
            RESOURCE_LIMIT_EXCEEDED when a file exceeds the size limit.
    """
    limits = limits or ResourceLimits.default()
    if isinstance(source, (bytes, bytearray, memoryview)):
        data = bytes(source)
    elif isinstance(source, (str, os.PathLike)):
        if limits.is_file_size_limited():
            size = os.path.getsize(source)
            check_file_size(size, limits)
        with open(source, "rb") as f:
            data = f.read()
    elif hasattr(source, "read"):
        data = source.read()
        if not isinstance(data, bytes):
            raise PSDConversionError(
                "File object must be opened in binary mode",
                ErrorCode.INVALID_BUFFER,
            )
    else:
        raise PSDConversionError(
            f"Unsupported input type: {type(source).__name__}",
            ErrorCode.INVALID_BUFFER,
        )
    validate_buffer(data, limits)
    return data


def check_file_size(size: int, limits: ResourceLimits) -> None:
    if limits.is_file_size_limited() and size > limits.max_file_size:
        raise PSDConversionError(
            f"File size {size} bytes exceeds the limit of {limits.max_file_size} bytes",
            ErrorCode.RESOURCE_LIMIT_EXCEEDED,
            {"size": size, "max_file_size": limits.max_file_size},
        )


def validate_buffer(data: Any, limits: ResourceLimits | None = None) -> None:
    """Check that the buffer looks like a PSD file.

    Raises:
        PSDConversionError: INVALID_BUFFER when empty or not bytes,
            INVALID_PSD_FORMAT when the header is missing or wrong.
    """
    if not isinstance(data, (bytes, bytearray)) or len(data) == 0:
        raise PSDConversionError(
            "Input buffer is empty or not bytes", ErrorCode.INVALID_BUFFER
        )
    if len(data) < MIN_PSD_SIZE:
        raise PSDConversionError(
            f"Buffer is too small to be a PSD file: {len(data)} bytes",
            ErrorCode.INVALID_PSD_FORMAT,
        )
    if bytes(data[:4]) != PSD_SIGNATURE:
        raise PSDConversionError(
            f"Invalid PSD signature: {bytes(data[:4])!r}",
            ErrorCode.INVALID_PSD_FORMAT,
        )
    if limits is not None:
        check_file_size(len(data), limits)


def decode(data: bytes) -> PSDImage:
    """Decode PSD bytes with psd-tools."""
    try:
        return PSDImage.open(io.BytesIO(data))
    except Exception as e:
        handle_conversion_error(e, "PSD parsing")


def read_psd(source: Source, limits: ResourceLimits | None = None) -> Document:
    """Validate, decode and adapt a PSD into a document model."""
    limits = limits or ResourceLimits.default()
    psdimage = decode(read_source(source, limits))
    return DocumentReader(psdimage, limits).read()


class DocumentReader:
    """Adapt a psd-tools PSDImage to the document model.

    Args:
        psdimage: Decoded PSD.
        limits: Resource limits; the layer depth limit is enforced while
            reading.
    """

    def __init__(self, psdimage: PSDImage, limits: ResourceLimits | None = None):
        if not isinstance(psdimage, PSDImage):
            raise TypeError("psdimage must be an instance of PSDImage")
        self.psd = psdimage
        self.limits = limits or ResourceLimits.default()
        # Layers that could not be read, as {"name": ..., "message": ...}.
        self.errors: list[dict[str, str]] = []

    def read(self) -> Document:
        return Document(
            width=int(self.psd.width),
            height=int(self.psd.height),
            children=self.read_children(self.psd, 1),
        )

    def read_children(
        self, children: Iterable[layers.Layer], depth: int
    ) -> list[LayerNode]:
        """Read sibling layers, dropping any layer that fails to read.

        Raises:
            PSDConversionError: When the depth limit is exceeded.
        """
        nodes = []
        for layer in children:
            try:
                nodes.append(self.read_layer(layer, depth))
            except PSDConversionError:
                raise
            except Exception as e:
                message = str(e) or type(e).__name__
                logger.warning(f"Failed to read layer '{layer.name}': {message}")
                self.errors.append({"name": str(layer.name), "message": message})
        return nodes

    def read_layer(self, layer: layers.Layer, depth: int) -> LayerNode:
        if (
            self.limits.is_layer_depth_limited()
            and depth > self.limits.max_layer_depth
        ):
            raise PSDConversionError(
                f"Layer nesting depth exceeds the limit of "
                f"{self.limits.max_layer_depth}: '{layer.name}'",
                ErrorCode.RESOURCE_LIMIT_EXCEEDED,
                {"depth": depth, "max_layer_depth": self.limits.max_layer_depth},
            )
        logger.debug(f"Reading layer: '{layer.name}' ({layer.kind})")

        node = LayerNode(
            name=str(layer.name),
            visible=bool(layer.visible),
            left=float(layer.left),
            top=float(layer.top),
            right=float(layer.right),
            bottom=float(layer.bottom),
            opacity=float(layer.opacity) / 255.0,
            blend_mode=blend_mode_name(layer.blend_mode),
        )
        if layer.is_group():
            node.children = self.read_children(layer, depth + 1)
        elif isinstance(layer, layers.TypeLayer):
            node.text = self.read_text(layer)
        else:
            node.raster = self.read_raster(layer)
        node.effects = self.read_effects(layer)
        return node

    def read_raster(self, layer: layers.Layer) -> Image.Image | None:
        if not layer.has_pixels():
            logger.debug(f"Layer has no pixels: '{layer.name}' ({layer.kind}).")
            return None
        try:
            image = layer.topil()
            if image is None:
                logger.warning(f"Layer has no image data: '{layer.name}' ({layer.kind}).")
                return None
            return image.convert("RGBA")
        except Exception as e:
            logger.warning(f"Failed to read image data of '{layer.name}': {e}")
            return None

    def read_text(self, layer: layers.TypeLayer) -> TextPayload | None:
        try:
            setting = TypeSetting(layer._data)
            text = setting.text
            style = setting.get_dominant_style()
            paragraph = setting.get_first_paragraph()
            return TextPayload(
                text=text,
                style=self.read_character_style(setting, style),
                paragraph_style=read_paragraph_style(paragraph),
                transform=setting.transform,
                box_bounds=setting.box_bounds,
                bounding_box=setting.bounding_box,
            )
        except (AssertionError, KeyError, IndexError, TypeError, ValueError) as e:
            logger.warning(f"Failed to read text data of '{layer.name}': {e}")
            return None

    def read_character_style(
        self, setting: TypeSetting, style: StyleSheet | None
    ) -> CharacterStyle:
        if style is None:
            return CharacterStyle()
        fill_color = None
        argb = style.fill_color
        if style.fill_flag and argb is not None:
            a, r, g, b = argb
            fill_color = FloatRGBColor(r, g, b, alpha=a)
        return CharacterStyle(
            font_family=(
                setting.get_postscript_name(style.font)
                if style.font is not None
                else None
            ),
            font_size=style.font_size,
            fill_color=fill_color,
            tracking=style.tracking or None,
            leading=None if style.auto_leading else style.leading,
            faux_bold=style.faux_bold,
            faux_italic=style.faux_italic,
            underline=style.underline,
            strikethrough=style.strikethrough,
            horizontal_scale=style.horizontal_scale,
            baseline_shift=style.baseline_shift or None,
            auto_kerning=style.auto_kerning,
            ligatures=style.ligatures,
        )

    def read_effects(self, layer: layers.Layer) -> EffectSet | None:
        if not layer.has_effects():
            return None
        if not getattr(layer.effects, "enabled", True):
            logger.debug(f"Effects of '{layer.name}' are disabled.")
            return None

        readers: dict[str, tuple[str, Callable[[Any], Any]]] = {
            "drop_shadow": ("dropshadow", read_drop_shadow),
            "inner_shadow": ("innershadow", read_inner_shadow),
            "outer_glow": ("outerglow", read_glow),
            "inner_glow": ("innerglow", read_glow),
            "stroke": ("stroke", read_stroke),
            "gradient_overlay": ("gradientoverlay", read_gradient_overlay),
            "pattern_overlay": ("patternoverlay", self.read_pattern_overlay),
            "bevel": ("bevelemboss", read_bevel),
        }
        effect_set = EffectSet()
        for slot, (kind, reader) in readers.items():
            try:
                effect = next(iter(layer.effects.find(kind, enabled=True)), None)
                if effect is not None:
                    setattr(effect_set, slot, reader(effect))
            except Exception as e:
                logger.warning(f"Failed to read {kind} effect of '{layer.name}': {e}")
        return effect_set

    def read_pattern_overlay(self, effect: Any) -> PatternOverlay:
        descriptor = effect.pattern
        pattern_id = str(descriptor[Key.ID].value).rstrip("\x00")
        name = descriptor.get(Key.Name)
        image = None
        pattern_data = self.psd._get_pattern(pattern_id)
        if pattern_data is None:
            logger.warning(f"Pattern data not found: {pattern_id}")
        else:
            image = pil_io.convert_pattern_to_pil(pattern_data)
        return PatternOverlay(
            enabled=True,
            name=str(getattr(name, "value", name or "")).rstrip("\x00"),
            image=image,
        )


def read_paragraph_style(paragraph: ParagraphSheet | None) -> ParagraphStyle:
    if paragraph is None:
        return ParagraphStyle()
    return ParagraphStyle(
        justification=paragraph.justification,
        first_line_indent=paragraph.first_line_indent or None,
        start_indent=paragraph.start_indent or None,
        end_indent=paragraph.end_indent or None,
        space_before=paragraph.space_before or None,
        space_after=paragraph.space_after or None,
    )


def blend_mode_name(blend_mode: Any) -> str | None:
    """Name of a psd-tools blend mode, e.g. ``BlendMode.SOFT_LIGHT`` to ``soft-light``."""
    name = getattr(blend_mode, "name", None)
    if name is None:
        return None
    return str(name).lower().replace("_", "-")


def _number(value: Any, default: float = 0.0) -> float:
    """Numeric value of a descriptor item."""
    if value is None:
        return default
    value = getattr(value, "value", value)
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def enum_bytes(value: Any) -> bytes | None:
    """Raw bytes of an enumerated descriptor value."""
    value = getattr(value, "enum", value)
    value = getattr(value, "value", value)
    if isinstance(value, bytes):
        return bytes(value)
    if isinstance(value, str):
        return value.encode("ascii", errors="replace")
    return None


def _item(desc: Descriptor, code: bytes) -> Any:
    """Item of a descriptor by its four-character key code.

    Decoded descriptors key items by terminology members, which do not hash
    like raw bytes.
    """
    for key, value in desc.items():
        raw = getattr(key, "value", key)
        if isinstance(raw, bytes) and raw == code:
            return value
    return None


def descriptor_to_color(desc: Descriptor | None) -> Color | None:
    """Convert a color descriptor to a color variant."""
    if desc is None:
        return None
    class_id = getattr(desc.classID, "value", desc.classID)

    if class_id == Klass.RGBColor.value:
        if "redFloat" in desc:
            return FloatRGBColor(
                r=_number(desc.get("redFloat")),
                g=_number(desc.get("greenFloat")),
                b=_number(desc.get("blueFloat")),
            )
        return RGBColor(
            r=_number(desc.get(Key.Red)),
            g=_number(desc.get(Key.Green)),
            b=_number(desc.get(Key.Blue)),
        )

    if class_id == b"HSBC":
        return HSBColor(
            h=_number(_item(desc, b"H   ")),
            s=_number(_item(desc, b"Strt")),
            b=_number(_item(desc, b"Brgh")),
        )

    if class_id == Klass.CMYKColor.value:
        return CMYKColor(
            c=_number(desc.get(Enum.Cyan)),
            m=_number(desc.get(Enum.Magenta)),
            y=_number(desc.get(Enum.Yellow)),
            k=_number(desc.get(Enum.Black)),
        )

    if class_id == Klass.Grayscale.value:
        # Gray is ink coverage in percent.
        return GrayscaleColor(k=_number(desc.get(Enum.Gray)) / 100.0 * 255.0)

    if class_id == b"LbCl":
        return LabColor(
            l=_number(_item(desc, b"Lmnc")),
            a=_number(_item(desc, b"A   ")),
            b=_number(_item(desc, b"B   ")),
        )

    logger.warning(f"Unsupported color mode: {class_id!r}")
    return None


def read_drop_shadow(effect: Any) -> DropShadow:
    size = _number(effect.size)
    return DropShadow(
        color=descriptor_to_color(effect.color),
        opacity=_number(effect.opacity, 100.0) / 100.0,
        angle=_number(effect.angle),
        distance=_number(effect.distance),
        size=size,
        # Choke is a percentage of the size.
        choke=_number(effect.choke) / 100.0 * size,
    )


def read_inner_shadow(effect: Any) -> InnerShadow:
    return InnerShadow(
        color=descriptor_to_color(effect.color),
        opacity=_number(effect.opacity, 100.0) / 100.0,
        angle=_number(effect.angle),
        distance=_number(effect.distance),
        size=_number(effect.size),
    )


def read_glow(effect: Any) -> Glow:
    size = _number(effect.size)
    return Glow(
        color=descriptor_to_color(getattr(effect, "color", None)),
        opacity=_number(effect.opacity, 100.0) / 100.0,
        size=size,
        choke=_number(effect.choke) / 100.0 * size,
    )


def read_stroke(effect: Any) -> Stroke:
    position = enum_bytes(effect.position)
    return Stroke(
        color=descriptor_to_color(getattr(effect, "color", None)),
        opacity=_number(effect.opacity, 100.0) / 100.0,
        size=_number(effect.size),
        position=STROKE_POSITIONS.get(position),
    )


def read_gradient(
    descriptor: Descriptor, style: str = "linear", angle: float = 0.0
) -> GradientSpec:
    """Read a gradient descriptor into a gradient definition."""
    form = enum_bytes(_item(descriptor, b"GrdF"))
    if form == b"ClNs":
        return GradientSpec(style=style, angle=angle, noise=True)
    stops = [
        GradientStop(
            color=descriptor_to_color(stop.get(Key.Color)),
            location=_number(stop.get(Key.Location)),
        )
        for stop in descriptor.get(Key.Colors, [])
    ]
    return GradientSpec(stops=stops, style=style, angle=angle)


def read_gradient_overlay(effect: Any) -> GradientOverlay:
    gradient_type = enum_bytes(effect.type)
    style = GRADIENT_STYLES.get(gradient_type)
    if style is None:
        logger.debug(f"Unknown gradient type {gradient_type!r}, using linear.")
        style = "linear"
    return GradientOverlay(
        gradient=read_gradient(effect.gradient, style, _number(effect.angle)),
    )


def read_bevel(effect: Any) -> Bevel:
    return Bevel(
        highlight_color=descriptor_to_color(effect.highlight_color),
        shadow_color=descriptor_to_color(effect.shadow_color),
        highlight_opacity=_number(effect.highlight_opacity, 100.0) / 100.0,
        shadow_opacity=_number(effect.shadow_opacity, 100.0) / 100.0,
        size=_number(effect.size) or None,
        angle=_number(effect.angle) or None,
    )
