import logging

from psd2json.css_utils import num2str, px
from psd2json.core.base import ConverterProtocol, StyleRecord
from psd2json.core.color_utils import color_to_css
from psd2json.core.constants import DEFAULT_FONT_SIZE, JUSTIFICATION, TEXT_ALIGN_VALUES
from psd2json.core.geometry import effective_font_size
from psd2json.core.model import CharacterStyle, LayerNode, ParagraphStyle, TextPayload

logger = logging.getLogger(__name__)


class TextConverter(ConverterProtocol):
    """Text converter mixin.

    Character and paragraph styles come from the dominant style run and the
    first paragraph. Mixed styles within one layer are not represented.
    """

    def apply_text_styles(self, layer: LayerNode, styles: StyleRecord) -> None:
        """Add font and paragraph properties of a text layer."""
        text = layer.text
        if text is None:
            return
        self.set_character_styles(text, styles)
        self.set_paragraph_styles(text.paragraph_style, styles)

    def set_character_styles(self, text: TextPayload, styles: StyleRecord) -> None:
        style: CharacterStyle = text.style

        if style.font_family:
            styles["fontFamily"] = style.font_family

        font_size = effective_font_size(text)
        if font_size is not None and font_size > 0:
            styles["fontSize"] = px(float(font_size))

        if style.font_weight is not None:
            styles["fontWeight"] = style.font_weight
        if style.faux_bold:
            styles["fontWeight"] = "bold"
        if style.faux_italic:
            styles["fontStyle"] = "italic"

        if style.fill_color is not None:
            styles["color"] = color_to_css(style.fill_color)

        if style.tracking is not None:
            # Tracking is in thousandths of an em.
            styles["letterSpacing"] = f"{style.tracking / 1000:.3f}em"

        if style.leading is not None:
            reference = style.font_size or DEFAULT_FONT_SIZE
            styles["lineHeight"] = max(1.0, style.leading / reference)

        decorations = []
        if style.underline:
            decorations.append("underline")
        if style.strikethrough:
            decorations.append("line-through")
        if decorations:
            styles["textDecoration"] = " ".join(decorations)

        if style.horizontal_scale is not None and style.horizontal_scale != 1.0:
            styles["transform"] = f"scaleX({num2str(float(style.horizontal_scale), 4)})"

        if style.baseline_shift is not None:
            styles["verticalAlign"] = px(float(style.baseline_shift))

        if style.auto_kerning is False:
            styles["fontKerning"] = "none"
        if style.ligatures is False:
            styles["fontVariantLigatures"] = "none"

    def set_paragraph_styles(
        self, paragraph: ParagraphStyle, styles: StyleRecord
    ) -> None:
        if paragraph.justification is not None:
            styles["textAlign"] = text_align(paragraph.justification)

        for attr, key in (
            ("first_line_indent", "textIndent"),
            ("start_indent", "marginLeft"),
            ("end_indent", "marginRight"),
            ("space_before", "marginTop"),
            ("space_after", "marginBottom"),
        ):
            value = getattr(paragraph, attr)
            if value is not None:
                styles[key] = px(float(value))


def text_align(justification: int | str) -> str:
    """Map a justification code or name to a CSS text-align value."""
    if isinstance(justification, str):
        value = justification.strip().lower()
        if value in TEXT_ALIGN_VALUES:
            return value
    elif isinstance(justification, int) and justification in JUSTIFICATION:
        return JUSTIFICATION[justification]
    logger.debug(f"Unknown justification {justification!r}, using left.")
    return "left"
