"""Tests for text layer styles."""

import pytest

from psd2json.core.color_utils import FloatRGBColor, RGBColor
from psd2json.core.converter import Converter
from psd2json.core.model import CharacterStyle, LayerNode, ParagraphStyle, TextPayload
from psd2json.core.text import text_align

from .conftest import make_text_layer


def character_styles(converter: Converter, **kwargs) -> dict:
    transform = kwargs.pop("transform", None)
    payload = TextPayload(text="Hi", style=CharacterStyle(**kwargs), transform=transform)
    styles: dict = {}
    converter.set_character_styles(payload, styles)
    return styles


class TestCharacterStyles:
    def test_full(self, converter: Converter) -> None:
        styles = character_styles(
            converter,
            font_family="Arial-BoldMT",
            font_size=24,
            fill_color=RGBColor(255, 0, 0),
            tracking=50,
            leading=36,
            faux_bold=True,
            faux_italic=True,
            underline=True,
            strikethrough=True,
            horizontal_scale=0.9,
            baseline_shift=-2,
            auto_kerning=False,
            ligatures=False,
        )
        assert styles == {
            "fontFamily": "Arial-BoldMT",
            "fontSize": "24px",
            "fontWeight": "bold",
            "fontStyle": "italic",
            "color": "#ff0000",
            "letterSpacing": "0.050em",
            "lineHeight": 1.5,
            "textDecoration": "underline line-through",
            "transform": "scaleX(0.9)",
            "verticalAlign": "-2px",
            "fontKerning": "none",
            "fontVariantLigatures": "none",
        }

    def test_empty(self, converter: Converter) -> None:
        assert character_styles(converter) == {}

    def test_scaled_font_size(self, converter: Converter) -> None:
        styles = character_styles(converter, font_size=24, transform=(2, 0, 0, 2, 0, 0))
        assert styles == {"fontSize": "48px"}

    def test_fractional_font_size(self, converter: Converter) -> None:
        assert character_styles(converter, font_size=10.5) == {"fontSize": "10.5px"}

    @pytest.mark.parametrize(
        "font_size, leading, expected",
        [(24, 36, 1.5), (24, 10, 1.0), (None, 24, 2.0)],
    )
    def test_line_height(
        self, converter: Converter, font_size: float, leading: float, expected: float
    ) -> None:
        styles = character_styles(converter, font_size=font_size, leading=leading)
        assert styles["lineHeight"] == pytest.approx(expected)

    def test_font_weight(self, converter: Converter) -> None:
        assert character_styles(converter, font_weight=300) == {"fontWeight": 300}

    def test_translucent_fill(self, converter: Converter) -> None:
        styles = character_styles(converter, fill_color=FloatRGBColor(0, 0, 1, alpha=0.5))
        assert styles == {"color": "rgba(0, 0, 255, 0.50)"}

    def test_negative_tracking(self, converter: Converter) -> None:
        assert character_styles(converter, tracking=-25) == {"letterSpacing": "-0.025em"}

    def test_unit_scale(self, converter: Converter) -> None:
        assert character_styles(converter, horizontal_scale=1.0) == {}

    def test_kerning_on(self, converter: Converter) -> None:
        assert character_styles(converter, auto_kerning=True, ligatures=True) == {}


class TestParagraphStyles:
    def test_alignment_and_spacing(self, converter: Converter) -> None:
        styles: dict = {}
        converter.set_paragraph_styles(
            ParagraphStyle(
                justification=2, first_line_indent=10, end_indent=3, space_after=4.5
            ),
            styles,
        )
        assert styles == {
            "textAlign": "center",
            "textIndent": "10px",
            "marginRight": "3px",
            "marginBottom": "4.5px",
        }

    def test_empty(self, converter: Converter) -> None:
        styles: dict = {}
        converter.set_paragraph_styles(ParagraphStyle(), styles)
        assert styles == {}

    @pytest.mark.parametrize(
        "justification, expected",
        [
            (0, "left"),
            (1, "right"),
            (2, "center"),
            (3, "justify"),
            (6, "justify"),
            ("Center", "center"),
            ("justify", "justify"),
            (99, "left"),
            ("middle", "left"),
        ],
    )
    def test_text_align(self, justification: int | str, expected: str) -> None:
        assert text_align(justification) == expected


class TestApplyTextStyles:
    def test_text_layer(self, converter: Converter) -> None:
        payload = TextPayload(
            text="Hello",
            style=CharacterStyle(font_family="Helvetica", font_size=16),
            paragraph_style=ParagraphStyle(justification=1),
        )
        styles: dict = {}
        converter.apply_text_styles(make_text_layer(payload=payload), styles)
        assert styles == {
            "fontFamily": "Helvetica",
            "fontSize": "16px",
            "textAlign": "right",
        }

    def test_non_text_layer(self, converter: Converter) -> None:
        styles: dict = {"left": 0}
        converter.apply_text_styles(LayerNode(name="Pixels"), styles)
        assert styles == {"left": 0}
