"""Tests for the layer tree to style record conversion."""

import logging
from typing import Any

import pytest

from psd2json import convert_document
from psd2json.core.converter import ConversionResult, Converter
from psd2json.core.model import (
    CharacterStyle,
    DropShadow,
    EffectSet,
    LayerNode,
    TextPayload,
)
from psd2json.errors import ErrorCode, PSDConversionError
from psd2json.image_utils import decode_data_uri
from psd2json.resource_limits import ResourceLimits

from .conftest import make_converter, make_document, make_image_layer, make_text_layer


def failing_encoder(payload: Any) -> str:
    raise RuntimeError("encoder crashed")


class TestConvertDocument:
    def test_text_layer(self) -> None:
        document = make_document(make_text_layer(name="Title", text="Hello"))
        result = convert_document(document)
        assert result.texts == [
            {
                "position": "absolute",
                "left": 100,
                "top": 50,
                "width": 400,
                "height": 70,
                "value": "Hello",
            }
        ]
        assert result.images == []
        assert result.errors == []

    def test_image_layer(self) -> None:
        result = convert_document(make_document(make_image_layer()))
        assert len(result.images) == 1
        record = result.images[0]
        assert (record["left"], record["top"]) == (10, 20)
        assert (record["width"], record["height"]) == (32, 16)
        assert record["value"].startswith("data:image/png;base64,")
        image = decode_data_uri(record["value"], mode="RGBA")
        assert image.size == (32, 16)
        assert image.getpixel((0, 0)) == (255, 0, 0, 255)

    def test_styled_text_layer(self) -> None:
        payload = TextPayload(
            text="Styled",
            style=CharacterStyle(font_family="Helvetica", font_size=18),
        )
        layer = make_text_layer(payload=payload, opacity=0.5, blend_mode="multiply")
        record = convert_document(make_document(layer)).texts[0]
        assert record["opacity"] == 0.5
        assert record["mixBlendMode"] == "multiply"
        assert record["fontFamily"] == "Helvetica"
        assert record["fontSize"] == "18px"
        assert record["value"] == "Styled"

    def test_traversal_order(self) -> None:
        group = LayerNode(
            name="Group",
            children=[make_text_layer(name="A", text="A"), make_image_layer(name="B")],
        )
        document = make_document(group, make_text_layer(name="C", text="C"))
        result = convert_document(document)
        assert [record["value"] for record in result.texts] == ["A", "C"]
        assert len(result.images) == 1
        assert len(result) == 3

    def test_unsupported_layers_skipped(self) -> None:
        document = make_document(
            LayerNode(name="Empty"),
            make_text_layer(name="Blank", text=""),
        )
        result = convert_document(document)
        assert len(result) == 0
        assert result.errors == []

    def test_percent_units(self) -> None:
        document = make_document(make_text_layer())
        record = convert_document(document, units="percent").texts[0]
        assert record["left"] == "5.21%"
        assert record["top"] == "4.63%"
        assert record["width"] == "20.83%"
        assert record["height"] == "6.48%"

    @pytest.mark.parametrize("width, height", [(0, 1080), (1920, 0), (-1, -1)])
    def test_invalid_dimensions(self, width: int, height: int) -> None:
        document = make_document(make_text_layer(), width=width, height=height)
        with pytest.raises(PSDConversionError) as excinfo:
            convert_document(document)
        assert excinfo.value.code == ErrorCode.INVALID_DIMENSIONS

    def test_invalid_options(self) -> None:
        with pytest.raises(PSDConversionError) as excinfo:
            convert_document(make_document(), include_hidden="yes")
        assert excinfo.value.code == ErrorCode.INVALID_OPTIONS


class TestVisibility:
    @pytest.fixture
    def document(self):
        return make_document(
            make_text_layer(name="Visible", text="Visible"),
            make_text_layer(name="Hidden", text="Hidden", visible=False),
        )

    def test_hidden_excluded(self, document) -> None:
        result = convert_document(document)
        assert [record["value"] for record in result.texts] == ["Visible"]

    def test_hidden_included(self, document) -> None:
        result = convert_document(document, include_hidden=True)
        assert [record["value"] for record in result.texts] == ["Visible", "Hidden"]

    def test_hidden_group_keeps_visible_children(self) -> None:
        group = LayerNode(
            name="Group",
            visible=False,
            children=[make_text_layer(name="Child", text="Child")],
        )
        result = convert_document(make_document(group))
        assert [record["value"] for record in result.texts] == ["Child"]

    def test_include_hidden_never_shrinks(self, document) -> None:
        hidden_group = LayerNode(
            name="Group",
            visible=False,
            children=[make_image_layer(name="Pixels", visible=False)],
        )
        document.children.append(hidden_group)
        without = convert_document(document, image_encoder=None)
        with_hidden = convert_document(document, image_encoder=None, include_hidden=True)
        assert len(with_hidden) >= len(without)
        assert len(with_hidden.images) == 1


class TestFailures:
    def test_effect_failure_isolated(
        self, monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
    ) -> None:
        original = Converter.render_drop_shadow

        def render_drop_shadow(self, effect, is_text):
            if effect is not None:
                raise RuntimeError("boom")
            return original(self, effect, is_text)

        monkeypatch.setattr(Converter, "render_drop_shadow", render_drop_shadow)
        broken_effects = EffectSet(drop_shadow=DropShadow(distance=4, size=2))
        document = make_document(
            make_text_layer(name="Broken", text="Broken", effects=broken_effects),
            make_text_layer(name="Fine", text="Fine"),
            make_image_layer(name="Pixels"),
        )
        with caplog.at_level(logging.WARNING):
            result = convert_document(document)

        assert [record["value"] for record in result.texts] == ["Fine"]
        assert len(result.images) == 1
        assert result.errors == [{"name": "Broken", "message": "boom"}]
        assert "Failed to convert layer 'Broken': boom" in caplog.text

    def test_encoder_failure(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING):
            result = convert_document(
                make_document(make_image_layer()), image_encoder=failing_encoder
            )
        assert result.images[0]["value"] is None
        assert result.errors == []
        assert "Failed to encode image: encoder crashed" in caplog.text

    def test_without_encoder(self) -> None:
        result = convert_document(make_document(make_image_layer()), image_encoder=None)
        assert result.images[0]["value"] is None

    def test_oversized_image(self, caplog: pytest.LogCaptureFixture) -> None:
        limits = ResourceLimits(max_image_dimension=8)
        with caplog.at_level(logging.WARNING):
            result = convert_document(make_document(make_image_layer()), limits=limits)
        assert result.images[0]["value"] is None
        assert "exceeds the maximum dimension" in caplog.text

    def test_depth_limit(self) -> None:
        tree = LayerNode(
            name="Outer",
            children=[LayerNode(name="Inner", children=[make_text_layer(name="Deep")])],
        )
        limits = ResourceLimits(max_layer_depth=2)
        with pytest.raises(PSDConversionError) as excinfo:
            convert_document(make_document(tree), limits=limits)
        assert excinfo.value.code == ErrorCode.RESOURCE_LIMIT_EXCEEDED

    def test_depth_unlimited(self) -> None:
        layer = make_text_layer(name="Deep", text="Deep")
        for index in range(150):
            layer = LayerNode(name=f"Group {index}", children=[layer])
        result = convert_document(make_document(layer), limits=ResourceLimits.unlimited())
        assert [record["value"] for record in result.texts] == ["Deep"]


class TestConverter:
    def test_requires_document(self) -> None:
        with pytest.raises(TypeError):
            Converter(object(), None)  # type: ignore[arg-type]

    def test_logging_option(self, caplog: pytest.LogCaptureFixture) -> None:
        converter = make_converter(
            make_document(make_text_layer(name="Title")), logging=True
        )
        with caplog.at_level(logging.INFO, logger="psd2json"):
            converter.build()
        assert "Converting text layer: 'Title'" in caplog.text
        assert "Converted 1 text and 0 image layers" in caplog.text

    def test_logging_off(self, caplog: pytest.LogCaptureFixture) -> None:
        converter = make_converter(make_document(make_text_layer(name="Title")))
        with caplog.at_level(logging.INFO, logger="psd2json"):
            converter.build()
        assert "Converting text layer" not in caplog.text

    def test_result(self) -> None:
        result = ConversionResult(texts=[{"value": "a"}], images=[{"value": None}])
        assert len(result) == 2
        assert result.to_dict() == {"texts": [{"value": "a"}], "images": [{"value": None}]}
