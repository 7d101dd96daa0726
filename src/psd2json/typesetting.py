"""PSD TypeSetting data structures.

This module wraps the text engine data of a Photoshop type layer
(TypeToolObjectSetting) and exposes the properties needed to style the layer
as a single block: the text, its frame, its transform, the dominant character
style and the first paragraph style.
"""

import dataclasses
import logging
from enum import IntEnum

from psd_tools.psd.descriptor import RawData
from psd_tools.psd.engine_data import DictElement, EngineData
from psd_tools.psd.tagged_blocks import TypeToolObjectSetting
from psd_tools.terminology import Key

from psd2json.core.model import Rect

logger = logging.getLogger(__name__)


class ShapeType(IntEnum):
    """Text shape type values."""

    POINT = 0
    BOUNDING_BOX = 1


def _optional_float(data: dict, key: str) -> float | None:
    value = data.get(key)
    if value is None:
        return None
    return float(value)


@dataclasses.dataclass
class ParagraphSheet:
    """Paragraph sheet data."""

    name: str
    default_style_sheet: int
    properties: dict

    @classmethod
    def from_dict(cls, data: dict) -> "ParagraphSheet":
        if "ParagraphSheet" in data:
            data = data["ParagraphSheet"]
        return cls(
            name=data.get("Name", ""),
            default_style_sheet=int(data.get("DefaultStyleSheet", 0)),
            properties=dict(data.get("Properties", {})),
        )

    @property
    def justification(self) -> int | None:
        value = self.properties.get("Justification")
        return None if value is None else int(value)

    @property
    def first_line_indent(self) -> float | None:
        return _optional_float(self.properties, "FirstLineIndent")

    @property
    def start_indent(self) -> float | None:
        return _optional_float(self.properties, "StartIndent")

    @property
    def end_indent(self) -> float | None:
        return _optional_float(self.properties, "EndIndent")

    @property
    def space_before(self) -> float | None:
        return _optional_float(self.properties, "SpaceBefore")

    @property
    def space_after(self) -> float | None:
        return _optional_float(self.properties, "SpaceAfter")


@dataclasses.dataclass
class StyleSheet:
    """Style sheet data.

    Getters return None when the property is not set, so that unset values
    can be told apart from explicit ones.
    """

    name: str
    style_sheet_data: dict

    @classmethod
    def from_dict(cls, data: dict) -> "StyleSheet":
        if "StyleSheet" in data:
            data = data["StyleSheet"]
        return cls(
            name=data.get("Name", ""),
            style_sheet_data=dict(data.get("StyleSheetData", {})),
        )

    @property
    def font(self) -> int | None:
        """Index into the font set."""
        value = self.style_sheet_data.get("Font")
        return None if value is None else int(value)

    @property
    def font_size(self) -> float | None:
        return _optional_float(self.style_sheet_data, "FontSize")

    @property
    def faux_bold(self) -> bool:
        return bool(self.style_sheet_data.get("FauxBold", False))

    @property
    def faux_italic(self) -> bool:
        return bool(self.style_sheet_data.get("FauxItalic", False))

    @property
    def auto_leading(self) -> bool:
        return bool(self.style_sheet_data.get("AutoLeading", True))

    @property
    def leading(self) -> float | None:
        return _optional_float(self.style_sheet_data, "Leading")

    @property
    def horizontal_scale(self) -> float | None:
        """Horizontal scale as a fraction, 1.0 is 100%."""
        return _optional_float(self.style_sheet_data, "HorizontalScale")

    @property
    def tracking(self) -> float | None:
        return _optional_float(self.style_sheet_data, "Tracking")

    @property
    def auto_kerning(self) -> bool:
        return bool(self.style_sheet_data.get("AutoKern", True))

    @property
    def baseline_shift(self) -> float | None:
        return _optional_float(self.style_sheet_data, "BaselineShift")

    @property
    def underline(self) -> bool:
        return bool(self.style_sheet_data.get("Underline", False))

    @property
    def strikethrough(self) -> bool:
        return bool(self.style_sheet_data.get("Strikethrough", False))

    @property
    def ligatures(self) -> bool:
        return bool(self.style_sheet_data.get("Ligatures", True))

    @property
    def fill_flag(self) -> bool:
        return bool(self.style_sheet_data.get("FillFlag", True))

    @property
    def fill_color(self) -> tuple[float, float, float, float] | None:
        """Fill color as an ARGB tuple with values between 0 and 1."""
        color = self.style_sheet_data.get("FillColor", None)
        if color is None:
            return None
        values = [float(v) for v in color["Values"]]
        if len(values) != 4:
            logger.debug(f"Unsupported fill color values: {values}")
            return None
        return (values[0], values[1], values[2], values[3])


def longest_run(run_length_array: list[int]) -> int:
    """Index of the longest run, the first one on ties.

    Example::

        longest_run([4, 2, 5]) -> 2
        longest_run([3, 3]) -> 0
    """
    lengths = [int(length) for length in run_length_array]
    if not lengths:
        return 0
    return max(range(len(lengths)), key=lambda i: (lengths[i], -i))


class TypeSetting:
    """Type tool object setting wrapper.

    Example::

        setting = TypeSetting(layer._data)
        setting.text, setting.transform, setting.get_dominant_style()
    """

    def __init__(self, setting: TypeToolObjectSetting):
        assert isinstance(setting, TypeToolObjectSetting)
        self._setting = setting

        assert "EngineData" in self._setting.text_data
        raw_data = self._setting.text_data["EngineData"]
        assert isinstance(raw_data, RawData)
        self._engine_data: EngineData = raw_data.value  # type: ignore

    @property
    def transform(self) -> tuple[float, ...]:
        """Affine transform coefficients ``(a, b, c, d, e, f)``."""
        return tuple(float(v) for v in self._setting.transform)

    def _get_rect(self, key: str) -> Rect | None:
        desc = self._setting.text_data.get(key)
        if not desc:
            logger.debug(f"{key} not found in text data.")
            return None
        return Rect(
            left=float(desc[Key.Left].value),
            top=float(desc[Key.Top].value),
            right=float(desc[Key.Right].value),
            bottom=float(desc[Key.Bottom].value),
        )

    @property
    def bounding_box(self) -> Rect | None:
        """Bounding box around the text content."""
        return self._get_rect("boundingBox")

    @property
    def engine_data(self) -> EngineData:
        return self._engine_data

    @property
    def resources(self) -> DictElement:
        assert "ResourceDict" in self.engine_data
        return self.engine_data["ResourceDict"]

    @property
    def font_set(self) -> list[dict]:
        return [dict(fs) for fs in self.resources.get("FontSet", [])]

    @property
    def paragraph_sheets(self) -> list[ParagraphSheet]:
        return [
            ParagraphSheet.from_dict(ps)
            for ps in self.resources.get("ParagraphSheetSet", [])
        ]

    @property
    def style_sheets(self) -> list[StyleSheet]:
        return [
            StyleSheet.from_dict(ss) for ss in self.resources.get("StyleSheetSet", [])
        ]

    @property
    def engine_dict(self) -> DictElement:
        assert "EngineDict" in self.engine_data
        return self.engine_data["EngineDict"]

    @property
    def text(self) -> str:
        """Text content, without the trailing carriage return."""
        assert "Editor" in self.engine_dict
        assert "Text" in self.engine_dict["Editor"]
        text = str(self.engine_dict["Editor"]["Text"].value)
        return text.rstrip("\r").replace("\r", "\n")

    @property
    def _shape(self) -> DictElement | None:
        rendered = self.engine_dict.get("Rendered")
        if rendered is None or "Shapes" not in rendered:
            return None
        shapes = list(rendered["Shapes"].get("Children", []))
        if not shapes:
            logger.debug("No shapes found.")
            return None
        elif len(shapes) > 1:
            logger.debug("Multiple shapes found, using the first one.")
        return shapes[0]

    @property
    def shape_type(self) -> ShapeType:
        shape = self._shape
        if shape is None or "ShapeType" not in shape:
            return ShapeType.POINT
        return ShapeType(int(shape["ShapeType"].value))

    @property
    def box_bounds(self) -> Rect | None:
        """Paragraph text frame, only for box text."""
        if self.shape_type != ShapeType.BOUNDING_BOX:
            return None
        shape = self._shape
        assert shape is not None
        bounds = shape["Cookie"]["Photoshop"]["BoxBounds"]
        return Rect(
            left=float(bounds[0].value),
            top=float(bounds[1].value),
            right=float(bounds[2].value),
            bottom=float(bounds[3].value),
        )

    def get_postscript_name(self, font_index: int) -> str | None:
        """Get the PostScript name for the given font index."""
        font_set = self.font_set
        if not 0 <= font_index < len(font_set):
            logger.warning(f"Font index {font_index} is out of range.")
            return None
        postscriptname = font_set[font_index].get("Name", None)
        if postscriptname is None:
            logger.warning(f"PostScript name not found for font index {font_index}.")
            return None
        return str(postscriptname.value).rstrip("\x00")

    def get_paragraph_sheet(self, sheet: ParagraphSheet) -> ParagraphSheet:
        """Get the paragraph sheet merged over its default sheet."""
        sheets = self.paragraph_sheets
        properties: dict = {}
        if 0 <= sheet.default_style_sheet < len(sheets):
            properties.update(sheets[sheet.default_style_sheet].properties)
        properties.update(sheet.properties)
        return ParagraphSheet(
            name=sheet.name,
            default_style_sheet=sheet.default_style_sheet,
            properties=properties,
        )

    def get_style_sheet(self, sheet: StyleSheet) -> StyleSheet:
        """Get the style sheet merged over the normal style sheet."""
        sheets = self.style_sheets
        normal = int(self.resources.get("TheNormalStyleSheet", 0))
        data: dict = {}
        if 0 <= normal < len(sheets):
            data.update(sheets[normal].style_sheet_data)
        data.update(sheet.style_sheet_data)
        return StyleSheet(name=sheet.name, style_sheet_data=data)

    def get_dominant_style(self) -> StyleSheet | None:
        """Merged style sheet of the longest style run."""
        style_run = self.engine_dict.get("StyleRun")
        if style_run is None or not style_run.get("RunArray"):
            return None
        index = longest_run(style_run.get("RunLengthArray", []))
        index = min(index, len(style_run["RunArray"]) - 1)
        return self.get_style_sheet(StyleSheet.from_dict(style_run["RunArray"][index]))

    def get_first_paragraph(self) -> ParagraphSheet | None:
        """Merged paragraph sheet of the first paragraph."""
        paragraph_run = self.engine_dict.get("ParagraphRun")
        if paragraph_run is None or not paragraph_run.get("RunArray"):
            return None
        return self.get_paragraph_sheet(
            ParagraphSheet.from_dict(paragraph_run["RunArray"][0])
        )
