"""In-memory document model consumed by the style derivation engine.

The model is a plain tree of dataclasses. It is produced by the document
reader (see :mod:`psd2json.reader`) or built directly by callers, and the
engine only ever reads it.

Example::

    from psd2json.core.model import Document, LayerNode, TextPayload

    document = Document(
        width=1920,
        height=1080,
        children=[
            LayerNode(
                name="Title",
                left=100, top=50, right=500, bottom=120,
                text=TextPayload(text="Hello"),
            ),
        ],
    )
"""

import dataclasses
import logging
from typing import Any, Iterator, Sequence

from psd2json.core.color_utils import Color

logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle in document pixels."""

    left: float
    top: float
    right: float
    bottom: float

    @property
    def width(self) -> float:
        return self.right - self.left

    @property
    def height(self) -> float:
        return self.bottom - self.top


@dataclasses.dataclass
class CharacterStyle:
    """Character style of a text layer.

    Every attribute is optional so that an unset value is distinguishable
    from an explicit zero.
    """

    font_family: str | None = None
    font_size: float | None = None
    font_weight: str | int | None = None
    fill_color: Color | None = None
    tracking: float | None = None
    leading: float | None = None
    faux_bold: bool = False
    faux_italic: bool = False
    underline: bool = False
    strikethrough: bool = False
    horizontal_scale: float | None = None  # Fraction, 1.0 is 100%.
    baseline_shift: float | None = None
    auto_kerning: bool | None = None
    ligatures: bool | None = None


@dataclasses.dataclass
class ParagraphStyle:
    """Paragraph style of a text layer."""

    justification: int | str | None = None
    first_line_indent: float | None = None
    start_indent: float | None = None
    end_indent: float | None = None
    space_before: float | None = None
    space_after: float | None = None


@dataclasses.dataclass
class TextPayload:
    """Text content and formatting of a type layer.

    Args:
        text: Literal text content.
        style: Character style of the dominant style run.
        paragraph_style: Paragraph style of the first paragraph.
        transform: Affine transform ``(a, b, c, d, e, f)`` mapping the text box
            to document coordinates.
        box_bounds: Paragraph text frame, if the text is box text.
        bounding_box: Explicit bounding box of the text content.
    """

    text: str = ""
    style: CharacterStyle = dataclasses.field(default_factory=CharacterStyle)
    paragraph_style: ParagraphStyle = dataclasses.field(default_factory=ParagraphStyle)
    transform: Sequence[float] | None = None
    box_bounds: Rect | None = None
    bounding_box: Rect | None = None


@dataclasses.dataclass
class DropShadow:
    enabled: bool = True
    color: Color | None = None
    opacity: float = 1.0
    angle: float = 0.0
    distance: float = 0.0
    size: float = 0.0
    choke: float = 0.0


@dataclasses.dataclass
class InnerShadow:
    enabled: bool = True
    color: Color | None = None
    opacity: float = 1.0
    angle: float = 0.0
    distance: float = 0.0
    size: float = 0.0


@dataclasses.dataclass
class Glow:
    """Outer or inner glow."""

    enabled: bool = True
    color: Color | None = None
    opacity: float = 1.0
    size: float = 0.0
    choke: float = 0.0


@dataclasses.dataclass
class Stroke:
    enabled: bool = True
    color: Color | None = None
    opacity: float = 1.0
    size: float = 0.0
    position: str | None = None  # "inside", "center" or "outside".


@dataclasses.dataclass
class GradientStop:
    """Gradient color stop with a location of unspecified unit."""

    color: Color | None
    location: float | None


@dataclasses.dataclass
class GradientSpec:
    """Gradient definition.

    Args:
        stops: Color stops in document order.
        style: One of "linear", "radial", "angle", "reflected", "diamond".
        angle: Gradient angle in degrees.
        noise: Whether the gradient is a noise gradient.
    """

    stops: list[GradientStop] = dataclasses.field(default_factory=list)
    style: str = "linear"
    angle: float = 0.0
    noise: bool = False


@dataclasses.dataclass
class GradientOverlay:
    enabled: bool = True
    gradient: GradientSpec | None = None
    clip_to_content: bool = True


@dataclasses.dataclass
class PatternOverlay:
    enabled: bool = True
    name: str = ""
    image: Any = None  # Raster payload of the pattern tile.
    clip_to_content: bool = True


@dataclasses.dataclass
class Bevel:
    enabled: bool = True
    highlight_color: Color | None = None
    shadow_color: Color | None = None
    highlight_opacity: float = 1.0
    shadow_opacity: float = 1.0
    size: float | None = None
    angle: float | None = None


@dataclasses.dataclass
class EffectSet:
    """Layer effects. Absent slots contribute nothing."""

    drop_shadow: DropShadow | None = None
    inner_shadow: InnerShadow | None = None
    outer_glow: Glow | None = None
    inner_glow: Glow | None = None
    stroke: Stroke | None = None
    gradient_overlay: GradientOverlay | None = None
    pattern_overlay: PatternOverlay | None = None
    bevel: Bevel | None = None


@dataclasses.dataclass
class LayerNode:
    """One node of the layer tree.

    The parent exclusively owns its children. ``raster`` is any payload the
    image encoder understands, typically a PIL image or a numpy array.
    """

    name: str = ""
    visible: bool = True
    left: float = 0.0
    top: float = 0.0
    right: float = 0.0
    bottom: float = 0.0
    opacity: float = 1.0
    blend_mode: str | None = None
    children: list["LayerNode"] = dataclasses.field(default_factory=list)
    text: TextPayload | None = None
    raster: Any = None
    effects: EffectSet | None = None

    @property
    def rect(self) -> Rect:
        return Rect(self.left, self.top, self.right, self.bottom)

    def __iter__(self) -> Iterator["LayerNode"]:
        return iter(self.children)

    def is_group(self) -> bool:
        return len(self.children) > 0


@dataclasses.dataclass
class Document:
    """Decoded document: pixel dimensions and top-level layers."""

    width: int
    height: int
    children: list[LayerNode] = dataclasses.field(default_factory=list)

    def __iter__(self) -> Iterator[LayerNode]:
        return iter(self.children)

    def __len__(self) -> int:
        return len(self.children)
