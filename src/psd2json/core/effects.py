import logging
import math

from psd2json.css_utils import num2str, round_half_up
from psd2json.core.base import ConverterProtocol, StyleRecord
from psd2json.core.color_utils import Color, color_to_css
from psd2json.core.constants import (
    DEFAULT_BEVEL_ANGLE,
    DEFAULT_BEVEL_SIZE,
    DEFAULT_HIGHLIGHT_COLOR,
    DEFAULT_SHADOW_COLOR,
)
from psd2json.core.gradient import render_gradient
from psd2json.core.model import (
    Bevel,
    DropShadow,
    EffectSet,
    Glow,
    GradientOverlay,
    InnerShadow,
    PatternOverlay,
    Stroke,
)

logger = logging.getLogger(__name__)


class EffectConverter(ConverterProtocol):
    """Effect converter mixin.

    Effects map onto CSS idioms that differ between text and raster layers:
    text shadows and glows go to ``textShadow`` and strokes to
    ``WebkitTextStroke*``, while raster layers use ``boxShadow`` and
    ``border``.
    """

    def apply_effects(
        self, styles: StyleRecord, effects: EffectSet | None, is_text: bool
    ) -> None:
        """Apply layer effects to the style record being assembled."""
        if effects is None:
            return

        box_shadows: list[str] = []
        text_shadows: list[str] = []

        drop_shadow = self.render_drop_shadow(effects.drop_shadow, is_text)
        (text_shadows if is_text else box_shadows).append(drop_shadow)
        box_shadows.append(self.render_inner_shadow(effects.inner_shadow))
        outer_glow = self.render_outer_glow(effects.outer_glow, is_text)
        (text_shadows if is_text else box_shadows).append(outer_glow)
        if not is_text:
            box_shadows.append(self.render_inner_glow(effects.inner_glow))
        box_shadows.append(self.render_bevel(effects.bevel))

        box_shadow = ", ".join(part for part in box_shadows if part)
        if box_shadow:
            styles["boxShadow"] = box_shadow
        text_shadow = ", ".join(part for part in text_shadows if part)
        if text_shadow:
            styles["textShadow"] = text_shadow

        self.apply_stroke_effect(styles, effects.stroke, is_text)
        self.apply_gradient_overlay_effect(styles, effects.gradient_overlay, is_text)
        self.apply_pattern_overlay_effect(styles, effects.pattern_overlay, is_text)

    def render_drop_shadow(self, effect: DropShadow | None, is_text: bool) -> str:
        if effect is None or not effect.enabled:
            return ""
        dx, dy = polar_to_cartesian(effect.angle, effect.distance)
        color = effect_color(effect.color, effect.opacity) or DEFAULT_SHADOW_COLOR
        spread = f" {num2str(float(effect.choke))}px" if effect.choke and not is_text else ""
        return f"{dx}px {dy}px {num2str(float(effect.size))}px{spread} {color}"

    def render_inner_shadow(self, effect: InnerShadow | None) -> str:
        if effect is None or not effect.enabled:
            return ""
        dx, dy = polar_to_cartesian(effect.angle, effect.distance)
        color = effect_color(effect.color, effect.opacity) or DEFAULT_SHADOW_COLOR
        return f"inset {dx}px {dy}px {num2str(float(effect.size))}px {color}"

    def render_outer_glow(self, effect: Glow | None, is_text: bool) -> str:
        if effect is None or not effect.enabled:
            return ""
        color = effect_color(effect.color, effect.opacity)
        if not color or not effect.size:
            return ""
        spread = f" {num2str(float(effect.choke))}px" if effect.choke and not is_text else ""
        return f"0px 0px {num2str(float(effect.size))}px{spread} {color}"

    def render_inner_glow(self, effect: Glow | None) -> str:
        if effect is None or not effect.enabled:
            return ""
        color = effect_color(effect.color, effect.opacity)
        if not color or not effect.size:
            return ""
        return f"inset 0px 0px {num2str(float(effect.size))}px {color}"

    def render_bevel(self, effect: Bevel | None) -> str:
        """Approximate a bevel with a highlight and a shadow offset pair."""
        if effect is None or not effect.enabled:
            return ""
        size = effect.size or DEFAULT_BEVEL_SIZE
        angle = effect.angle or DEFAULT_BEVEL_ANGLE
        highlight = (
            effect_color(effect.highlight_color, effect.highlight_opacity)
            or DEFAULT_HIGHLIGHT_COLOR
        )
        shadow = (
            effect_color(effect.shadow_color, effect.shadow_opacity)
            or DEFAULT_SHADOW_COLOR
        )
        angle_rad = math.radians(angle)
        hx = math.cos(angle_rad) * size
        hy = math.sin(angle_rad) * size
        return (
            f"{num2str(hx)}px {num2str(hy)}px 0px {highlight}, "
            f"{num2str(-hx)}px {num2str(-hy)}px 0px {shadow}"
        )

    def apply_stroke_effect(
        self, styles: StyleRecord, effect: Stroke | None, is_text: bool
    ) -> None:
        if effect is None or not effect.enabled:
            return
        color = effect_color(effect.color, effect.opacity)
        if not color or not effect.size:
            return
        width = num2str(float(effect.size))
        if is_text:
            styles["WebkitTextStrokeWidth"] = f"{width}px"
            styles["WebkitTextStrokeColor"] = color
        elif effect.position == "inside":
            inset = f"inset 0 0 0 {width}px {color}"
            existing = styles.get("boxShadow")
            styles["boxShadow"] = f"{existing}, {inset}" if existing else inset
        else:
            styles["border"] = f"{width}px solid {color}"

    def apply_gradient_overlay_effect(
        self, styles: StyleRecord, effect: GradientOverlay | None, is_text: bool
    ) -> None:
        if effect is None or not effect.enabled or effect.gradient is None:
            return
        background = render_gradient(effect.gradient)
        set_background(styles, background, is_text and effect.clip_to_content)

    def apply_pattern_overlay_effect(
        self, styles: StyleRecord, effect: PatternOverlay | None, is_text: bool
    ) -> None:
        if effect is None or not effect.enabled:
            return
        data_uri = self.context.encode_image(effect.image)
        if not data_uri:
            logger.debug(f"Pattern overlay '{effect.name}' has no image, skipping.")
            return
        background = f'url("{data_uri}")'
        set_background(styles, background, is_text and effect.clip_to_content)


def effect_color(color: Color | None, opacity: float = 1.0) -> str | None:
    """Render an effect color with its opacity folded into the alpha."""
    if color is None:
        return None
    return color_to_css(color, opacity if opacity is not None else 1.0)


def set_background(styles: StyleRecord, background: str, clip_to_text: bool) -> None:
    """Set a background, clipped to the glyphs when requested."""
    styles["background"] = background
    if clip_to_text:
        styles["WebkitBackgroundClip"] = "text"
        styles["backgroundClip"] = "text"
        styles["WebkitTextFillColor"] = "transparent"
        styles["color"] = "transparent"


def polar_to_cartesian(angle: float, distance: float) -> tuple[int, int]:
    """Convert the polar coordinate to rounded dx and dy."""
    angle_rad = float(angle or 0.0) * math.pi / 180.0
    distance = float(distance or 0.0)
    return (
        round_half_up(distance * math.cos(angle_rad)),
        round_half_up(distance * math.sin(angle_rad)),
    )
