# https://developer.mozilla.org/en-US/docs/Web/CSS/mix-blend-mode
BLEND_MODES: frozenset[str] = frozenset(
    {
        "normal",
        "multiply",
        "screen",
        "overlay",
        "soft-light",
        "hard-light",
        "color-dodge",
        "color-burn",
        "darken",
        "lighten",
        "difference",
        "exclusion",
        "hue",
        "saturation",
        "color",
        "luminosity",
    }
)

# Photoshop paragraph justification codes.
JUSTIFICATION: dict[int, str] = {
    0: "left",
    1: "right",
    2: "center",
    3: "justify",  # Justify last line left.
    4: "justify",  # Justify last line right.
    5: "justify",  # Justify last line center.
    6: "justify",  # Justify all.
}

TEXT_ALIGN_VALUES: frozenset[str] = frozenset({"left", "center", "right", "justify"})

# Fallback colors for effects without an explicit color.
DEFAULT_SHADOW_COLOR = "rgba(0, 0, 0, 0.50)"
DEFAULT_HIGHLIGHT_COLOR = "rgba(255, 255, 255, 0.50)"

DEFAULT_BEVEL_SIZE = 1.0
DEFAULT_BEVEL_ANGLE = 120.0

# Used to derive line height when the font size is unknown.
DEFAULT_FONT_SIZE = 12.0
