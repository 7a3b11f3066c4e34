"""
Annotation colours

Palette names and hex values resolve to RGB triples in the 0-1 range used by
PDF drawing operations. Unknown colours never fail an export; they fall back
to the default yellow.
"""
import logging
import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Tuple

logger = logging.getLogger(__name__)

RGB = Tuple[float, float, float]

_HEX_PATTERN = re.compile(r"^#?([0-9A-Fa-f]{6})$")


@dataclass(frozen=True)
class HighlightColor:
    """A palette entry"""
    name: str
    value: str
    hex: str


HIGHLIGHT_COLORS: Tuple[HighlightColor, ...] = (
    HighlightColor("Yellow", "yellow", "#FFD400"),
    HighlightColor("Red", "red", "#FF6666"),
    HighlightColor("Green", "green", "#5FB236"),
    HighlightColor("Blue", "blue", "#2EA8E5"),
    HighlightColor("Purple", "purple", "#A28AE5"),
    HighlightColor("Magenta", "magenta", "#E56EEE"),
    HighlightColor("Orange", "orange", "#F19837"),
    HighlightColor("Gray", "gray", "#AAAAAA"),
)

DEFAULT_HIGHLIGHT_COLOR = HIGHLIGHT_COLORS[0]

# Pin / sticky note colour (amber)
PIN_COLOR = "#FFC107"

# Named shades used for burning highlights into PDFs
_BURN_IN_RGB = {
    "yellow": (1.0, 0.92, 0.23),
    "green": (0.30, 0.69, 0.31),
    "blue": (0.13, 0.59, 0.95),
    "pink": (0.91, 0.12, 0.39),
    "orange": (1.0, 0.60, 0.0),
    "amber": (1.0, 0.76, 0.03),
}

DEFAULT_RGB_COLOR: RGB = _BURN_IN_RGB["yellow"]

# Palette hexes resolve to their own shade
_PALETTE_HEX_RGB = {
    "#FFD400": (1.0, 0.83, 0.0),
    "#FF6666": (1.0, 0.4, 0.4),
    "#5FB236": (0.37, 0.70, 0.21),
    "#2EA8E5": (0.18, 0.66, 0.90),
    "#A28AE5": (0.64, 0.54, 0.90),
    "#E56EEE": (0.90, 0.43, 0.93),
    "#F19837": (0.95, 0.60, 0.22),
    "#AAAAAA": (0.67, 0.67, 0.67),
}

_table = dict(_PALETTE_HEX_RGB)
# Palette names without a burn-in shade use their palette hex
_table.update({c.value: _PALETTE_HEX_RGB[c.hex] for c in HIGHLIGHT_COLORS})
_table.update(_BURN_IN_RGB)
_table.update({
    PIN_COLOR: _BURN_IN_RGB["amber"],
    "#FFEB3B": _BURN_IN_RGB["yellow"],
    "#4CAF50": _BURN_IN_RGB["green"],
    "#2196F3": _BURN_IN_RGB["blue"],
    "#E91E63": _BURN_IN_RGB["pink"],
    "#FF9800": _BURN_IN_RGB["orange"],
})

# Read-only lookup: palette names and hex values -> RGB (0-1)
PDF_HIGHLIGHT_COLORS: Mapping[str, RGB] = MappingProxyType(_table)
del _table


def hex_to_rgb(hex_color: str) -> RGB:
    """Convert ``#RRGGBB`` (leading # optional) to RGB (0-1); default on bad input"""
    match = _HEX_PATTERN.match(hex_color.strip())
    if not match:
        logger.warning(f"Invalid hex color: {hex_color}, using default")
        return DEFAULT_RGB_COLOR
    digits = match.group(1)
    return tuple(int(digits[i:i + 2], 16) / 255 for i in (0, 2, 4))


def rgb_to_hex(rgb: RGB) -> str:
    """Convert RGB (0-1, clamped) to an uppercase ``#RRGGBB`` string"""
    return "#" + "".join(f"{round(max(0.0, min(1.0, c)) * 255):02X}" for c in rgb)


def get_color_rgb(color: str) -> RGB:
    """
    Resolve an annotation colour for PDF drawing.

    Exact table lookup, then case-normalized lookup, then ``#RRGGBB``
    parsing. Anything else resolves to DEFAULT_RGB_COLOR.
    """
    for key in (color, color.lower(), color.upper()):
        if key in PDF_HIGHLIGHT_COLORS:
            return PDF_HIGHLIGHT_COLORS[key]
    if color.startswith("#"):
        return hex_to_rgb(color)
    logger.warning(f"Unknown annotation color: {color}, using default yellow")
    return DEFAULT_RGB_COLOR


def get_hex_for_named_color(color_name: str) -> str:
    """Hex value of a palette colour by value or display name"""
    name = color_name.lower()
    for color in HIGHLIGHT_COLORS:
        if name in (color.value, color.name.lower()):
            return color.hex
    return DEFAULT_HIGHLIGHT_COLOR.hex


def is_valid_highlight_color(color: str) -> bool:
    """Palette value, palette hex, or any ``#RRGGBB`` string"""
    if any(color in (c.value, c.hex) for c in HIGHLIGHT_COLORS):
        return True
    return bool(re.fullmatch(r"#[0-9A-Fa-f]{6}", color))
