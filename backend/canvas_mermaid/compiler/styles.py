import re
from typing import Optional

DEFAULT_NODE_STYLE = "fill:#f9f9f9,stroke:#333,stroke-width:2px"
DEFAULT_EDGE_STYLE = "stroke:#333,stroke-width:2px"

# Obsidian canvas preset colors ("1".."6")
CANVAS_PRESET_COLORS = {
    "1": "#fb464c",   # red
    "2": "#e9973f",   # orange
    "3": "#e0de71",   # yellow
    "4": "#44cf6e",   # green
    "5": "#53dfdd",   # cyan
    "6": "#a882ff",   # purple
}

_FILL_RE = re.compile(r"fill:[^,]+")
_STROKE_RE = re.compile(r"stroke:[^,]+")
_STROKE_WIDTH_RE = re.compile(r"stroke-width:[^,]+")


def resolve_color(color: Optional[str]) -> Optional[str]:
    if not color:
        return None
    color = str(color).strip()
    return CANVAS_PRESET_COLORS.get(color, color) or None


def _format_width(width: float) -> str:
    if float(width).is_integer():
        return f"{int(width)}px"
    return f"{width}px"


def node_style(
    background: Optional[str] = None,
    border: Optional[str] = None,
) -> str:
    """
    Merge node color overrides into the default node style.
    Returns "" when nothing overrides the default.
    """
    background = resolve_color(background)
    border = resolve_color(border)
    if not background and not border:
        return ""

    style = DEFAULT_NODE_STYLE
    if background:
        style = _FILL_RE.sub(lambda _: f"fill:{background}", style, count=1)
    if border:
        style = _STROKE_RE.sub(lambda _: f"stroke:{border}", style, count=1)
    return style


def edge_style(
    color: Optional[str] = None,
    width: Optional[float] = None,
) -> str:
    """Merge edge color/width overrides into the default edge style."""
    color = resolve_color(color)
    if not color and not width:
        return ""

    style = DEFAULT_EDGE_STYLE
    if color:
        style = _STROKE_RE.sub(lambda _: f"stroke:{color}", style, count=1)
    if width:
        style = _STROKE_WIDTH_RE.sub(lambda _: f"stroke-width:{_format_width(width)}", style, count=1)
    return style
