import logging
import posixpath
from typing import List, Optional, Tuple

from canvas_mermaid.compiler import types
from canvas_mermaid.compiler.layout import resolve_containment
from canvas_mermaid.compiler.styles import edge_style, node_style
from canvas_mermaid.compiler.types import Bounds, Edge, Graph, Group, Node
from canvas_mermaid.ir.canvas import (
    GROUP_HEIGHT,
    GROUP_WIDTH,
    NODE_HEIGHT,
    NODE_WIDTH,
    CanvasData,
    CanvasEdge,
    CanvasGroup,
    CanvasInput,
    CanvasNode,
    parse_canvas,
)
from canvas_mermaid.validation.canvas_validator import raise_on_errors, sanitize_id

logger = logging.getLogger(__name__)

LINE_BREAK = "<br>"

_CANVAS_KINDS = {
    "text": types.TEXT,
    "file": types.FILE_REFERENCE,
    "link": types.EXTERNAL_LINK,
    "image": types.IMAGE,
    "group": types.GROUP,
}


# -------------------------
# Labels
# -------------------------

def file_stem(path: str) -> str:
    """'notes/Project Plan.md' -> 'Project Plan'"""
    name = posixpath.basename(path.replace("\\", "/"))
    stem, ext = posixpath.splitext(name)
    return stem if ext else name


def split_lines(text: str) -> List[str]:
    # CRLF, LF and a lone CR all end a line
    return text.replace("\r\n", "\n").replace("\r", "\n").split("\n")


def reflow_label(label: str) -> str:
    """Fold a multi-line label into one Mermaid line.

    The first line is kept as is; each later non-empty line is trimmed and
    prefixed with a line break marker.
    """
    lines = split_lines(label)
    if len(lines) == 1:
        return label

    parts = [lines[0]]
    for line in lines[1:]:
        trimmed = line.strip()
        if trimmed:
            parts.append(f"{LINE_BREAK}  {trimmed}")
    return "".join(parts)


def escape_label(label: str) -> str:
    # A double quote would close the ["..."] label early
    return label.replace('"', "'")


def node_label(node: CanvasNode) -> str:
    if node.text:
        label = node.text
    elif node.label:
        label = node.label
    elif node.file:
        label = file_stem(node.file)
    else:
        label = f"Node_{node.id}"
    return escape_label(reflow_label(label))


def edge_label(edge: CanvasEdge) -> str:
    if not edge.label:
        return ""
    label = LINE_BREAK.join(part.strip() for part in split_lines(edge.label) if part.strip())
    return escape_label(label).replace("|", "/")


def group_label(record) -> str:
    label = record.label or record.text or f"Group_{record.id}"
    return escape_label(reflow_label(label))


# -------------------------
# Records
# -------------------------

def node_kind(node: CanvasNode) -> str:
    if node.type == "group":
        return types.GROUP
    if node.file:
        return types.FILE_REFERENCE
    if node.url:
        return types.EXTERNAL_LINK
    return _CANVAS_KINDS.get(node.type, types.TEXT)


def node_bounds(node: CanvasNode) -> Bounds:
    return Bounds(
        x=node.x,
        y=node.y,
        width=node.width or NODE_WIDTH,
        height=node.height or NODE_HEIGHT,
    )


def group_bounds(record) -> Bounds:
    return Bounds(
        x=record.x,
        y=record.y,
        width=record.width or GROUP_WIDTH,
        height=record.height or GROUP_HEIGHT,
    )


def normalize_node(node: CanvasNode, enable_styling: bool) -> Node:
    style = ""
    if enable_styling:
        style = node_style(
            background=node.background_color,
            border=node.border_color or node.color,
        )
    return Node(
        id=sanitize_id(node.id),
        raw_id=node.id,
        kind=node_kind(node),
        label=node_label(node),
        bounds=node_bounds(node),
        file=node.file,
        url=node.url,
        style=style,
    )


def normalize_edge(edge: CanvasEdge, enable_styling: bool) -> Edge:
    style = edge_style(color=edge.color, width=edge.width) if enable_styling else ""
    return Edge(
        id=sanitize_id(edge.id) if edge.id else "",
        source=sanitize_id(edge.from_node),
        target=sanitize_id(edge.to_node),
        label=edge_label(edge),
        line_style=edge.style,
        arrow=edge.to_end,
        style=style,
    )


def _group_records(canvas: CanvasData) -> List[Tuple[str, object]]:
    """Group-kind nodes first (canvas order), then standalone group records."""
    records: List[Tuple[str, object]] = [
        (sanitize_id(node.id), node) for node in canvas.nodes if node.type == "group"
    ]
    records.extend((sanitize_id(group.id), group) for group in canvas.groups)
    return records


# -------------------------
# Graph
# -------------------------

def build_graph(
    data: CanvasInput,
    settings: Optional[types.ConversionSettings] = None,
) -> Graph:
    """
    Validate raw canvas data and build the canonical graph.

    Raises CanvasValidationError when the canvas has no nodes, a node lacks
    an id, two ids collide after sanitizing, or an edge is dangling.
    """
    settings = settings or types.ConversionSettings()
    canvas = parse_canvas(data)
    validation = raise_on_errors(canvas)

    nodes = [
        normalize_node(node, settings.enable_styling)
        for node in canvas.nodes
        if node.type != "group"
    ]
    edges = [normalize_edge(edge, settings.enable_styling) for edge in canvas.edges]

    group_records = _group_records(canvas)
    containment = resolve_containment(
        [(node.id, node.bounds) for node in nodes],
        [(gid, group_bounds(record)) for gid, record in group_records],
    )

    groups = [
        Group(
            id=gid,
            raw_id=record.id,
            label=group_label(record),
            bounds=group_bounds(record),
            children=tuple(containment.children_of(gid)),
            parent_id=containment.parents.get(gid),
        )
        for gid, record in group_records
    ]

    warnings = [issue.message for issue in validation.issues]
    for node_id, candidates in containment.ambiguous_nodes.items():
        warnings.append(
            f"Node '{node_id}' lies inside groups {', '.join(candidates)}; "
            f"assigned to '{candidates[0]}'"
        )
    for group_id, candidates in containment.ambiguous_groups.items():
        warnings.append(
            f"Group '{group_id}' lies inside groups {', '.join(candidates)}; "
            f"nested under '{candidates[0]}'"
        )
    for warning in warnings:
        logger.debug("canvas warning: %s", warning)

    return Graph(
        nodes=tuple(nodes),
        edges=tuple(edges),
        groups=tuple(groups),
        warnings=tuple(warnings),
    )
