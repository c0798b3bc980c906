# backend/canvas_mermaid/compiler/render_mermaid.py

from typing import Dict, List, Optional

from canvas_mermaid.compiler.types import ConversionSettings, Graph, Group

INDENT = "  "
MEMBER_INDENT = "    "

NODE_SECTION = "%% Node Definitions"
GROUP_SECTION = "%% Group Structure"
EDGE_SECTION = "%% Edge Connections"
LINK_SECTION = "%% File Node Internal Links"

INTERNAL_LINK_CLASS = "internal-link"


# -------------------------
# Sections
# -------------------------

def render_nodes(graph: Graph, settings: ConversionSettings) -> List[str]:
    lines = [f'{INDENT}{node.id}["{node.label}"]' for node in graph.nodes]

    if settings.enable_styling:
        lines.extend(
            f"{INDENT}style {node.id} {node.style}"
            for node in graph.nodes
            if node.style
        )

    return lines


def _depth(group: Group, by_id: Dict[str, Group]) -> int:
    depth = 0
    parent = group.parent_id
    while parent and parent in by_id:
        depth += 1
        parent = by_id[parent].parent_id
    return depth


def _render_subgraph(group: Group, child_groups: List[Group]) -> List[str]:
    lines = [f'{INDENT}subgraph {group.id}["{group.label}"]']
    lines.extend(f"{MEMBER_INDENT}{node_id}" for node_id in group.children)
    lines.extend(f"{MEMBER_INDENT}{child.id}" for child in child_groups)
    lines.append(f"{INDENT}end")
    return lines


def render_groups(graph: Graph) -> List[str]:
    """
    Nested groups are declared before the groups that contain them:
    a parent can only list a child subgraph that is already defined.
    """
    by_id = {group.id: group for group in graph.groups}
    children: Dict[Optional[str], List[Group]] = {}
    for group in graph.groups:
        children.setdefault(group.parent_id, []).append(group)

    nested = [group for group in graph.groups if group.parent_id]
    top_level = [group for group in graph.groups if not group.parent_id]

    # Deepest first; sorted() is stable so declaration order breaks ties
    nested = sorted(nested, key=lambda g: -_depth(g, by_id))

    lines: List[str] = []
    for group in nested + top_level:
        lines.extend(_render_subgraph(group, children.get(group.id, [])))
    return lines


def render_edges(graph: Graph, settings: ConversionSettings) -> List[str]:
    lines = []
    for edge in graph.edges:
        label = f"|{edge.label}|" if edge.label else ""
        lines.append(f"{INDENT}{edge.source} -->{label} {edge.target}")

    if settings.enable_styling:
        lines.extend(
            f"{INDENT}linkStyle {index} {edge.style}"
            for index, edge in enumerate(graph.edges)
            if edge.style
        )

    return lines


def render_internal_links(graph: Graph, settings: ConversionSettings) -> List[str]:
    if not settings.enable_internal_links:
        return []

    file_ids = graph.file_node_ids
    if not file_ids:
        return []

    return [f"{INDENT}class {','.join(file_ids)} {INTERNAL_LINK_CLASS}"]


# -------------------------
# Flowchart
# -------------------------

def render_mermaid(graph: Graph, settings: Optional[ConversionSettings] = None) -> str:
    """Serialize a canonical graph into Mermaid flowchart text.

    Section order is fixed: direction, nodes, groups, edges, internal links.
    Empty sections are left out. The text ends with a newline.
    """
    settings = settings or ConversionSettings()

    lines = [f"flowchart {settings.direction}"]

    sections = [
        (NODE_SECTION, render_nodes(graph, settings)),
        (GROUP_SECTION, render_groups(graph)),
        (EDGE_SECTION, render_edges(graph, settings)),
        (LINK_SECTION, render_internal_links(graph, settings)),
    ]

    for header, body in sections:
        if not body:
            continue
        lines.append("")
        lines.append(f"{INDENT}{header}")
        lines.extend(body)

    return "\n".join(lines) + "\n"
