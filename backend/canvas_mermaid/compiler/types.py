from dataclasses import dataclass, field
from typing import Optional, Tuple

# Canonical node kinds
TEXT = "text"
FILE_REFERENCE = "file-reference"
EXTERNAL_LINK = "external-link"
IMAGE = "image"
GROUP = "group"

NODE_KINDS = (TEXT, FILE_REFERENCE, EXTERNAL_LINK, IMAGE, GROUP)

DIRECTIONS = ("TB", "BT", "RL", "LR")
DIRECTION_ALIASES = {"TD": "TB"}


@dataclass(frozen=True)
class Bounds:
    x: float
    y: float
    width: float
    height: float

    @property
    def left(self) -> float:
        return self.x

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def top(self) -> float:
        return self.y

    @property
    def bottom(self) -> float:
        return self.y + self.height


@dataclass(frozen=True)
class Node:
    id: str               # sanitized
    raw_id: str
    kind: str             # text | file-reference | external-link | image | group
    label: str            # display label, already reflowed
    bounds: Bounds
    file: Optional[str] = None
    url: Optional[str] = None
    style: str = ""       # merged style, empty when no override


@dataclass(frozen=True)
class Edge:
    id: str
    source: str           # sanitized node id
    target: str           # sanitized node id
    label: str = ""
    line_style: Optional[str] = None
    arrow: Optional[str] = None
    style: str = ""


@dataclass(frozen=True)
class Group:
    id: str               # sanitized
    raw_id: str
    label: str
    bounds: Bounds
    children: Tuple[str, ...] = ()
    parent_id: Optional[str] = None


@dataclass(frozen=True)
class Graph:
    nodes: Tuple[Node, ...] = ()
    edges: Tuple[Edge, ...] = ()
    groups: Tuple[Group, ...] = ()
    warnings: Tuple[str, ...] = field(default=(), compare=False)

    @property
    def file_node_ids(self) -> Tuple[str, ...]:
        return tuple(n.id for n in self.nodes if n.kind == FILE_REFERENCE)


@dataclass(frozen=True)
class ConversionSettings:
    direction: str = "TB"
    enable_styling: bool = True
    enable_internal_links: bool = True

    def __post_init__(self):
        direction = (self.direction or "TB").upper()
        direction = DIRECTION_ALIASES.get(direction, direction)
        if direction not in DIRECTIONS:
            raise ValueError(
                f"Unsupported flowchart direction '{self.direction}', "
                f"expected one of {', '.join(DIRECTIONS)}"
            )
        object.__setattr__(self, "direction", direction)
