"""
Geometric containment between canvas nodes and groups.

Canvas files do not record which group a node sits in, nor how groups nest.
Both relations are inferred from axis-aligned bounding boxes:

- a node belongs to the first group (declaration order) whose box contains it
- a group nests under the first other group (declaration order) whose box
  contains it

First-match is a tie-break, not a "tightest container" search. Overlapping
candidates are reported back so callers can surface them.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from canvas_mermaid.compiler.types import Bounds


@dataclass
class Containment:
    membership: Dict[str, Optional[str]] = field(default_factory=dict)   # node id -> group id
    parents: Dict[str, Optional[str]] = field(default_factory=dict)      # group id -> parent group id
    ambiguous_nodes: Dict[str, List[str]] = field(default_factory=dict)
    ambiguous_groups: Dict[str, List[str]] = field(default_factory=dict)

    def children_of(self, group_id: str) -> List[str]:
        return [node_id for node_id, gid in self.membership.items() if gid == group_id]


def contains(outer: Bounds, inner: Bounds) -> bool:
    """Closed-interval box inclusion; touching edges count as contained."""
    return (
        inner.left >= outer.left
        and inner.right <= outer.right
        and inner.top >= outer.top
        and inner.bottom <= outer.bottom
    )


def resolve_membership(
    nodes: Sequence[Tuple[str, Bounds]],
    groups: Sequence[Tuple[str, Bounds]],
) -> Tuple[Dict[str, Optional[str]], Dict[str, List[str]]]:
    membership: Dict[str, Optional[str]] = {}
    ambiguous: Dict[str, List[str]] = {}

    for node_id, node_bounds in nodes:
        candidates = [gid for gid, group_bounds in groups if contains(group_bounds, node_bounds)]
        membership[node_id] = candidates[0] if candidates else None
        if len(candidates) > 1:
            ambiguous[node_id] = candidates

    return membership, ambiguous


def resolve_nesting(
    groups: Sequence[Tuple[str, Bounds]],
) -> Tuple[Dict[str, Optional[str]], Dict[str, List[str]]]:
    parents: Dict[str, Optional[str]] = {}
    ambiguous: Dict[str, List[str]] = {}

    for i, (group_id, inner) in enumerate(groups):
        candidates = []
        for j, (other_id, outer) in enumerate(groups):
            if i == j or not contains(outer, inner):
                continue
            # Identical boxes contain each other; only the earlier one may be the parent
            if contains(inner, outer) and j > i:
                continue
            candidates.append(other_id)

        parents[group_id] = candidates[0] if candidates else None
        if len(candidates) > 1:
            ambiguous[group_id] = candidates

    return parents, ambiguous


def resolve_containment(
    nodes: Sequence[Tuple[str, Bounds]],
    groups: Sequence[Tuple[str, Bounds]],
) -> Containment:
    membership, ambiguous_nodes = resolve_membership(nodes, groups)
    parents, ambiguous_groups = resolve_nesting(groups)
    return Containment(
        membership=membership,
        parents=parents,
        ambiguous_nodes=ambiguous_nodes,
        ambiguous_groups=ambiguous_groups,
    )
