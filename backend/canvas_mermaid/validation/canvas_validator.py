"""
Canvas Validator - Checks raw canvas data before it is compiled.

Errors (conversion is refused):
- No nodes, or only group nodes
- Nodes without an identifier
- Duplicate node IDs
- Edges referencing unknown nodes
- Distinct IDs that sanitize to the same Mermaid token

Warnings / info (conversion proceeds):
- Self-loops
- Duplicate edges
"""

import logging
import re
from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Set, Tuple

from canvas_mermaid.ir.canvas import CanvasData
from canvas_mermaid.ir.errors import CanvasValidationError

logger = logging.getLogger(__name__)

_UNSAFE_ID_CHARS = re.compile(r"[^A-Za-z0-9_]")


def sanitize_id(raw_id: str) -> str:
    """
    Convert any canvas identifier into a Mermaid-safe token.
    Deterministic and idempotent.
    """
    return _UNSAFE_ID_CHARS.sub("_", raw_id)


class ValidationSeverity(Enum):
    ERROR = "error"      # Canvas cannot be converted
    WARNING = "warning"  # Converts, but the result may surprise
    INFO = "info"        # Suggestions


@dataclass
class ValidationIssue:
    """A single validation issue found in the canvas"""
    severity: ValidationSeverity
    code: str           # Machine-readable issue code
    message: str        # Human-readable description
    node_id: Optional[str] = None
    edge_info: Optional[str] = None
    suggestion: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "severity": self.severity.value,
            "code": self.code,
            "message": self.message,
            "node_id": self.node_id,
            "edge_info": self.edge_info,
            "suggestion": self.suggestion,
        }


@dataclass
class CanvasValidationResult:
    """Result of canvas validation"""
    is_valid: bool
    issues: List[ValidationIssue] = field(default_factory=list)
    stats: Dict[str, int] = field(default_factory=dict)

    @property
    def errors(self) -> List[ValidationIssue]:
        return [i for i in self.issues if i.severity == ValidationSeverity.ERROR]

    @property
    def warnings(self) -> List[ValidationIssue]:
        return [i for i in self.issues if i.severity == ValidationSeverity.WARNING]

    @property
    def error_count(self) -> int:
        return len(self.errors)

    @property
    def warning_count(self) -> int:
        return len(self.warnings)

    @property
    def info_count(self) -> int:
        return sum(1 for i in self.issues if i.severity == ValidationSeverity.INFO)

    def to_dict(self) -> dict:
        return {
            "is_valid": self.is_valid,
            "error_count": self.error_count,
            "warning_count": self.warning_count,
            "info_count": self.info_count,
            "issues": [i.to_dict() for i in self.issues],
            "stats": self.stats,
        }

    def get_summary(self) -> str:
        """Get human-readable summary"""
        status = "✅ Valid" if self.is_valid else "❌ Invalid"
        return (
            f"{status} | "
            f"Errors: {self.error_count}, Warnings: {self.warning_count}, Info: {self.info_count}"
        )

    def error_message(self) -> str:
        return "; ".join(f"[{i.code}] {i.message}" for i in self.errors)


class CanvasValidator:
    """
    Validates raw canvas data ahead of graph construction.

    Usage:
        result = CanvasValidator().validate(canvas)
        if not result.is_valid:
            print(result.error_message())
    """

    def validate(self, canvas: CanvasData) -> CanvasValidationResult:
        issues: List[ValidationIssue] = []

        if canvas is None or not any(node.type != "group" for node in canvas.nodes):
            # Group nodes become subgraphs; at least one declarable node is required
            issues.append(ValidationIssue(
                severity=ValidationSeverity.ERROR,
                code="NO_NODES",
                message="Canvas does not contain valid node data",
                suggestion="Add at least one non-group node to the canvas",
            ))
            stats = {"nodes": 0, "edges": 0, "groups": 0}
            if canvas is not None:
                stats = self._calculate_stats(canvas)
            return CanvasValidationResult(is_valid=False, issues=issues, stats=stats)

        node_ids = {node.id for node in canvas.nodes if node.id}

        issues.extend(self._check_missing_ids(canvas))
        issues.extend(self._check_duplicate_ids(canvas))
        issues.extend(self._check_sanitized_collisions(canvas))
        issues.extend(self._check_missing_edge_references(canvas, node_ids))
        issues.extend(self._check_self_loops(canvas))
        issues.extend(self._check_duplicate_edges(canvas))

        has_errors = any(i.severity == ValidationSeverity.ERROR for i in issues)

        return CanvasValidationResult(
            is_valid=not has_errors,
            issues=issues,
            stats=self._calculate_stats(canvas),
        )

    def _check_missing_ids(self, canvas: CanvasData) -> List[ValidationIssue]:
        issues = []
        for index, node in enumerate(canvas.nodes):
            if not node.id or not node.id.strip():
                issues.append(ValidationIssue(
                    severity=ValidationSeverity.ERROR,
                    code="MISSING_NODE_ID",
                    message=f"Canvas node at position {index} has no identifier",
                    suggestion="Every canvas node needs a non-empty 'id'",
                ))
        for index, group in enumerate(canvas.groups):
            if not group.id or not group.id.strip():
                issues.append(ValidationIssue(
                    severity=ValidationSeverity.ERROR,
                    code="MISSING_GROUP_ID",
                    message=f"Canvas group at position {index} has no identifier",
                    suggestion="Every canvas group needs a non-empty 'id'",
                ))
        return issues

    def _check_duplicate_ids(self, canvas: CanvasData) -> List[ValidationIssue]:
        issues = []
        seen: Dict[str, int] = defaultdict(int)
        for record_id in self._all_ids(canvas):
            seen[record_id] += 1
        for record_id, count in seen.items():
            if count > 1:
                issues.append(ValidationIssue(
                    severity=ValidationSeverity.ERROR,
                    code="DUPLICATE_NODE_ID",
                    message=f"Duplicate node ID '{record_id}' appears {count} times",
                    node_id=record_id,
                    suggestion="Ensure each node and group has a unique ID",
                ))
        return issues

    def _check_sanitized_collisions(self, canvas: CanvasData) -> List[ValidationIssue]:
        issues = []
        by_token: Dict[str, Set[str]] = defaultdict(set)
        for record_id in self._all_ids(canvas):
            by_token[sanitize_id(record_id)].add(record_id)
        for token, raw_ids in by_token.items():
            if len(raw_ids) > 1:
                names = ", ".join(f"'{r}'" for r in sorted(raw_ids))
                issues.append(ValidationIssue(
                    severity=ValidationSeverity.ERROR,
                    code="SANITIZED_ID_COLLISION",
                    message=f"IDs {names} all sanitize to '{token}'",
                    node_id=token,
                    suggestion="Rename one of the nodes so the IDs differ in letters, digits or '_'",
                ))
        return issues

    def _check_missing_edge_references(self, canvas: CanvasData, node_ids: Set[str]) -> List[ValidationIssue]:
        issues = []
        for edge in canvas.edges:
            edge_info = f"{edge.from_node} -> {edge.to_node}"
            if edge.from_node not in node_ids:
                issues.append(ValidationIssue(
                    severity=ValidationSeverity.ERROR,
                    code="MISSING_SOURCE_NODE",
                    message=f"Edge '{edge.id}' references non-existent source node '{edge.from_node}'",
                    edge_info=edge_info,
                    suggestion=f"Add node '{edge.from_node}' or fix the edge reference",
                ))
            if edge.to_node not in node_ids:
                issues.append(ValidationIssue(
                    severity=ValidationSeverity.ERROR,
                    code="MISSING_TARGET_NODE",
                    message=f"Edge '{edge.id}' references non-existent target node '{edge.to_node}'",
                    edge_info=edge_info,
                    suggestion=f"Add node '{edge.to_node}' or fix the edge reference",
                ))
        return issues

    def _check_self_loops(self, canvas: CanvasData) -> List[ValidationIssue]:
        issues = []
        for edge in canvas.edges:
            if edge.from_node and edge.from_node == edge.to_node:
                issues.append(ValidationIssue(
                    severity=ValidationSeverity.WARNING,
                    code="SELF_LOOP",
                    message=f"Edge creates self-loop on node '{edge.from_node}'",
                    node_id=edge.from_node,
                    edge_info=f"{edge.from_node} -> {edge.to_node}",
                ))
        return issues

    def _check_duplicate_edges(self, canvas: CanvasData) -> List[ValidationIssue]:
        issues = []
        edge_counts: Dict[Tuple[str, str, str], int] = defaultdict(int)
        for edge in canvas.edges:
            edge_counts[(edge.from_node, edge.to_node, edge.label or "")] += 1
        for (source, target, label), count in edge_counts.items():
            if count > 1:
                issues.append(ValidationIssue(
                    severity=ValidationSeverity.INFO,
                    code="DUPLICATE_EDGE",
                    message=f"Duplicate edge '{source}' -> '{target}' ({label}) appears {count} times",
                    edge_info=f"{source} -> {target}",
                ))
        return issues

    def _all_ids(self, canvas: CanvasData) -> List[str]:
        ids = [node.id for node in canvas.nodes if node.id]
        ids.extend(group.id for group in canvas.groups if group.id)
        return ids

    def _calculate_stats(self, canvas: CanvasData) -> Dict[str, int]:
        group_nodes = sum(1 for n in canvas.nodes if n.type == "group")
        return {
            "nodes": len(canvas.nodes) - group_nodes,
            "edges": len(canvas.edges),
            "groups": group_nodes + len(canvas.groups),
        }


def validate_canvas(canvas: CanvasData) -> CanvasValidationResult:
    """Convenience function to validate canvas data."""
    return CanvasValidator().validate(canvas)


def raise_on_errors(canvas: CanvasData) -> CanvasValidationResult:
    """Validate canvas data and raise CanvasValidationError if errors found."""
    result = validate_canvas(canvas)
    if not result.is_valid:
        logger.info("Canvas validation: %s", result.get_summary())
        raise CanvasValidationError(
            f"Canvas data validation failed with {result.error_count} errors: "
            + result.error_message(),
            issues=result.errors,
        )
    return result
