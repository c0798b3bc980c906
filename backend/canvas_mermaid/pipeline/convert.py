import logging
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from pydantic import ValidationError as SchemaError

from canvas_mermaid.compiler.normalize import build_graph
from canvas_mermaid.compiler.render_mermaid import render_mermaid
from canvas_mermaid.compiler.types import ConversionSettings
from canvas_mermaid.dsl.callout import format_callout
from canvas_mermaid.dsl.mermaid import validate_mermaid
from canvas_mermaid.ir.canvas import CanvasData, CanvasInput, parse_canvas
from canvas_mermaid.ir.errors import CanvasValidationError
from canvas_mermaid.repositories.base import ClipboardSink

logger = logging.getLogger(__name__)


@dataclass
class ConversionStatistics:
    nodes_count: int = 0
    edges_count: int = 0
    groups_count: int = 0
    processing_time_ms: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        return {
            "nodes_count": self.nodes_count,
            "edges_count": self.edges_count,
            "groups_count": self.groups_count,
            "processing_time_ms": self.processing_time_ms,
        }


@dataclass
class ConversionResult:
    success: bool
    message: str
    name: str = ""
    error: Optional[str] = None
    mermaid: str = ""
    callout: str = ""
    valid_mermaid: bool = False
    copied_to_clipboard: bool = False
    warnings: List[str] = field(default_factory=list)
    issues: List[dict] = field(default_factory=list)
    statistics: ConversionStatistics = field(default_factory=ConversionStatistics)

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "message": self.message,
            "name": self.name,
            "error": self.error,
            "mermaid": self.mermaid,
            "callout": self.callout,
            "valid_mermaid": self.valid_mermaid,
            "copied_to_clipboard": self.copied_to_clipboard,
            "warnings": list(self.warnings),
            "issues": list(self.issues),
            "statistics": self.statistics.to_dict(),
        }


def _raw_counts(canvas: Optional[CanvasData]) -> ConversionStatistics:
    if canvas is None:
        return ConversionStatistics()
    group_nodes = sum(1 for n in canvas.nodes if n.type == "group")
    return ConversionStatistics(
        nodes_count=len(canvas.nodes) - group_nodes,
        edges_count=len(canvas.edges),
        groups_count=group_nodes + len(canvas.groups),
    )


class ConvertCanvasToMermaid:
    """
    Canvas → Mermaid flowchart → quote callout.

    Never raises: every failure comes back as a ConversionResult with
    success=False and a message naming what went wrong.
    """

    def __init__(
        self,
        settings: Optional[ConversionSettings] = None,
        clipboard: Optional[ClipboardSink] = None,
    ):
        self.settings = settings or ConversionSettings()
        self.clipboard = clipboard

    def execute(
        self,
        data: CanvasInput,
        name: str,
        settings: Optional[ConversionSettings] = None,
        copy_to_clipboard: bool = False,
    ) -> ConversionResult:
        start = time.perf_counter()
        settings = settings or self.settings
        canvas: Optional[CanvasData] = None

        def elapsed_stats(stats: ConversionStatistics) -> ConversionStatistics:
            stats.processing_time_ms = round((time.perf_counter() - start) * 1000, 3)
            return stats

        try:
            # -------------------------
            # Parse
            # -------------------------
            try:
                canvas = parse_canvas(data)
            except (SchemaError, TypeError, ValueError) as e:
                logger.info("Canvas '%s' could not be parsed: %s", name, e)
                return ConversionResult(
                    success=False,
                    message="Canvas content parsing failed",
                    name=name,
                    error=str(e),
                    statistics=elapsed_stats(ConversionStatistics()),
                )

            # -------------------------
            # Validate + build graph
            # -------------------------
            try:
                graph = build_graph(canvas, settings)
            except CanvasValidationError as e:
                logger.info("Canvas '%s' rejected: %s", name, e)
                return ConversionResult(
                    success=False,
                    message="Canvas data is invalid or empty",
                    name=name,
                    error=str(e),
                    issues=[issue.to_dict() for issue in e.issues],
                    statistics=elapsed_stats(_raw_counts(canvas)),
                )

            # -------------------------
            # Serialize
            # -------------------------
            mermaid = render_mermaid(graph, settings)
            callout = format_callout(name, mermaid)
            valid = validate_mermaid(mermaid)
            if not valid:
                logger.warning("Generated flowchart for '%s' failed the syntax check", name)

            stats = ConversionStatistics(
                nodes_count=len(graph.nodes),
                edges_count=len(graph.edges),
                groups_count=len(graph.groups),
            )
            for warning in graph.warnings:
                logger.warning("Canvas '%s': %s", name, warning)

            result = ConversionResult(
                success=True,
                message="Canvas conversion successful",
                name=name,
                mermaid=mermaid,
                callout=callout,
                valid_mermaid=valid,
                warnings=list(graph.warnings),
                statistics=stats,
            )

            if copy_to_clipboard:
                self._copy(result)

            elapsed_stats(result.statistics)
            logger.info(
                "Converted '%s': %d nodes, %d edges, %d groups in %.1f ms",
                name,
                stats.nodes_count,
                stats.edges_count,
                stats.groups_count,
                stats.processing_time_ms,
            )
            return result

        except Exception as e:
            logger.exception("Conversion of '%s' failed", name)
            return ConversionResult(
                success=False,
                message="Conversion failed",
                name=name,
                error=f"Conversion failed: {e}",
                statistics=elapsed_stats(_raw_counts(canvas)),
            )

    def _copy(self, result: ConversionResult) -> None:
        if self.clipboard is None:
            result.success = False
            result.message = "Failed to copy to clipboard"
            result.error = "No clipboard available"
            return

        try:
            self.clipboard.write(result.callout)
            result.copied_to_clipboard = True
        except Exception as e:
            logger.warning("Clipboard write failed: %s", e)
            result.success = False
            result.message = "Failed to copy to clipboard"
            result.error = str(e)
