import logging
import posixpath
from dataclasses import dataclass, field
from typing import List, Optional

from canvas_mermaid.compiler.types import ConversionSettings
from canvas_mermaid.dsl.patcher import patch_document
from canvas_mermaid.pipeline.convert import ConversionResult, ConvertCanvasToMermaid
from canvas_mermaid.repositories.base import CanvasSource, DocumentStore

logger = logging.getLogger(__name__)

UPDATED = "updated"
SKIPPED = "skipped"
FAILED = "failed"


@dataclass
class DocumentOutcome:
    path: str
    status: str                      # updated | skipped | failed
    action: Optional[str] = None     # replaced | appended
    reason: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "path": self.path,
            "status": self.status,
            "action": self.action,
            "reason": self.reason,
        }


@dataclass
class RefreshResult:
    success: bool
    message: str
    outcomes: List[DocumentOutcome] = field(default_factory=list)
    conversion: Optional[ConversionResult] = None

    def _paths(self, status: str) -> List[str]:
        return [o.path for o in self.outcomes if o.status == status]

    @property
    def updated_files(self) -> List[str]:
        return self._paths(UPDATED)

    @property
    def skipped_files(self) -> List[str]:
        return self._paths(SKIPPED)

    @property
    def failed_files(self) -> List[str]:
        return self._paths(FAILED)

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "message": self.message,
            "updated_files": self.updated_files,
            "skipped_files": self.skipped_files,
            "failed_files": self.failed_files,
            "outcomes": [o.to_dict() for o in self.outcomes],
            "statistics": self.conversion.statistics.to_dict() if self.conversion else None,
        }


def canvas_reference(canvas_path: str) -> str:
    """Documents link to a canvas by its file name: [[Flow.canvas]]"""
    return posixpath.basename(canvas_path.replace("\\", "/"))


class RefreshCanvasCallouts:
    """
    Regenerate the callout of one canvas in every document that links to it.

    Documents are handled one at a time; a document that cannot be read or
    written is recorded as failed and the others still get updated.
    """

    def __init__(
        self,
        documents: DocumentStore,
        canvases: CanvasSource,
        converter: Optional[ConvertCanvasToMermaid] = None,
    ):
        self.documents = documents
        self.canvases = canvases
        self.converter = converter or ConvertCanvasToMermaid()

    def execute(
        self,
        canvas_path: str,
        name: Optional[str] = None,
        settings: Optional[ConversionSettings] = None,
    ) -> RefreshResult:
        name = name or canvas_reference(canvas_path)

        try:
            data = self.canvases.load(canvas_path)
        except Exception as e:
            logger.warning("Unable to load canvas %s: %s", canvas_path, e)
            return RefreshResult(success=False, message=f"Unable to get Canvas data: {e}")

        conversion = self.converter.execute(data, name, settings=settings)
        if not conversion.success:
            return RefreshResult(
                success=False,
                message=f"{conversion.message}: {conversion.error}",
                conversion=conversion,
            )

        try:
            paths = self.documents.find_referencing(name)
        except Exception as e:
            logger.warning("Unable to search documents for [[%s]]: %s", name, e)
            return RefreshResult(
                success=False,
                message=f"Unable to search documents: {e}",
                conversion=conversion,
            )

        if not paths:
            return RefreshResult(
                success=False,
                message=f"No documents linking to [[{name}]] found",
                conversion=conversion,
            )

        outcomes = [self._refresh_document(path, name, conversion.callout) for path in paths]
        result = RefreshResult(
            success=not any(o.status == FAILED for o in outcomes),
            message="",
            outcomes=outcomes,
            conversion=conversion,
        )
        result.message = (
            f"Updated {len(result.updated_files)} files, "
            f"skipped {len(result.skipped_files)}, "
            f"failed {len(result.failed_files)}"
        )
        logger.info("Refresh of [[%s]]: %s", name, result.message)
        return result

    def _refresh_document(self, path: str, name: str, callout: str) -> DocumentOutcome:
        try:
            current = self.documents.read(path)
            patch = patch_document(current, name, callout)
            if patch.content == current:
                return DocumentOutcome(path=path, status=SKIPPED, action=patch.action)

            self.documents.write(path, patch.content)
            return DocumentOutcome(path=path, status=UPDATED, action=patch.action)

        except Exception as e:
            logger.warning("Failed to refresh %s: %s", path, e)
            return DocumentOutcome(path=path, status=FAILED, reason=str(e))
