import logging

from fastapi import APIRouter

from canvas_mermaid.config import VAULT_ROOT
from canvas_mermaid.db.session import log_conversion
from canvas_mermaid.dsl.patcher import patch_document
from canvas_mermaid.pipeline.convert import ConvertCanvasToMermaid
from canvas_mermaid.pipeline.refresh import RefreshCanvasCallouts
from canvas_mermaid.repositories.filesystem import FileCanvasSource, FileDocumentStore
from canvas_mermaid.schemas import ConvertRequest, PatchRequest, RefreshRequest

logger = logging.getLogger(__name__)

router = APIRouter()


def _status(success: bool) -> str:
    return "success" if success else "error"


@router.get("/health")
def health():
    return {"status": "ok"}


@router.post("/convert")
def convert_canvas(request: ConvertRequest):
    result = ConvertCanvasToMermaid().execute(
        request.canvas,
        request.name,
        settings=request.settings.to_settings(),
    )
    log_conversion(result)

    return {"status": _status(result.success), **result.to_dict()}


@router.post("/patch")
def patch_canvas_callout(request: PatchRequest):
    result = ConvertCanvasToMermaid().execute(
        request.canvas,
        request.name,
        settings=request.settings.to_settings(),
    )
    if not result.success:
        return {
            "status": "error",
            "message": result.message,
            "error": result.error,
            "document": request.document,
        }

    patch = patch_document(request.document, request.name, result.callout)
    return {
        "status": "success",
        "message": f"Callout {patch.action}",
        "action": patch.action,
        "replaced_count": patch.replaced_count,
        "document": patch.content,
        "statistics": result.statistics.to_dict(),
    }


@router.post("/refresh")
def refresh_callouts(request: RefreshRequest):
    use_case = RefreshCanvasCallouts(
        documents=FileDocumentStore(VAULT_ROOT),
        canvases=FileCanvasSource(VAULT_ROOT),
    )
    result = use_case.execute(
        request.canvas_path,
        name=request.name,
        settings=request.settings.to_settings(),
    )

    return {"status": _status(result.success), **result.to_dict()}
