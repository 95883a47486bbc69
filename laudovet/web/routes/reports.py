"""Print view and DOCX export for one exam."""

from urllib.parse import quote

from fastapi import APIRouter, HTTPException, Query
from fastapi.responses import HTMLResponse, Response
from pydantic import BaseModel

from laudovet.records import OrganEntry
from laudovet.report.service import ExamDraft, ExportedReport, ReportService, resolve_language
from laudovet.storage import get_record_store

router = APIRouter(prefix="/exams")


class DraftPayload(BaseModel):
    """Unsaved editor state posted by the exam page."""
    organs_data: list[OrganEntry] | None = None
    exam_weight: float | None = None


def _service() -> ReportService:
    return ReportService(get_record_store())


def _language(lang: str | None) -> str:
    try:
        return resolve_language(lang)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


def _draft(service: ReportService, exam_id: int, payload: DraftPayload | None) -> ExamDraft:
    draft = service.open_draft(exam_id)
    if payload is not None:
        draft.load_payload(payload.organs_data, payload.exam_weight)
    return draft


def _download(report: ExportedReport) -> Response:
    ascii_name = report.filename.encode("ascii", "replace").decode("ascii").replace("?", "_")
    disposition = f"attachment; filename=\"{ascii_name}\"; filename*=UTF-8''{quote(report.filename)}"
    return Response(
        content=report.content,
        media_type=report.media_type,
        headers={"Content-Disposition": disposition},
    )


@router.get("/{exam_id}/print", response_class=HTMLResponse)
def print_stored(exam_id: int, lang: str | None = Query(None)):
    lang = _language(lang)
    service = _service()
    return HTMLResponse(service.print_view(_draft(service, exam_id, None), lang))


@router.post("/{exam_id}/print", response_class=HTMLResponse)
def print_draft(exam_id: int, payload: DraftPayload, lang: str | None = Query(None)):
    """Print view of the posted state. Nothing is saved."""
    lang = _language(lang)
    service = _service()
    return HTMLResponse(service.print_view(_draft(service, exam_id, payload), lang))


@router.get("/{exam_id}/export")
def export_stored(exam_id: int, lang: str | None = Query(None)):
    lang = _language(lang)
    service = _service()
    return _download(service.export(_draft(service, exam_id, None), lang))


@router.post("/{exam_id}/export")
def export_draft(exam_id: int, payload: DraftPayload, lang: str | None = Query(None)):
    """Save the posted state, then export it."""
    lang = _language(lang)
    service = _service()
    return _download(service.export(_draft(service, exam_id, payload), lang))
