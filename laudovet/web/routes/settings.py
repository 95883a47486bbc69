"""Settings routes: clinic identity and letterhead."""

import base64
import logging
from pathlib import Path

from fastapi import APIRouter, File, Form, HTTPException, Request, UploadFile
from fastapi.responses import RedirectResponse

from laudovet.config import LetterheadMargins, settings
from laudovet.config_store import get_config_store
from laudovet.web.app import templates

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/settings")

LETTERHEAD_TYPES = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".pdf": "application/pdf",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
}


@router.get("/")
def settings_page(request: Request):
    clinic = get_config_store().get_clinic_settings()
    return templates.TemplateResponse(request, "settings/index.html", {
        "clinic": clinic,
        "max_mb": settings.letterhead_max_bytes // (1024 * 1024),
        "accepted": ",".join(LETTERHEAD_TYPES),
    })


@router.post("/clinic")
def save_clinic(
    request: Request,
    clinic_name: str = Form(""),
    clinic_address: str = Form(""),
    veterinarian_name: str = Form(""),
    crmv: str = Form(""),
    margin_top: int = Form(30),
    margin_left: int = Form(15),
    margin_right: int = Form(15),
    margin_bottom: int = Form(20),
):
    store = get_config_store()
    clinic = store.get_clinic_settings().model_copy(update={
        "clinic_name": clinic_name.strip(),
        "clinic_address": clinic_address.strip(),
        "veterinarian_name": veterinarian_name.strip(),
        "crmv": crmv.strip(),
        "letterhead_margins_mm": LetterheadMargins(
            top=margin_top, left=margin_left, right=margin_right, bottom=margin_bottom,
        ),
    })
    store.save_clinic_settings(clinic)
    logger.info("Clinic settings updated")
    return RedirectResponse("/settings/", status_code=303)


@router.post("/letterhead")
async def upload_letterhead(request: Request, file: UploadFile = File(...)):
    suffix = Path(file.filename or "").suffix.lower()
    mime = LETTERHEAD_TYPES.get(suffix)
    if mime is None:
        raise HTTPException(status_code=400, detail=f"Unsupported letterhead type '{suffix or file.filename}'")

    raw = await file.read()
    if len(raw) > settings.letterhead_max_bytes:
        raise HTTPException(
            status_code=413,
            detail=f"Letterhead exceeds {settings.letterhead_max_bytes // (1024 * 1024)} MB",
        )

    store = get_config_store()
    clinic = store.get_clinic_settings().model_copy(update={
        "letterhead_data": f"data:{mime};base64,{base64.b64encode(raw).decode('ascii')}",
        "letterhead_filename": file.filename,
    })
    store.save_clinic_settings(clinic)
    logger.info("Letterhead uploaded: %s (%d bytes)", file.filename, len(raw))
    return RedirectResponse("/settings/", status_code=303)


@router.post("/letterhead/remove")
def remove_letterhead(request: Request):
    get_config_store().clear_letterhead()
    return RedirectResponse("/settings/", status_code=303)
