"""JSON API used by the exam editor."""

import base64
import datetime
import logging

from fastapi import APIRouter, File, Form, HTTPException, Query, UploadFile
from pydantic import BaseModel

from laudovet.records import SPECIES, ExamImage, OrganEntry, Patient, ReferenceValue, Template
from laudovet.report.service import ReportService
from laudovet.report.translation import available_languages
from laudovet.storage import get_record_store
from laudovet.structures import EXAM_TYPES, DefaultStructureResolver

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


class DraftUpdate(BaseModel):
    organs_data: list[OrganEntry] | None = None
    exam_weight: float | None = None


class ExamCreate(BaseModel):
    exam_type: str | None = None
    exam_date: datetime.datetime | None = None
    exam_weight: float | None = None


def _exam_or_404(store, exam_id: int):
    exam = store.load_exam(exam_id)
    if exam is None:
        raise HTTPException(status_code=404, detail="Exam not found")
    return exam


def _patient_or_404(store, patient_id: int):
    patient = store.load_patient(patient_id)
    if patient is None:
        raise HTTPException(status_code=404, detail="Patient not found")
    return patient


# ---------------------------------------------------------------------------
# Vocabulary
# ---------------------------------------------------------------------------

@router.get("/languages")
def languages():
    return available_languages()


@router.get("/exam-types")
def exam_types():
    return [{"code": code, "name": name} for code, name in EXAM_TYPES.items()]


# ---------------------------------------------------------------------------
# Patients
# ---------------------------------------------------------------------------

@router.get("/patients")
def list_patients():
    return [p.model_dump(mode="json") for p in get_record_store().list_patients()]


@router.post("/patients", status_code=201)
def create_patient(patient: Patient):
    if patient.species not in SPECIES:
        raise HTTPException(status_code=400, detail=f"Unknown species '{patient.species}'")
    return get_record_store().create_patient(patient).model_dump(mode="json")


@router.put("/patients/{patient_id}")
def update_patient(patient_id: int, patient: Patient):
    store = get_record_store()
    _patient_or_404(store, patient_id)
    fields = patient.model_dump(exclude={"id", "created_at"})
    return store.update_patient(patient_id, **fields).model_dump(mode="json")


@router.delete("/patients/{patient_id}")
def delete_patient(patient_id: int):
    if not get_record_store().delete_patient(patient_id):
        raise HTTPException(status_code=404, detail="Patient not found")
    return {"deleted": patient_id}


# ---------------------------------------------------------------------------
# Exams
# ---------------------------------------------------------------------------

@router.post("/patients/{patient_id}/exams", status_code=201)
def create_exam(patient_id: int, body: ExamCreate):
    store = get_record_store()
    _patient_or_404(store, patient_id)
    if body.exam_type and body.exam_type not in EXAM_TYPES:
        raise HTTPException(status_code=400, detail=f"Unknown exam type '{body.exam_type}'")
    exam = store.create_exam(patient_id, body.exam_type, body.exam_date, body.exam_weight)
    return exam.model_dump(mode="json")


@router.get("/patients/{patient_id}/exams")
def list_exams(patient_id: int):
    store = get_record_store()
    _patient_or_404(store, patient_id)
    return [
        {"id": e.id, "exam_type": e.exam_type, "exam_date": e.exam_date, "images": len(e.images)}
        for e in store.list_exams(patient_id)
    ]


@router.delete("/exams/{exam_id}")
def delete_exam(exam_id: int):
    if not get_record_store().delete_exam(exam_id):
        raise HTTPException(status_code=404, detail="Exam not found")
    return {"deleted": exam_id}


@router.get("/exams/{exam_id}/structures")
def exam_structures(exam_id: int):
    store = get_record_store()
    exam = _exam_or_404(store, exam_id)
    patient = _patient_or_404(store, exam.patient_id)
    return [s.model_dump() for s in DefaultStructureResolver().resolve(exam.exam_type, patient)]


@router.get("/exams/{exam_id}/draft")
def get_draft(exam_id: int):
    draft = ReportService(get_record_store()).open_draft(exam_id)
    return {
        "exam": draft.exam.model_dump(mode="json"),
        "patient": draft.patient.model_dump(mode="json"),
        "structures": [s.model_dump() for s in draft.structures],
    }


@router.put("/exams/{exam_id}/draft")
def save_draft(exam_id: int, body: DraftUpdate):
    store = get_record_store()
    _exam_or_404(store, exam_id)
    fields = body.model_dump(exclude_unset=True)
    if "organs_data" in fields:
        fields["organs_data"] = body.organs_data
    return store.save_exam(exam_id, **fields).model_dump(mode="json")


@router.post("/exams/{exam_id}/images", status_code=201)
async def upload_image(exam_id: int, file: UploadFile = File(...), organ: str = Form("")):
    store = get_record_store()
    _exam_or_404(store, exam_id)
    raw = await file.read()
    mime = file.content_type or "application/octet-stream"
    data = f"data:{mime};base64,{base64.b64encode(raw).decode('ascii')}"
    image = store.add_image(exam_id, ExamImage(filename=file.filename or "image", data=data, organ=organ or None))
    logger.info("Added image %s (%d bytes) to exam %d", image.filename, len(raw), exam_id)
    return {"id": image.id, "filename": image.filename, "organ": image.organ}


@router.delete("/exams/{exam_id}/images/{image_id}")
def delete_image(exam_id: int, image_id: int):
    if not get_record_store().delete_image(exam_id, image_id):
        raise HTTPException(status_code=404, detail="Image not found")
    return {"deleted": image_id}


# ---------------------------------------------------------------------------
# Templates
# ---------------------------------------------------------------------------

@router.get("/templates")
def list_templates(organ: str = Query(""), lang: str = Query("")):
    return [t.model_dump() for t in get_record_store().load_templates(organ=organ or None, lang=lang or None)]


@router.post("/templates", status_code=201)
def create_template(template: Template):
    return get_record_store().create_template(template).model_dump()


@router.put("/templates/{template_id}")
def update_template(template_id: int, template: Template):
    updated = get_record_store().update_template(template_id, **template.model_dump(exclude={"id"}))
    if updated is None:
        raise HTTPException(status_code=404, detail="Template not found")
    return updated.model_dump()


@router.delete("/templates/{template_id}")
def delete_template(template_id: int):
    if not get_record_store().delete_template(template_id):
        raise HTTPException(status_code=404, detail="Template not found")
    return {"deleted": template_id}


# ---------------------------------------------------------------------------
# Reference values
# ---------------------------------------------------------------------------

@router.get("/reference-values")
def list_reference_values(organ: str = Query(""), species: str = Query(""), size: str = Query("")):
    values = get_record_store().load_reference_values(
        organ=organ or None, species=species or None, size=size or None,
    )
    return [v.model_dump() for v in values]


@router.post("/reference-values", status_code=201)
def create_reference_value(value: ReferenceValue):
    if value.min_value > value.max_value:
        raise HTTPException(status_code=400, detail="min_value must not exceed max_value")
    return get_record_store().create_reference_value(value).model_dump()


@router.put("/reference-values/{value_id}")
def update_reference_value(value_id: int, value: ReferenceValue):
    updated = get_record_store().update_reference_value(value_id, **value.model_dump(exclude={"id"}))
    if updated is None:
        raise HTTPException(status_code=404, detail="Reference value not found")
    return updated.model_dump()


@router.delete("/reference-values/{value_id}")
def delete_reference_value(value_id: int):
    if not get_record_store().delete_reference_value(value_id):
        raise HTTPException(status_code=404, detail="Reference value not found")
    return {"deleted": value_id}
