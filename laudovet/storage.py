"""SQLite-backed store for patients, exams, templates and reference values.

Rows never leave this module; callers get pydantic records.
"""

import datetime
import json
import logging

from sqlalchemy import func

from laudovet.config import ClinicSettings, settings
from laudovet.config_store import ConfigStore
from laudovet.models import (
    ExamImageRow,
    ExamRow,
    OrganEntryRow,
    PatientRow,
    ReferenceValueRow,
    TemplateRow,
)
from laudovet.records import Exam, ExamImage, OrganEntry, Patient, ReferenceValue, Template
from laudovet.report.errors import ReportNotFoundError
from laudovet.report.ledger import Measurement

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATES = [
    Template(
        organ="Fígado",
        lang="pt",
        category="normal",
        title="Achado Normal",
        text="Fígado com dimensões, contornos, ecogenicidade e ecotextura preservados.",
        order=1,
    ),
]

# Exam fields that save_exam accepts
_EXAM_FIELDS = {"exam_type", "exam_date", "exam_weight", "organs_data"}

_PATIENT_FIELDS = {
    "name", "species", "breed", "sex", "is_neutered", "birth_date",
    "birth_year", "weight", "owner_name", "owner_phone",
}


class RecordStore:
    def __init__(self, session_factory):
        self._session_factory = session_factory

    # ------------------------------------------------------------------
    # Patients
    # ------------------------------------------------------------------

    def create_patient(self, patient: Patient) -> Patient:
        with self._session_factory() as session:
            row = PatientRow()
            self._apply_patient_fields(row, patient.model_dump(include=_PATIENT_FIELDS))
            session.add(row)
            session.commit()
            logger.info("Created patient %d (%s)", row.id, row.name)
            return self._row_to_patient(row)

    def update_patient(self, patient_id: int, **fields) -> Patient:
        unknown = set(fields) - _PATIENT_FIELDS
        if unknown:
            raise ValueError(f"Unknown patient fields: {', '.join(sorted(unknown))}")
        with self._session_factory() as session:
            row = session.get(PatientRow, patient_id)
            if row is None:
                raise ReportNotFoundError("Patient", patient_id)
            self._apply_patient_fields(row, fields)
            session.commit()
            return self._row_to_patient(row)

    def delete_patient(self, patient_id: int) -> bool:
        """Delete a patient and, with it, every exam it owns."""
        with self._session_factory() as session:
            row = session.get(PatientRow, patient_id)
            if row is None:
                return False
            exam_count = len(row.exams)
            session.delete(row)
            session.commit()
            logger.info("Deleted patient %d and %d exam(s)", patient_id, exam_count)
            return True

    def load_patient(self, patient_id: int) -> Patient | None:
        with self._session_factory() as session:
            row = session.get(PatientRow, patient_id)
            return self._row_to_patient(row) if row else None

    def list_patients(self) -> list[Patient]:
        with self._session_factory() as session:
            rows = session.query(PatientRow).order_by(PatientRow.name).all()
            return [self._row_to_patient(r) for r in rows]

    # ------------------------------------------------------------------
    # Exams
    # ------------------------------------------------------------------

    def create_exam(
        self,
        patient_id: int,
        exam_type: str | None = None,
        exam_date: datetime.datetime | None = None,
        exam_weight: float | None = None,
    ) -> Exam:
        with self._session_factory() as session:
            if session.get(PatientRow, patient_id) is None:
                raise ReportNotFoundError("Patient", patient_id)
            row = ExamRow(
                patient_id=patient_id,
                exam_type=exam_type or settings.default_exam_type,
                exam_date=exam_date or datetime.datetime.now(),
                exam_weight=exam_weight,
            )
            session.add(row)
            session.commit()
            logger.info("Created exam %d (%s) for patient %d", row.id, row.exam_type, patient_id)
            return self._row_to_exam(row)

    def load_exam(self, exam_id: int) -> Exam | None:
        with self._session_factory() as session:
            row = session.get(ExamRow, exam_id)
            return self._row_to_exam(row) if row else None

    def list_exams(self, patient_id: int | None = None) -> list[Exam]:
        with self._session_factory() as session:
            q = session.query(ExamRow)
            if patient_id is not None:
                q = q.filter_by(patient_id=patient_id)
            return [self._row_to_exam(r) for r in q.order_by(ExamRow.exam_date.desc()).all()]

    def save_exam(self, exam_id: int, **fields) -> Exam:
        """Persist a partial update. ``organs_data`` replaces all entries, keeping order."""
        unknown = set(fields) - _EXAM_FIELDS
        if unknown:
            raise ValueError(f"Unknown exam fields: {', '.join(sorted(unknown))}")

        with self._session_factory() as session:
            row = session.get(ExamRow, exam_id)
            if row is None:
                raise ReportNotFoundError("Exam", exam_id)

            for key in ("exam_type", "exam_date", "exam_weight"):
                if key in fields:
                    setattr(row, key, fields[key])

            if "organs_data" in fields:
                entries = [
                    e if isinstance(e, OrganEntry) else OrganEntry.model_validate(e)
                    for e in fields["organs_data"]
                ]
                row.organ_entries = [
                    OrganEntryRow(
                        position=i,
                        organ_name=e.organ_name,
                        report_text=e.report_text,
                        measurements_json=json.dumps([m.model_dump() for m in e.measurements]),
                    )
                    for i, e in enumerate(entries)
                ]

            session.commit()
            logger.debug("Saved exam %d (%s)", exam_id, ", ".join(sorted(fields)) or "no fields")
            return self._row_to_exam(row)

    def delete_exam(self, exam_id: int) -> bool:
        with self._session_factory() as session:
            row = session.get(ExamRow, exam_id)
            if row is None:
                return False
            session.delete(row)
            session.commit()
            return True

    # ------------------------------------------------------------------
    # Exam images
    # ------------------------------------------------------------------

    def add_image(self, exam_id: int, image: ExamImage) -> ExamImage:
        with self._session_factory() as session:
            exam = session.get(ExamRow, exam_id)
            if exam is None:
                raise ReportNotFoundError("Exam", exam_id)
            last = (
                session.query(func.max(ExamImageRow.position))
                .filter(ExamImageRow.exam_id == exam_id)
                .scalar()
            )
            row = ExamImageRow(
                exam_id=exam_id,
                position=0 if last is None else last + 1,
                filename=image.filename,
                data=image.data,
                organ=image.organ,
            )
            session.add(row)
            session.commit()
            return self._row_to_image(row)

    def delete_image(self, exam_id: int, image_id: int) -> bool:
        with self._session_factory() as session:
            row = session.query(ExamImageRow).filter_by(exam_id=exam_id, id=image_id).first()
            if row is None:
                return False
            session.delete(row)
            session.commit()
            return True

    # ------------------------------------------------------------------
    # Clinic settings
    # ------------------------------------------------------------------

    def load_settings(self) -> ClinicSettings:
        return ConfigStore(self._session_factory).get_clinic_settings()

    # ------------------------------------------------------------------
    # Templates
    # ------------------------------------------------------------------

    def load_templates(self, organ: str | None = None, lang: str | None = None) -> list[Template]:
        with self._session_factory() as session:
            q = session.query(TemplateRow)
            if organ:
                q = q.filter_by(organ=organ)
            if lang:
                q = q.filter_by(lang=lang)
            rows = q.order_by(TemplateRow.order, TemplateRow.id).all()
            return [self._row_to_template(r) for r in rows]

    def create_template(self, template: Template) -> Template:
        with self._session_factory() as session:
            row = TemplateRow(**template.model_dump(exclude={"id"}))
            session.add(row)
            session.commit()
            return self._row_to_template(row)

    def update_template(self, template_id: int, **fields) -> Template | None:
        with self._session_factory() as session:
            row = session.get(TemplateRow, template_id)
            if row is None:
                return None
            for key, value in fields.items():
                if key in Template.model_fields and key != "id":
                    setattr(row, key, value)
            session.commit()
            return self._row_to_template(row)

    def delete_template(self, template_id: int) -> bool:
        with self._session_factory() as session:
            row = session.get(TemplateRow, template_id)
            if row is None:
                return False
            session.delete(row)
            session.commit()
            return True

    def seed_default_templates(self):
        with self._session_factory() as session:
            if session.query(TemplateRow).count() > 0:
                return  # Already seeded
            for t in DEFAULT_TEMPLATES:
                session.add(TemplateRow(**t.model_dump(exclude={"id"})))
            session.commit()
            logger.info("Seeded %d default template(s)", len(DEFAULT_TEMPLATES))

    # ------------------------------------------------------------------
    # Reference values
    # ------------------------------------------------------------------

    def load_reference_values(
        self,
        organ: str | None = None,
        species: str | None = None,
        size: str | None = None,
    ) -> list[ReferenceValue]:
        with self._session_factory() as session:
            q = session.query(ReferenceValueRow)
            if organ:
                q = q.filter_by(organ=organ)
            if species:
                q = q.filter_by(species=species)
            if size:
                q = q.filter_by(size=size)
            return [self._row_to_reference(r) for r in q.order_by(ReferenceValueRow.id).all()]

    def create_reference_value(self, value: ReferenceValue) -> ReferenceValue:
        with self._session_factory() as session:
            row = ReferenceValueRow(**value.model_dump(exclude={"id"}))
            session.add(row)
            session.commit()
            return self._row_to_reference(row)

    def update_reference_value(self, value_id: int, **fields) -> ReferenceValue | None:
        with self._session_factory() as session:
            row = session.get(ReferenceValueRow, value_id)
            if row is None:
                return None
            for key, value in fields.items():
                if key in ReferenceValue.model_fields and key != "id":
                    setattr(row, key, value)
            session.commit()
            return self._row_to_reference(row)

    def delete_reference_value(self, value_id: int) -> bool:
        with self._session_factory() as session:
            row = session.get(ReferenceValueRow, value_id)
            if row is None:
                return False
            session.delete(row)
            session.commit()
            return True

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _apply_patient_fields(row: PatientRow, fields: dict):
        for key, value in fields.items():
            if key == "birth_date" and isinstance(value, datetime.date):
                value = value.isoformat()
            setattr(row, key, value)

    @staticmethod
    def _row_to_patient(row: PatientRow) -> Patient:
        return Patient(
            id=row.id,
            name=row.name,
            species=row.species,
            breed=row.breed or "",
            sex=row.sex,
            is_neutered=bool(row.is_neutered),
            birth_date=row.birth_date or None,
            birth_year=row.birth_year,
            weight=row.weight,
            owner_name=row.owner_name or "",
            owner_phone=row.owner_phone or "",
            created_at=row.created_at,
        )

    @staticmethod
    def _row_to_exam(row: ExamRow) -> Exam:
        return Exam(
            id=row.id,
            patient_id=row.patient_id,
            exam_type=row.exam_type,
            exam_date=row.exam_date,
            exam_weight=row.exam_weight,
            organs_data=[
                OrganEntry(
                    organ_name=e.organ_name,
                    report_text=e.report_text or "",
                    measurements=[Measurement(**m) for m in json.loads(e.measurements_json or "[]")],
                )
                for e in row.organ_entries
            ],
            images=[RecordStore._row_to_image(i) for i in row.images],
            created_at=row.created_at,
        )

    @staticmethod
    def _row_to_image(row: ExamImageRow) -> ExamImage:
        return ExamImage(id=row.id, filename=row.filename, data=row.data, organ=row.organ)

    @staticmethod
    def _row_to_template(row: TemplateRow) -> Template:
        return Template(
            id=row.id,
            organ=row.organ,
            lang=row.lang,
            category=row.category,
            title=row.title,
            text=row.text or "",
            order=row.order,
        )

    @staticmethod
    def _row_to_reference(row: ReferenceValueRow) -> ReferenceValue:
        return ReferenceValue(
            id=row.id,
            organ=row.organ,
            species=row.species,
            size=row.size,
            min_value=row.min_value,
            max_value=row.max_value,
            unit=row.unit,
        )


# Module-level singleton, initialized lazily after database.py sets up SessionLocal
_record_store: RecordStore | None = None


def get_record_store() -> RecordStore:
    global _record_store
    if _record_store is None:
        from laudovet.database import SessionLocal
        _record_store = RecordStore(SessionLocal)
    return _record_store
