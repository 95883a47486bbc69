"""Editor state and the print/export entry points.

An ``ExamDraft`` holds the clinician's unsaved edits. Print view renders the
draft as-is; export saves it first and only then compiles, so a failed save
never produces a document that disagrees with storage.
"""

import logging
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError

from laudovet.config import settings
from laudovet.records import Exam, OrganEntry, Patient, Structure, Template
from laudovet.report.compiler import ReportContext, compile_report
from laudovet.report.docx_renderer import DOCX_MEDIA_TYPE, render_docx
from laudovet.report.document import ReportDocument
from laudovet.report.errors import CompilationError, ExportSaveError, ReportError, ReportNotFoundError
from laudovet.report.ledger import DEFAULT_UNIT
from laudovet.report.print_view import render_print_view
from laudovet.report.translation import LANGUAGES, is_supported
from laudovet.structures import DefaultStructureResolver, StructureResolver

logger = logging.getLogger(__name__)


def resolve_language(lang: str | None) -> str:
    if not lang:
        return settings.default_language
    if not is_supported(lang):
        raise ValueError(f"Unsupported report language '{lang}' (expected one of {', '.join(LANGUAGES)})")
    return lang


class ExamDraft:
    """In-memory report state for one exam."""

    def __init__(self, exam: Exam, patient: Patient, structures: list[Structure]):
        self.exam = exam.model_copy(deep=True)
        self.patient = patient
        self.structures = structures
        if not self.exam.organs_data:
            self.exam.organs_data = [OrganEntry(organ_name=s.label) for s in structures]

    @property
    def labels(self) -> list[str]:
        return [s.label for s in self.structures]

    def entry(self, label: str) -> OrganEntry:
        for e in self.exam.organs_data:
            if e.organ_name == label:
                return e
        # Structure added to the resolver after this exam was first saved
        e = OrganEntry(organ_name=label)
        self.exam.organs_data.append(e)
        return e

    def set_text(self, label: str, text: str):
        self.entry(label).report_text = text

    def add_measurement(self, label: str, value, unit: str = DEFAULT_UNIT) -> str:
        return self.entry(label).ledger().add(value, unit)

    def remove_measurement(self, label: str, key: str):
        self.entry(label).ledger().remove(key)

    def apply_template(self, label: str, template: Template | str):
        text = template.text if isinstance(template, Template) else template
        e = self.entry(label)
        e.report_text = f"{e.report_text}\n{text}" if e.report_text else text

    def set_weight(self, weight: float | None):
        self.exam.exam_weight = weight

    def load_payload(self, organs_data: list | None = None, exam_weight: float | None = None):
        """Replace draft state with posted editor state."""
        if organs_data is not None:
            self.exam.organs_data = [
                e if isinstance(e, OrganEntry) else OrganEntry.model_validate(e)
                for e in organs_data
            ]
        if exam_weight is not None:
            self.exam.exam_weight = exam_weight

    def to_update(self) -> dict:
        return {
            "organs_data": [e.model_copy(deep=True) for e in self.exam.organs_data],
            "exam_weight": self.exam.exam_weight,
        }


@dataclass
class ExportedReport:
    filename: str
    content: bytes
    media_type: str = DOCX_MEDIA_TYPE


class ReportService:
    def __init__(self, store, resolver: StructureResolver | None = None):
        self._store = store
        self._resolver = resolver or DefaultStructureResolver()

    def structures_for(self, exam: Exam, patient: Patient) -> list[Structure]:
        return self._resolver.resolve(exam.exam_type, patient)

    def open_draft(self, exam_id: int) -> ExamDraft:
        exam = self._store.load_exam(exam_id)
        if exam is None:
            raise ReportNotFoundError("Exam", exam_id)
        patient = self._store.load_patient(exam.patient_id)
        if patient is None:
            raise ReportNotFoundError("Patient", exam.patient_id)
        return ExamDraft(exam, patient, self.structures_for(exam, patient))

    def compile(self, draft: ExamDraft, lang: str | None = None) -> ReportDocument:
        language = resolve_language(lang)
        try:
            clinic = self._store.load_settings()
            reference_values = self._store.load_reference_values(species=draft.patient.species)
        except SQLAlchemyError as e:
            logger.exception("Loading report context failed for exam %s", draft.exam.id)
            raise CompilationError(f"Report compilation failed for exam {draft.exam.id}: {e}") from e

        ctx = ReportContext(
            patient=draft.patient,
            exam=draft.exam,
            clinic=clinic,
            structures=draft.structures,
            reference_values=reference_values,
            language=language,
        )
        return compile_report(ctx)

    def print_view(self, draft: ExamDraft, lang: str | None = None) -> str:
        doc = self.compile(draft, lang)
        try:
            return render_print_view(doc)
        except Exception as e:
            raise CompilationError(f"Print view rendering failed for exam {draft.exam.id}: {e}") from e

    def export(self, draft: ExamDraft, lang: str | None = None) -> ExportedReport:
        lang = resolve_language(lang)
        try:
            self._store.save_exam(draft.exam.id, **draft.to_update())
        except ReportError:
            raise
        except SQLAlchemyError as e:
            logger.error("Pre-export save failed for exam %s: %s", draft.exam.id, e)
            raise ExportSaveError(f"Could not save exam {draft.exam.id} before export: {e}") from e

        doc = self.compile(draft, lang)
        try:
            content = render_docx(doc)
        except Exception as e:
            logger.exception("DOCX rendering failed for exam %s", draft.exam.id)
            raise CompilationError(f"DOCX rendering failed for exam {draft.exam.id}: {e}") from e

        filename = f"{doc.filename_stem}.docx"
        logger.info("Exported %s (%d bytes, %d sections)", filename, len(content), len(doc.sections))
        return ExportedReport(filename=filename, content=content)
