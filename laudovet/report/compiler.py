"""Compile an exam into a renderer-neutral ``ReportDocument``.

Three phases, always in this order:

1. Header: letterhead image (or clinic-name title) and patient summary.
2. Body: one section per resolved structure that has findings text.
3. Appendix: exam images in rows of two.

Organ entries are snapshotted before the body phase so edits made while a
compilation runs cannot leak into it. Image decode problems fall back to a
fixed ratio; any other exception aborts with ``CompilationError``.
"""

import datetime
import logging
import re
from dataclasses import dataclass

from laudovet.config import ClinicSettings
from laudovet.records import Exam, OrganEntry, Patient, ReferenceValue, Structure
from laudovet.report.document import (
    Header,
    ImageAppendix,
    PatientSummary,
    ReportDocument,
    StructureSection,
    SummaryField,
)
from laudovet.report.errors import CompilationError, ReportError
from laudovet.report.formatting import compute_age, format_exam_date, format_number, format_weight
from laudovet.report.images import LETTERHEAD_WIDTH, THUMBNAIL_WIDTH, group_rows, layout_image
from laudovet.report.ledger import Measurement
from laudovet.report.markup import parse_markup
from laudovet.report.placeholders import substitute_measurements
from laudovet.report.translation import translate

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "LAUDO VETERINÁRIO"
REPORT_HEADING = "LAUDO"
REFERENCE_PATTERN = "Valor de referência: de {min} a {max} {unit}"

_UNSAFE_FILENAME = re.compile(r'[\\/:*?"<>|\r\n]+')


@dataclass(frozen=True)
class OrganSnapshot:
    """Immutable view of one organ entry for a single compilation pass."""
    organ_name: str
    report_text: str
    measurements: tuple[Measurement, ...]

    @classmethod
    def from_entry(cls, entry: OrganEntry) -> "OrganSnapshot":
        return cls(
            organ_name=entry.organ_name,
            report_text=entry.report_text or "",
            measurements=entry.ledger().snapshot(),
        )

    @property
    def renderable(self) -> bool:
        # A ledger without text is not rendered
        return bool(self.report_text.strip())

    def rendered_text(self) -> str:
        return substitute_measurements(self.report_text, self.measurements)


@dataclass
class ReportContext:
    patient: Patient
    exam: Exam
    clinic: ClinicSettings
    structures: list[Structure]
    reference_values: list[ReferenceValue]
    language: str = "pt"
    today: datetime.date | None = None


def compile_report(ctx: ReportContext) -> ReportDocument:
    logger.info(
        "Compiling report for exam %s (%d structures, %d images, lang=%s)",
        ctx.exam.id, len(ctx.structures), len(ctx.exam.images), ctx.language,
    )
    try:
        header = _header_phase(ctx)
        summary = _summary(ctx)
        sections = _body_phase(ctx)
        appendix = _appendix_phase(ctx)
    except ReportError:
        raise
    except Exception as e:
        logger.exception("Report compilation failed for exam %s", ctx.exam.id)
        raise CompilationError(f"Report compilation failed for exam {ctx.exam.id}: {e}") from e

    return ReportDocument(
        language=ctx.language,
        title=translate(REPORT_HEADING, ctx.language),
        header=header,
        summary=summary,
        sections=tuple(sections),
        appendix=appendix,
        filename_stem=report_filename_stem(ctx.patient.name),
    )


def report_filename_stem(patient_name: str) -> str:
    name = _UNSAFE_FILENAME.sub("_", (patient_name or "").strip()) or "paciente"
    return f"Laudo_{name}"


# ---------------------------------------------------------------------------
# Phase 1: header + patient summary
# ---------------------------------------------------------------------------

def _header_phase(ctx: ReportContext) -> Header:
    clinic = ctx.clinic
    margins = clinic.letterhead_margins_mm
    if clinic.has_image_letterhead:
        box = layout_image(clinic.letterhead_data, LETTERHEAD_WIDTH, filename=clinic.letterhead_filename)
        return Header(letterhead=box, margins=margins)
    title = clinic.clinic_name.strip() or translate(DEFAULT_TITLE, ctx.language)
    return Header(title=title, margins=margins)


def _summary(ctx: ReportContext) -> PatientSummary:
    lang = ctx.language
    p = ctx.patient
    values = {
        "name": ("Paciente", p.name),
        "species": ("Espécie", translate(p.species, lang)),
        "breed": ("Raça", p.breed or "-"),
        "age": ("Idade", compute_age(p.birth_date, p.birth_year, lang, ctx.today)),
        "owner": ("Tutor", p.owner_name or "-"),
        "weight": ("Peso", format_weight(ctx.exam.exam_weight, p.weight)),
        "date": ("Data", format_exam_date(ctx.exam.exam_date, lang)),
    }
    return PatientSummary(fields=tuple(
        SummaryField(key=key, label=translate(label, lang), value=value)
        for key, (label, value) in values.items()
    ))


# ---------------------------------------------------------------------------
# Phase 2: body
# ---------------------------------------------------------------------------

def _snapshot_entries(exam: Exam) -> dict[str, OrganSnapshot]:
    snapshots = {}
    for entry in exam.organs_data:
        # First stored entry wins when a label is duplicated
        snapshots.setdefault(entry.organ_name, OrganSnapshot.from_entry(entry))
    return snapshots


def _body_phase(ctx: ReportContext) -> list[StructureSection]:
    lang = ctx.language
    snapshots = _snapshot_entries(ctx.exam)

    labels = [s.label for s in ctx.structures]
    known = set(labels)
    orphaned = [name for name in snapshots if name not in known]
    if orphaned:
        logger.warning("Exam %s has entries for unresolved structures (not rendered): %s",
                       ctx.exam.id, ", ".join(orphaned))

    sections = []
    for label in labels:
        snap = snapshots.get(label)
        if snap is None or not snap.renderable:
            logger.debug("Omitting structure '%s' (no findings text)", label)
            continue

        paragraphs = tuple(
            tuple(parse_markup(translate(line, lang)))
            for line in snap.rendered_text().split("\n")
        )
        sections.append(StructureSection(
            label=label,
            heading=translate(label, lang),
            paragraphs=paragraphs,
            reference=_reference_text(label, ctx),
        ))
    return sections


def _reference_text(label: str, ctx: ReportContext) -> str | None:
    ref = next(
        (rv for rv in ctx.reference_values
         if rv.organ == label and rv.species == ctx.patient.species),
        None,
    )
    if ref is None or ref.min_value is None or ref.max_value is None:
        return None
    return translate(REFERENCE_PATTERN, ctx.language).format(
        min=format_number(ref.min_value),
        max=format_number(ref.max_value),
        unit=ref.unit,
    )


# ---------------------------------------------------------------------------
# Phase 3: image appendix
# ---------------------------------------------------------------------------

def _appendix_phase(ctx: ReportContext) -> ImageAppendix | None:
    if not ctx.exam.images:
        return None
    boxes = [
        layout_image(
            img.data,
            THUMBNAIL_WIDTH,
            caption=translate(img.organ, ctx.language) if img.organ else None,
            filename=img.filename,
        )
        for img in ctx.exam.images
    ]
    return ImageAppendix(rows=tuple(group_rows(boxes)))
