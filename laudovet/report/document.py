"""Renderer-neutral report tree.

The compiler builds one ``ReportDocument``; the DOCX and print renderers only
decide how it looks, never what it contains.
"""

from dataclasses import dataclass, field

from laudovet.config import LetterheadMargins
from laudovet.report.images import ImageBox
from laudovet.report.markup import Span

# DOCX summary: one heading (name) plus these lines
EXPORT_SUMMARY_LINES = (("owner", "breed", "age"), ("weight", "date"))

# Print view: full patient block, two columns per row
PRINT_SUMMARY_GRID = (("name", "species"), ("breed", "age"), ("owner", "date"))


@dataclass(frozen=True)
class SummaryField:
    key: str
    label: str
    value: str


@dataclass(frozen=True)
class PatientSummary:
    fields: tuple[SummaryField, ...]

    def get(self, key: str) -> SummaryField | None:
        for f in self.fields:
            if f.key == key:
                return f
        return None


@dataclass(frozen=True)
class Header:
    title: str | None = None
    letterhead: ImageBox | None = None
    margins: LetterheadMargins = field(default_factory=LetterheadMargins)


@dataclass(frozen=True)
class StructureSection:
    label: str
    heading: str
    paragraphs: tuple[tuple[Span, ...], ...]
    reference: str | None = None


@dataclass(frozen=True)
class ImageAppendix:
    rows: tuple[tuple[ImageBox, ...], ...]

    @property
    def images(self) -> list[ImageBox]:
        return [img for row in self.rows for img in row]


@dataclass(frozen=True)
class ReportDocument:
    language: str
    title: str
    header: Header
    summary: PatientSummary
    sections: tuple[StructureSection, ...]
    appendix: ImageAppendix | None
    filename_stem: str

    @property
    def section_labels(self) -> list[str]:
        return [s.label for s in self.sections]
