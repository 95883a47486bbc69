"""Pydantic records exchanged between storage, the editor and the compiler."""

import datetime

from pydantic import BaseModel, Field

from laudovet.report.ledger import Measurement, MeasurementLedger

SPECIES = ("dog", "cat", "other")


class Patient(BaseModel):
    id: int | None = None
    name: str
    species: str = "dog"
    breed: str = ""
    sex: str = "male"
    is_neutered: bool = False
    birth_date: datetime.date | None = None
    birth_year: int | None = None  # legacy records only carry the year
    weight: float | None = None
    owner_name: str = ""
    owner_phone: str = ""
    created_at: datetime.datetime | None = None


class OrganEntry(BaseModel):
    organ_name: str
    measurements: list[Measurement] = Field(default_factory=list)
    report_text: str = ""

    def ledger(self) -> MeasurementLedger:
        return MeasurementLedger(self.measurements)

    @property
    def has_text(self) -> bool:
        return bool(self.report_text and self.report_text.strip())


class ExamImage(BaseModel):
    id: int | None = None
    filename: str
    data: str  # base64 data URL
    organ: str | None = None


class Exam(BaseModel):
    id: int | None = None
    patient_id: int
    exam_type: str = "ultrasound_abd"
    exam_date: datetime.datetime | None = None
    exam_weight: float | None = None
    organs_data: list[OrganEntry] = Field(default_factory=list)
    images: list[ExamImage] = Field(default_factory=list)
    created_at: datetime.datetime | None = None


class Template(BaseModel):
    id: int | None = None
    organ: str
    lang: str = "pt"
    category: str = "normal"
    title: str
    text: str = ""
    order: int = 0


class ReferenceValue(BaseModel):
    id: int | None = None
    organ: str
    species: str
    size: str | None = None
    min_value: float
    max_value: float
    unit: str = "cm"


class Structure(BaseModel):
    """One entry of the resolved structure list. Only ``label`` joins data."""
    id: str | None = None
    label: str
