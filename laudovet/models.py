import datetime

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import DeclarativeBase, relationship


class Base(DeclarativeBase):
    pass


class GlobalSetting(Base):
    __tablename__ = "global_settings"

    key = Column(String, primary_key=True)
    value = Column(Text, nullable=True)
    updated_at = Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())


class PatientRow(Base):
    __tablename__ = "patients"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    species = Column(String, nullable=False, default="dog")  # "dog", "cat" or "other"
    breed = Column(String, nullable=True)
    sex = Column(String, nullable=False, default="male")
    is_neutered = Column(Boolean, nullable=False, default=False)

    # birth_year is the legacy field; birth_date wins when both exist
    birth_date = Column(String, nullable=True)
    birth_year = Column(Integer, nullable=True)

    weight = Column(Float, nullable=True)
    owner_name = Column(String, nullable=True)
    owner_phone = Column(String, nullable=True)

    created_at = Column(DateTime, nullable=False, default=datetime.datetime.utcnow)

    exams = relationship(
        "ExamRow",
        back_populates="patient",
        cascade="all, delete-orphan",
    )


class ExamRow(Base):
    __tablename__ = "exams"

    id = Column(Integer, primary_key=True, autoincrement=True)
    patient_id = Column(Integer, ForeignKey("patients.id", ondelete="CASCADE"), nullable=False)
    exam_type = Column(String, nullable=False, default="ultrasound_abd")
    exam_date = Column(DateTime, nullable=False, default=datetime.datetime.utcnow)
    exam_weight = Column(Float, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.datetime.utcnow)

    patient = relationship("PatientRow", back_populates="exams")
    organ_entries = relationship(
        "OrganEntryRow",
        order_by="OrganEntryRow.position",
        cascade="all, delete-orphan",
    )
    images = relationship(
        "ExamImageRow",
        order_by=lambda: [ExamImageRow.position, ExamImageRow.id],
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        Index("ix_exam_patient", "patient_id"),
        Index("ix_exam_date", "exam_date"),
    )


class OrganEntryRow(Base):
    __tablename__ = "organ_entries"

    id = Column(Integer, primary_key=True, autoincrement=True)
    exam_id = Column(Integer, ForeignKey("exams.id", ondelete="CASCADE"), nullable=False)
    position = Column(Integer, nullable=False, default=0)
    organ_name = Column(String, nullable=False)
    report_text = Column(Text, nullable=False, default="")
    # Ordered list of {"key", "value", "unit"}
    measurements_json = Column(Text, nullable=False, default="[]")

    __table_args__ = (
        Index("ix_organ_entry_exam", "exam_id", "position"),
    )


class ExamImageRow(Base):
    __tablename__ = "exam_images"

    id = Column(Integer, primary_key=True, autoincrement=True)
    exam_id = Column(Integer, ForeignKey("exams.id", ondelete="CASCADE"), nullable=False)
    position = Column(Integer, nullable=False, default=0)
    filename = Column(String, nullable=False)
    data = Column(Text, nullable=False)  # base64 data URL
    organ = Column(String, nullable=True)

    __table_args__ = (
        Index("ix_exam_image_exam", "exam_id", "position"),
    )


class TemplateRow(Base):
    __tablename__ = "templates"

    id = Column(Integer, primary_key=True, autoincrement=True)
    organ = Column(String, nullable=False)
    lang = Column(String, nullable=False, default="pt")
    category = Column(String, nullable=False, default="normal")
    title = Column(String, nullable=False)
    text = Column(Text, nullable=False, default="")
    order = Column(Integer, nullable=False, default=0)

    __table_args__ = (
        Index("ix_template_organ", "organ", "lang"),
    )


class ReferenceValueRow(Base):
    __tablename__ = "reference_values"

    id = Column(Integer, primary_key=True, autoincrement=True)
    organ = Column(String, nullable=False)
    species = Column(String, nullable=False)
    size = Column(String, nullable=True)  # optional size class ("small", "medium", ...)
    min_value = Column(Float, nullable=False)
    max_value = Column(Float, nullable=False)
    unit = Column(String, nullable=False, default="cm")

    __table_args__ = (
        Index("ix_reference_organ_species", "organ", "species"),
    )
