"""Exam types and the anatomical structures each one reports on.

The resolver output order is the report body order. Structure labels are the
join key with stored organ entries, so renaming a label here orphans the
entries already saved under the old one.
"""

from typing import Protocol

from laudovet.records import Patient, Structure

EXAM_TYPES = {
    "ultrasound_abd": "Ultrassonografia Abdominal",
    "ultrasound_repro": "Ultrassonografia Reprodutiva",
}

CONCLUSION = "Conclusão"

ABDOMINAL_ORGANS = [
    "Fígado",
    "Vesícula Biliar",
    "Baço",
    "Estômago",
    "Alças Intestinais",
    "Pâncreas",
    "Rim Esquerdo",
    "Rim Direito",
    "Adrenal Esquerda",
    "Adrenal Direita",
    "Bexiga Urinária",
    "Linfonodos",
]

MALE_REPRODUCTIVE = ["Próstata", "Testículos"]
FEMALE_REPRODUCTIVE = ["Útero", "Ovários"]


class StructureResolver(Protocol):
    def resolve(self, exam_type: str, patient: Patient) -> list[Structure]:
        ...


def _reproductive(patient: Patient) -> list[str]:
    if patient.sex == "female":
        # Spayed females have neither uterus nor ovaries
        return [] if patient.is_neutered else list(FEMALE_REPRODUCTIVE)
    if patient.is_neutered:
        return ["Próstata"]
    return list(MALE_REPRODUCTIVE)


def _slug(label: str) -> str:
    return label.lower().replace(" ", "_")


class DefaultStructureResolver:
    """Rule table keyed by exam type, filtered by the patient's sex."""

    def resolve(self, exam_type: str, patient: Patient) -> list[Structure]:
        if exam_type == "ultrasound_repro":
            labels = _reproductive(patient)
        else:
            labels = ABDOMINAL_ORGANS + _reproductive(patient)
        labels.append(CONCLUSION)
        return [Structure(id=_slug(label), label=label) for label in labels]


def get_exam_type_name(exam_type: str) -> str:
    return EXAM_TYPES.get(exam_type, exam_type)
