"""Render-time translation of the fixed report vocabulary.

Report text is authored and stored in Portuguese (the canonical language).
Lookup is by exact string; anything missing from the table is returned as-is.
Free text benefits only when a whole line matches an entry.
"""

CANONICAL_LANGUAGE = "pt"

LANGUAGES = {
    "pt": "Português",
    "en": "English",
    "es": "Español",
}

# canonical string -> {language: translation}
_TABLE: dict[str, dict[str, str]] = {
    # Headings and field labels
    "LAUDO": {"en": "REPORT", "es": "INFORME"},
    "LAUDO VETERINÁRIO": {"en": "VETERINARY REPORT", "es": "INFORME VETERINARIO"},
    "Paciente": {"en": "Patient", "es": "Paciente"},
    "Tutor": {"en": "Owner", "es": "Tutor"},
    "Raça": {"en": "Breed", "es": "Raza"},
    "Espécie": {"en": "Species", "es": "Especie"},
    "Idade": {"en": "Age", "es": "Edad"},
    "Peso": {"en": "Weight", "es": "Peso"},
    "Data": {"en": "Date", "es": "Fecha"},
    "às": {"en": "at", "es": "a las"},
    "Não informada": {"en": "Not informed", "es": "No informada"},
    "{n} ano": {"en": "{n} year", "es": "{n} año"},
    "{n} anos": {"en": "{n} years", "es": "{n} años"},
    "{n} mês": {"en": "{n} month", "es": "{n} mes"},
    "{n} meses": {"en": "{n} months", "es": "{n} meses"},
    "Valor de referência: de {min} a {max} {unit}": {
        "en": "Reference value: {min} to {max} {unit}",
        "es": "Valor de referencia: de {min} a {max} {unit}",
    },
    # Species
    "dog": {"pt": "Canino", "en": "Canine", "es": "Canino"},
    "cat": {"pt": "Felino", "en": "Feline", "es": "Felino"},
    "other": {"pt": "Outro", "en": "Other", "es": "Otro"},
    # Abdominal structures
    "Fígado": {"en": "Liver", "es": "Hígado"},
    "Vesícula Biliar": {"en": "Gallbladder", "es": "Vesícula Biliar"},
    "Baço": {"en": "Spleen", "es": "Bazo"},
    "Estômago": {"en": "Stomach", "es": "Estómago"},
    "Alças Intestinais": {"en": "Intestinal Loops", "es": "Asas Intestinales"},
    "Pâncreas": {"en": "Pancreas", "es": "Páncreas"},
    "Rim Esquerdo": {"en": "Left Kidney", "es": "Riñón Izquierdo"},
    "Rim Direito": {"en": "Right Kidney", "es": "Riñón Derecho"},
    "Adrenal Esquerda": {"en": "Left Adrenal", "es": "Adrenal Izquierda"},
    "Adrenal Direita": {"en": "Right Adrenal", "es": "Adrenal Derecha"},
    "Bexiga Urinária": {"en": "Urinary Bladder", "es": "Vejiga Urinaria"},
    "Linfonodos": {"en": "Lymph Nodes", "es": "Linfonodos"},
    # Reproductive structures
    "Próstata": {"en": "Prostate", "es": "Próstata"},
    "Testículos": {"en": "Testicles", "es": "Testículos"},
    "Útero": {"en": "Uterus", "es": "Útero"},
    "Ovários": {"en": "Ovaries", "es": "Ovarios"},
    "Conclusão": {"en": "Conclusion", "es": "Conclusión"},
    # Common canned phrases
    "Fígado com dimensões, contornos, ecogenicidade e ecotextura preservados.": {
        "en": "Liver with preserved dimensions, contours, echogenicity and echotexture.",
        "es": "Hígado con dimensiones, contornos, ecogenicidad y ecotextura preservados.",
    },
}

_DATE_FORMATS = {
    "pt": "%d/%m/%Y",
    "en": "%m/%d/%Y",
    "es": "%d/%m/%Y",
}


def translate(text: str, lang: str) -> str:
    if not text:
        return text
    entry = _TABLE.get(text)
    if entry is None:
        return text
    return entry.get(lang) or text


def available_languages() -> list[dict[str, str]]:
    return [{"code": code, "name": name} for code, name in LANGUAGES.items()]


def is_supported(lang: str) -> bool:
    return lang in LANGUAGES


def date_format(lang: str) -> str:
    return _DATE_FORMATS.get(lang, _DATE_FORMATS[CANONICAL_LANGUAGE])
