"""Patient summary values: age, weight and exam date."""

import datetime

from laudovet.report.translation import date_format, translate


def compute_age(
    birth_date: datetime.date | None,
    birth_year: int | None,
    lang: str,
    today: datetime.date | None = None,
) -> str:
    """Age in whole years, or in months when under one year.

    Legacy records with only a birth year are treated as born on 1 January.
    """
    if birth_date is None and birth_year:
        birth_date = datetime.date(birth_year, 1, 1)
    if birth_date is None:
        return translate("Não informada", lang)

    today = today or datetime.date.today()
    years = today.year - birth_date.year
    if (today.month, today.day) < (birth_date.month, birth_date.day):
        years -= 1

    if years <= 0:
        months = (today.year - birth_date.year) * 12 + (today.month - birth_date.month)
        if today.day < birth_date.day:
            months -= 1
        months = max(months, 0)
        pattern = "{n} mês" if months == 1 else "{n} meses"
        return translate(pattern, lang).format(n=months)

    pattern = "{n} ano" if years == 1 else "{n} anos"
    return translate(pattern, lang).format(n=years)


def format_number(value) -> str:
    if value is None or value == "":
        return ""
    if isinstance(value, float):
        return f"{value:g}"
    return str(value)


def format_weight(exam_weight: float | None, patient_weight: float | None) -> str:
    weight = exam_weight if exam_weight not in (None, 0) else patient_weight
    if weight in (None, ""):
        return "-"
    return f"{format_number(weight)} kg"


def format_exam_date(value: datetime.datetime | None, lang: str) -> str:
    if value is None:
        return ""
    return f"{value.strftime(date_format(lang))} {translate('às', lang)} {value.strftime('%H:%M')}"
