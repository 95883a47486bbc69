def test_known_labels():
    from laudovet.report.translation import translate

    assert translate("Fígado", "en") == "Liver"
    assert translate("Fígado", "es") == "Hígado"
    assert translate("Fígado", "pt") == "Fígado"


def test_missing_entry_returns_input():
    from laudovet.report.translation import translate

    line = "Texto livre que não está na tabela."
    assert translate(line, "en") == line
    assert translate("Baço", "de") == "Baço"


def test_species_codes():
    from laudovet.report.translation import translate

    assert translate("dog", "pt") == "Canino"
    assert translate("cat", "en") == "Feline"


def test_whole_line_match_only():
    from laudovet.report.translation import translate

    phrase = "Fígado com dimensões, contornos, ecogenicidade e ecotextura preservados."
    assert translate(phrase, "en").startswith("Liver with preserved")
    assert translate(phrase + " Extra.", "en") == phrase + " Extra."


def test_available_languages():
    from laudovet.report.translation import available_languages, is_supported

    codes = [lang["code"] for lang in available_languages()]
    assert codes[0] == "pt"
    assert {"pt", "en", "es"} <= set(codes)
    assert is_supported("en")
    assert not is_supported("fr")


def test_age_and_date_formatting():
    import datetime

    from laudovet.report.formatting import compute_age, format_exam_date, format_weight

    today = datetime.date(2024, 5, 2)
    assert compute_age(datetime.date(2020, 3, 10), None, "pt", today) == "4 anos"
    assert compute_age(datetime.date(2023, 5, 1), None, "en", today) == "1 year"
    assert compute_age(datetime.date(2024, 1, 15), None, "pt", today) == "3 meses"
    assert compute_age(None, 2022, "pt", today) == "2 anos"
    assert compute_age(None, None, "pt", today) == "Não informada"

    assert format_weight(31.5, 30.0) == "31.5 kg"
    assert format_weight(None, 30.0) == "30 kg"
    assert format_weight(0, None) == "-"

    dt = datetime.datetime(2024, 5, 2, 14, 30)
    assert format_exam_date(dt, "pt") == "02/05/2024 às 14:30"
    assert format_exam_date(dt, "en") == "05/02/2024 at 14:30"
