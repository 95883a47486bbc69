from laudovet.report.ledger import Measurement


def _m(value, unit="cm", key=None):
    return Measurement(key=key or f"m_{value}", value=value, unit=unit)


def test_single_substitution():
    from laudovet.report.placeholders import substitute_measurements

    out = substitute_measurements("Liver measures {MEDIDA}.", [_m("12.3")])
    assert out == "Liver measures 12.3 cm."


def test_more_tokens_than_measurements():
    from laudovet.report.placeholders import count_tokens, substitute_measurements

    out = substitute_measurements("{MEDIDA} x {MEDIDA} x {MEDIDA}", [_m("1.1"), _m("2.2")])
    assert out == "1.1 cm x 2.2 cm x {MEDIDA}"
    assert count_tokens(out) == 1


def test_more_measurements_than_tokens():
    from laudovet.report.placeholders import substitute_measurements

    out = substitute_measurements("Espessura {MEDIDA}.", [_m("0.3"), _m("9.9")])
    assert out == "Espessura 0.3 cm."


def test_ledger_order_not_value_order():
    from laudovet.report.placeholders import substitute_measurements

    out = substitute_measurements("{MEDIDA} / {MEDIDA}", [_m("5"), _m("1", unit="mm")])
    assert out == "5 cm / 1 mm"


def test_inserted_value_is_not_rescanned():
    from laudovet.report.placeholders import substitute_measurements

    out = substitute_measurements("a {MEDIDA} b {MEDIDA}", [_m("{MEDIDA}", unit="x"), _m("2")])
    assert out == "a {MEDIDA} x b 2 cm"


def test_no_tokens_no_change():
    from laudovet.report.placeholders import substitute_measurements

    assert substitute_measurements("Sem medidas.", [_m("1")]) == "Sem medidas."
    assert substitute_measurements("", [_m("1")]) == ""


def test_ledger_add_remove_keeps_insertion_order():
    from laudovet.report.ledger import MeasurementLedger

    ledger = MeasurementLedger()
    k1 = ledger.add("4.2")
    k2 = ledger.add(1.5, "mm")
    k3 = ledger.add("0.8")
    assert len({k1, k2, k3}) == 3

    ledger.remove(k2)
    assert [(v, u) for _, v, u in ledger.entries()] == [("4.2", "cm"), ("0.8", "cm")]

    # Removing an unknown key is a no-op
    ledger.remove("m_missing")
    assert len(ledger) == 2


def test_ledger_wraps_entry_list():
    from laudovet.records import OrganEntry

    entry = OrganEntry(organ_name="Baço")
    entry.ledger().add("3.1")
    assert entry.measurements[0].display() == "3.1 cm"
