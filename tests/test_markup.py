def test_plain_text_is_single_span():
    from laudovet.report.markup import PLAIN, Span, parse_markup

    text = "Fígado com dimensões preservadas."
    assert parse_markup(text) == [Span(text, PLAIN)]


def test_bold_and_italic():
    from laudovet.report.markup import BOLD, ITALIC, Span, parse_markup

    assert parse_markup("**a**") == [Span("a", BOLD)]
    assert parse_markup("*a*") == [Span("a", ITALIC)]


def test_mixed_line_keeps_order():
    from laudovet.report.markup import BOLD, ITALIC, PLAIN, parse_markup

    spans = parse_markup("Rim **aumentado** com *cistos* pequenos")
    assert [(s.content, s.style) for s in spans] == [
        ("Rim ", PLAIN),
        ("aumentado", BOLD),
        (" com ", PLAIN),
        ("cistos", ITALIC),
        (" pequenos", PLAIN),
    ]


def test_malformed_markers_stay_literal():
    from laudovet.report.markup import parse_markup, plain_text

    spans = parse_markup("**a* b*")
    # Never raises; stray asterisks survive as text
    assert "*" in plain_text(spans)
    assert "a" in plain_text(spans)


def test_unmatched_single_asterisk():
    from laudovet.report.markup import PLAIN, Span, parse_markup

    assert parse_markup("3 * 4") == [Span("3 * 4", PLAIN)]


def test_empty_input():
    from laudovet.report.markup import parse_markup

    assert parse_markup("") == []


def test_plain_text_round_trip_of_unstyled_line():
    from laudovet.report.markup import parse_markup, plain_text

    line = "Sem alterações dignas de nota."
    assert plain_text(parse_markup(line)) == line
