"""Fill measurement tokens in findings text.

Each measurement, in ledger order, replaces the first remaining token. Extra
measurements are ignored and extra tokens stay in the text.
"""

from collections.abc import Iterable

from laudovet.report.ledger import Measurement

MEASUREMENT_TOKEN = "{MEDIDA}"


def substitute_measurements(text: str, measurements: Iterable[Measurement]) -> str:
    if not text:
        return text
    pos = 0
    for m in measurements:
        idx = text.find(MEASUREMENT_TOKEN, pos)
        if idx < 0:
            break
        value = m.display()
        text = text[:idx] + value + text[idx + len(MEASUREMENT_TOKEN):]
        # Resume after the inserted value so it is never re-scanned
        pos = idx + len(value)
    return text


def count_tokens(text: str) -> int:
    return text.count(MEASUREMENT_TOKEN) if text else 0
