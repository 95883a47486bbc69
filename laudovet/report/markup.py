"""Inline markup used in findings text and templates.

Handles:
- ``**text**`` -> bold span
- ``*text*`` -> italic span
- everything else -> plain span

Markers do not nest and do not span lines. The bold pattern is tried first at
every position, so ``**a**`` never turns into an italic ``*a*`` wrapped in
stray asterisks. Unmatched asterisks stay in the output as literal text.
"""

import re
from dataclasses import dataclass

PLAIN = "plain"
BOLD = "bold"
ITALIC = "italic"

_SPAN_PATTERN = re.compile(r"\*\*(?P<bold>[^*]+)\*\*|\*(?P<italic>[^*]+)\*")


@dataclass(frozen=True)
class Span:
    content: str
    style: str = PLAIN


def parse_markup(text: str) -> list[Span]:
    """Split one line of text into styled spans. Never raises."""
    if not text:
        return []

    spans = []
    pos = 0
    for m in _SPAN_PATTERN.finditer(text):
        if m.start() > pos:
            spans.append(Span(text[pos:m.start()], PLAIN))
        if m.group("bold") is not None:
            spans.append(Span(m.group("bold"), BOLD))
        else:
            spans.append(Span(m.group("italic"), ITALIC))
        pos = m.end()
    if pos < len(text):
        spans.append(Span(text[pos:], PLAIN))

    return [s for s in spans if s.content]


def plain_text(spans: list[Span]) -> str:
    return "".join(s.content for s in spans)
