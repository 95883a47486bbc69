"""Measurement ledger: the ordered numeric observations of one structure.

Entries keep insertion order for their whole life. Placeholder substitution
consumes them in that order, so the ledger is never sorted by value or unit.
"""

import time

from pydantic import BaseModel, ConfigDict

DEFAULT_UNIT = "cm"


class Measurement(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: str
    value: str  # decimal text as typed by the clinician
    unit: str = DEFAULT_UNIT

    def display(self) -> str:
        return f"{self.value} {self.unit}"


class MeasurementLedger:
    """Insertion-ordered, keyed collection of measurements.

    Wraps (and mutates) the list it is given, so an ``OrganEntry`` can expose
    its stored ``measurements`` list through this interface.
    """

    def __init__(self, entries: list[Measurement] | None = None):
        self._entries = entries if entries is not None else []

    def __len__(self) -> int:
        return len(self._entries)

    def __bool__(self) -> bool:
        return bool(self._entries)

    def __iter__(self):
        return iter(self._entries)

    def add(self, value, unit: str = DEFAULT_UNIT) -> str:
        key = self._new_key()
        self._entries.append(Measurement(key=key, value=str(value).strip(), unit=unit or DEFAULT_UNIT))
        return key

    def remove(self, key: str) -> None:
        for i, m in enumerate(self._entries):
            if m.key == key:
                del self._entries[i]
                return

    def entries(self) -> list[tuple[str, str, str]]:
        return [(m.key, m.value, m.unit) for m in self._entries]

    def snapshot(self) -> tuple[Measurement, ...]:
        return tuple(self._entries)

    def _new_key(self) -> str:
        existing = {m.key for m in self._entries}
        key = f"m_{time.time_ns()}"
        suffix = 1
        while key in existing:
            key = f"m_{time.time_ns()}_{suffix}"
            suffix += 1
        return key
