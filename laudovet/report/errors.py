class ReportError(Exception):
    """Base class for report compilation/export failures."""


class ReportNotFoundError(ReportError):
    """The exam or its patient does not exist."""

    def __init__(self, kind: str, record_id):
        super().__init__(f"{kind} {record_id} not found")
        self.kind = kind
        self.record_id = record_id


class CompilationError(ReportError):
    """Compilation aborted; no artifact was produced."""


class ExportSaveError(ReportError):
    """The exam could not be saved before export, so nothing was exported."""
