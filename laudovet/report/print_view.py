"""Render a ``ReportDocument`` as a standalone, printable HTML page."""

from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from laudovet.report.document import PRINT_SUMMARY_GRID, ReportDocument
from laudovet.report.markup import BOLD, ITALIC

TEMPLATES_DIR = Path(__file__).parent / "templates"

_env = Environment(
    loader=FileSystemLoader(TEMPLATES_DIR),
    autoescape=select_autoescape(["html"]),
    trim_blocks=True,
    lstrip_blocks=True,
)


def render_print_view(doc: ReportDocument) -> str:
    grid = [[doc.summary.get(key) for key in row] for row in PRINT_SUMMARY_GRID]
    return _env.get_template("print.html").render(
        doc=doc,
        grid=grid,
        BOLD=BOLD,
        ITALIC=ITALIC,
    )
