"""Click CLI for LaudoVet."""

import logging
import sys
from pathlib import Path

import click

from laudovet.report.translation import LANGUAGES

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-8s %(name)s — %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)


@click.group()
def cli():
    """LaudoVet: veterinary ultrasound report compiler."""


@cli.command()
def init_db():
    """Create SQLite schema and seed clinic settings and templates."""
    from laudovet.database import init_db
    init_db()
    click.echo("Database initialized successfully.")


@cli.command()
def run_web():
    """Start the FastAPI web interface."""
    import uvicorn
    from laudovet.config import settings
    from laudovet.database import init_db
    init_db()
    uvicorn.run(
        "laudovet.web.app:app",
        host=settings.web_host,
        port=settings.web_port,
        reload=False,
    )


@cli.command()
@click.argument("exam_id", type=int)
@click.option("--lang", type=click.Choice(list(LANGUAGES)), default=None, help="Report language (default: configured)")
@click.option("--out", "out_dir", type=click.Path(file_okay=False, path_type=Path), default=None,
              help="Output directory (default: configured export_dir)")
def export(exam_id, lang, out_dir):
    """Save and export an exam report as DOCX."""
    from laudovet.config import settings
    from laudovet.database import init_db
    from laudovet.report.errors import ReportError
    from laudovet.report.service import ReportService
    from laudovet.storage import get_record_store

    init_db()
    service = ReportService(get_record_store())
    try:
        report = service.export(service.open_draft(exam_id), lang)
    except ReportError as e:
        click.echo(f"Export failed: {e}", err=True)
        sys.exit(1)

    out_dir = out_dir or settings.export_dir
    out_dir.mkdir(parents=True, exist_ok=True)
    path = out_dir / report.filename
    path.write_bytes(report.content)
    click.echo(f"Wrote {path} ({len(report.content):,} bytes)")


@cli.command()
@click.argument("exam_id", type=int)
@click.option("--lang", type=click.Choice(list(LANGUAGES)), default=None, help="Report language (default: configured)")
@click.option("--out", "out_file", type=click.Path(dir_okay=False, path_type=Path), default=None,
              help="Write HTML here instead of stdout")
def print_view(exam_id, lang, out_file):
    """Render the printable HTML view of an exam (nothing is saved)."""
    from laudovet.database import init_db
    from laudovet.report.errors import ReportError
    from laudovet.report.service import ReportService
    from laudovet.storage import get_record_store

    init_db()
    service = ReportService(get_record_store())
    try:
        html = service.print_view(service.open_draft(exam_id), lang)
    except ReportError as e:
        click.echo(f"Print view failed: {e}", err=True)
        sys.exit(1)

    if out_file is None:
        click.echo(html)
    else:
        out_file.write_text(html, encoding="utf-8")
        click.echo(f"Wrote {out_file}")


@cli.command()
def languages():
    """List report languages."""
    for code, name in LANGUAGES.items():
        click.echo(f"  {code:4s}  {name}")


@cli.command()
@click.argument("exam_type")
@click.option("--species", type=click.Choice(["dog", "cat", "other"]), default="dog")
@click.option("--sex", type=click.Choice(["male", "female"]), default="male")
@click.option("--neutered", is_flag=True, help="Patient is neutered/spayed")
def structures(exam_type, species, sex, neutered):
    """Show the structures reported for an exam type, in report order."""
    from laudovet.records import Patient
    from laudovet.structures import EXAM_TYPES, DefaultStructureResolver, get_exam_type_name

    if exam_type not in EXAM_TYPES:
        click.echo(f"Unknown exam type '{exam_type}' (expected one of {', '.join(EXAM_TYPES)})", err=True)
        sys.exit(1)

    patient = Patient(name="-", species=species, sex=sex, is_neutered=neutered)
    click.echo(f"{get_exam_type_name(exam_type)}:")
    for i, s in enumerate(DefaultStructureResolver().resolve(exam_type, patient), 1):
        click.echo(f"  {i:2d}. {s.label}")


if __name__ == "__main__":
    cli()
