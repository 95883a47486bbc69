"""FastAPI application factory."""

import logging
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates

from laudovet.report.errors import CompilationError, ExportSaveError, ReportNotFoundError
from laudovet.report.translation import LANGUAGES

logger = logging.getLogger(__name__)

WEB_DIR = Path(__file__).parent

app = FastAPI(title="LaudoVet", docs_url=None, redoc_url=None)

app.mount("/static", StaticFiles(directory=WEB_DIR / "static"), name="static")

templates = Jinja2Templates(directory=WEB_DIR / "templates")

templates.env.globals["languages"] = LANGUAGES


@app.exception_handler(ReportNotFoundError)
async def _not_found(request: Request, exc: ReportNotFoundError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(CompilationError)
async def _compilation_failed(request: Request, exc: CompilationError):
    logger.error("%s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=500, content={"detail": "Report compilation failed"})


@app.exception_handler(ExportSaveError)
async def _save_failed(request: Request, exc: ExportSaveError):
    logger.error("%s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=503, content={"detail": "Exam could not be saved; nothing was exported"})


# Import routes after templates is defined to avoid circular import
from laudovet.web.routes import api, reports, settings  # noqa: E402

app.include_router(reports.router)
app.include_router(settings.router)
app.include_router(api.router)
