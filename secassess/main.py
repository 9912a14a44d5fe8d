import logging

from fastapi import FastAPI
from fastapi import Request
from fastapi import status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from secassess.api.routes import router
from secassess.core.cleanup import sweep_stale_reports
from secassess.core.config import settings
from secassess.core.exceptions import IntakeValidationError
from secassess.core.exceptions import PipelineError
from secassess.core.logging import setup_logging
from secassess.generation_logic.pipeline import ClientDisconnected
from secassess.services.llm import ServiceError
from secassess.services.pdf_renderer import RenderError

setup_logging()

app = FastAPI(title="Security Assessment Report Service")

logger = logging.getLogger(__name__)


def _error_response(error: str, details: str, status_code: int) -> JSONResponse:
    return JSONResponse({"error": error, "details": details}, status_code=status_code)


@app.on_event("startup")
async def startup_event() -> None:
    removed = sweep_stale_reports()
    logger.info("Application started (model=%s, stale reports removed=%d)", settings.model_id, removed)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
    logger.error(f"HTTP exception: {exc.detail} (status: {exc.status_code})")
    return _error_response("HTTP error", str(exc.detail), exc.status_code)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.error("Request validation failed: %s", exc.errors(), exc_info=False)
    return _error_response("Input validation failed", str(exc.errors()), 422)


@app.exception_handler(IntakeValidationError)
async def intake_exception_handler(_request: Request, exc: IntakeValidationError) -> JSONResponse:
    return _error_response(str(exc), exc.details, exc.status_code)


@app.exception_handler(ServiceError)
async def service_exception_handler(_request: Request, exc: ServiceError) -> JSONResponse:
    return _error_response("AI service error", str(exc), 500)


@app.exception_handler(RenderError)
async def render_exception_handler(_request: Request, exc: RenderError) -> JSONResponse:
    return _error_response("PDF stream error", str(exc), 500)


@app.exception_handler(ClientDisconnected)
async def disconnect_exception_handler(_request: Request, exc: ClientDisconnected) -> JSONResponse:
    # Nobody is listening any more; the status only shows up in access logs
    return _error_response("Client disconnected", str(exc), 499)


@app.exception_handler(PipelineError)
async def pipeline_exception_handler(_request: Request, exc: PipelineError) -> JSONResponse:
    logger.error(f"Pipeline error: {str(exc)}")
    return _error_response("Internal server error", str(exc), 500)


@app.get("/health", status_code=status.HTTP_200_OK, tags=["Health"])
async def health_check() -> dict[str, str]:
    logger.info("Health check endpoint called")
    return {"status": "ok"}


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allowed_origins,
    allow_methods=["POST", "GET", "OPTIONS"],
    allow_headers=["*"],
)
app.include_router(router)

if settings.static_dir.is_dir():
    app.mount("/", StaticFiles(directory=settings.static_dir, html=True), name="static")
else:
    logger.warning("Static directory %s not found; front-end will not be served", settings.static_dir)
