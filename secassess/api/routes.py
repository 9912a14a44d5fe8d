import json
import logging
from collections.abc import Callable
from functools import wraps
from typing import Any
from uuid import uuid4

from fastapi import APIRouter
from fastapi import Depends
from fastapi import Request

from secassess.core.config import settings
from secassess.core.exceptions import IntakeValidationError
from secassess.core.exceptions import PayloadTooLargeError
from secassess.core.exceptions import PipelineError
from secassess.generation_logic.pipeline import run_report_pipeline
from secassess.generation_logic.profiles import PROFILES
from secassess.generation_logic.profiles import ReportProfile
from secassess.generation_logic.report_delivery import TransientFileResponse
from secassess.models.intake_models import IntakeMode
from secassess.services.llm import GenerationClient
from secassess.services.llm import ServiceError
from secassess.services.llm import get_generation_client
from secassess.services.pdf_renderer import RenderError

# Configure module logger
logger = logging.getLogger(__name__)

router = APIRouter()


def handle_report_errors(func: Callable) -> Callable:
    """Assigns a request id and logs pipeline failures before the app-level handlers map them."""

    @wraps(func)
    async def wrapper(request: Request, *args: Any, **kwargs: Any) -> TransientFileResponse:
        request_id = str(uuid4())
        request.state.request_id = request_id
        logger.info("[%s] Received %s %s", request_id, request.method, request.url.path)

        try:
            return await func(request, *args, **kwargs)
        except IntakeValidationError as e:
            logger.warning("[%s] Intake rejected (status %d): %s", request_id, e.status_code, str(e))
            raise
        except ServiceError as e:
            logger.error("[%s] GenerationFailed: %s", request_id, str(e))
            raise
        except RenderError as e:
            logger.error("[%s] RenderFailed: %s", request_id, str(e))
            raise
        except PipelineError as e:
            logger.error("[%s] PipelineError during report generation: %s", request_id, str(e))
            raise
        except Exception as e:
            logger.error(
                "[%s] Unexpected error during report generation: %s",
                request_id,
                str(e),
                exc_info=True,
            )
            raise PipelineError(f"An unexpected server error occurred during report generation (trace: {request_id}).") from e

    return wrapper


async def _read_payload(request: Request) -> dict[str, Any]:
    """Parse the JSON body; an empty body counts as an empty form.

    The size limit is enforced from Content-Length when present and again while
    streaming, so an oversized body is never buffered in full.
    """
    limit = settings.max_request_bytes
    too_large = PayloadTooLargeError("Payload too large", details=f"Request body exceeds {limit} bytes.")

    declared = request.headers.get("content-length")
    if declared is not None and declared.isdigit() and int(declared) > limit:
        raise too_large

    chunks: list[bytes] = []
    received = 0
    async for chunk in request.stream():
        received += len(chunk)
        if received > limit:
            raise too_large
        chunks.append(chunk)
    body = b"".join(chunks)

    if not body.strip():
        return {}
    try:
        payload = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise IntakeValidationError("Invalid JSON body", details=str(e)) from e
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise IntakeValidationError("Invalid request body", details="The request body must be a JSON object.")
    return payload


async def _generate_report(request: Request, profile: ReportProfile, client: GenerationClient) -> TransientFileResponse:
    payload = await _read_payload(request)
    report = await run_report_pipeline(
        payload,
        profile,
        client,
        request_id=request.state.request_id,
        is_disconnected=request.is_disconnected,
    )
    return TransientFileResponse(report)


@router.post("/generate-pdf", tags=["Reports"])
@handle_report_errors
async def generate_pdf(
    request: Request,
    client: GenerationClient = Depends(get_generation_client),
) -> TransientFileResponse:
    """Generates the security assessment PDF from flat intake form fields.

    Returns the PDF as an attachment named `Security_Assessment_Report.pdf`.

    Raises:
        IntakeValidationError: 400 for a malformed body, 413 when it is too large.
        ServiceError: 500 when the generation service call fails.
        RenderError: 500 when the PDF cannot be written.
    """
    return await _generate_report(request, PROFILES[IntakeMode.FIELDS], client)


@router.post("/generate-report", tags=["Reports"])
@handle_report_errors
async def generate_report(
    request: Request,
    client: GenerationClient = Depends(get_generation_client),
) -> TransientFileResponse:
    """Generates the security risk report PDF from a free-form `answers` object.

    Returns the PDF as an attachment named `security-report-<timestamp>.pdf`.
    A body without `answers` is rejected with 400.
    """
    return await _generate_report(request, PROFILES[IntakeMode.ANSWERS], client)
