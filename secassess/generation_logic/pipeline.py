"""Request-to-document pipeline: normalize, prompt, generate, transform, render."""

import asyncio
import logging
from collections.abc import Awaitable
from collections.abc import Callable
from pathlib import Path
from typing import Any
from uuid import uuid4

from secassess.core.cleanup import TRANSIENT_PREFIX
from secassess.core.config import settings
from secassess.core.exceptions import PipelineError
from secassess.generation_logic.intake import identity_lines
from secassess.generation_logic.intake import normalize_intake
from secassess.generation_logic.intake import prompt_context
from secassess.generation_logic.profiles import ReportProfile
from secassess.models.intake_models import RenderedReport
from secassess.services.llm import GenerationClient
from secassess.services.llm import build_prompt
from secassess.services.pdf_renderer import render_report_pdf
from secassess.services.text_transform import markdown_to_plain

__all__ = [
    "ClientDisconnected",
    "FALLBACK_ASSESSMENT",
    "generate_assessment_text",
    "run_report_pipeline",
    "transient_report_path",
]

logger = logging.getLogger(__name__)

FALLBACK_ASSESSMENT = "Security assessment could not be generated at this time."
DISCONNECT_POLL_INTERVAL = 0.5

DisconnectProbe = Callable[[], Awaitable[bool]]


class ClientDisconnected(PipelineError):
    """The client went away while the generation call was in flight."""


def transient_report_path(tmp_dir: Path | None = None) -> Path:
    """Unique per-request location for the rendered PDF."""
    base = tmp_dir if tmp_dir is not None else settings.report_tmp_dir
    base.mkdir(parents=True, exist_ok=True)
    return base / f"{TRANSIENT_PREFIX}{uuid4().hex}.pdf"


async def _await_unless_disconnected(
    call: Awaitable[str],
    is_disconnected: DisconnectProbe | None,
    request_id: str,
) -> str:
    if is_disconnected is None:
        return await call

    task = asyncio.ensure_future(call)
    try:
        while True:
            done, _ = await asyncio.wait({task}, timeout=DISCONNECT_POLL_INTERVAL)
            if done:
                return task.result()
            if await is_disconnected():
                logger.warning("[%s] Client disconnected; cancelling generation call", request_id)
                raise ClientDisconnected("Client disconnected before the report was ready.")
    finally:
        if not task.done():
            task.cancel()


async def generate_assessment_text(
    client: GenerationClient,
    profile: ReportProfile,
    prompt: str,
    request_id: str,
    is_disconnected: DisconnectProbe | None = None,
) -> str:
    """Ask the generation service for the assessment, falling back to a fixed sentence on empty output."""
    messages = [
        {"role": "system", "content": profile.system_message},
        {"role": "user", "content": prompt},
    ]
    logger.info("[%s] GeneratingText with model %s (prompt %d chars)", request_id, settings.model_id, len(prompt))
    text = await _await_unless_disconnected(
        client.generate(messages, settings.model_id),
        is_disconnected,
        request_id,
    )
    text = (text or "").strip()
    if not text:
        logger.warning("[%s] Generation service returned no text; using fallback", request_id)
        return FALLBACK_ASSESSMENT
    logger.info("[%s] TextReady (%d chars)", request_id, len(text))
    return text


async def run_report_pipeline(
    payload: dict[str, Any],
    profile: ReportProfile,
    client: GenerationClient,
    request_id: str,
    is_disconnected: DisconnectProbe | None = None,
) -> RenderedReport:
    """Run every stage up to a rendered PDF on disk.

    Errors from any stage propagate unchanged; no transient file exists unless rendering succeeded.
    """
    logger.info("[%s] Normalizing %s intake", request_id, profile.mode.value)
    form = normalize_intake(payload, profile.mode)

    prompt = build_prompt(profile.prompt_template, prompt_context(form))
    text = await generate_assessment_text(client, profile, prompt, request_id, is_disconnected)
    body = markdown_to_plain(text)

    header_lines = [profile.subtitle] if profile.subtitle else []
    header_lines.extend(identity_lines(form))

    path = transient_report_path()
    logger.info("[%s] Rendering", request_id)
    await render_report_pdf(path, profile.title, header_lines, body, request_id)
    logger.info("[%s] DocumentReady: %s", request_id, path.name)
    return RenderedReport(path=path, download_name=profile.download_name(), request_id=request_id)
