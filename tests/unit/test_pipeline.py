import asyncio

import pytest

import secassess.generation_logic.pipeline as pipeline_module
from secassess.core.cleanup import TRANSIENT_PREFIX
from secassess.core.exceptions import IntakeValidationError
from secassess.generation_logic.pipeline import FALLBACK_ASSESSMENT
from secassess.generation_logic.pipeline import ClientDisconnected
from secassess.generation_logic.pipeline import generate_assessment_text
from secassess.generation_logic.pipeline import run_report_pipeline
from secassess.generation_logic.pipeline import transient_report_path
from secassess.generation_logic.profiles import ANSWERS_PROFILE
from secassess.generation_logic.profiles import FIELDS_PROFILE
from secassess.services.llm import ServiceError
from secassess.services.pdf_renderer import RenderError


@pytest.mark.asyncio
async def test_generate_assessment_text_sends_system_and_user_messages(make_generation_client):
    client = make_generation_client(text="## Summary\n")
    text = await generate_assessment_text(client, FIELDS_PROFILE, "PROMPT", "req-1")

    assert text == "## Summary"
    messages, _model = client.calls[0]
    assert messages == [
        {"role": "system", "content": FIELDS_PROFILE.system_message},
        {"role": "user", "content": "PROMPT"},
    ]


@pytest.mark.asyncio
@pytest.mark.parametrize("raw", ["", "   \n ", None])
async def test_generate_assessment_text_falls_back_on_empty(make_generation_client, raw):
    client = make_generation_client(text=raw)
    assert await generate_assessment_text(client, FIELDS_PROFILE, "p", "req-2") == FALLBACK_ASSESSMENT


@pytest.mark.asyncio
async def test_generation_cancelled_when_client_disconnects(monkeypatch):
    monkeypatch.setattr(pipeline_module, "DISCONNECT_POLL_INTERVAL", 0.01)
    cancelled = asyncio.Event()

    class SlowClient:
        async def generate(self, messages, model):
            try:
                await asyncio.sleep(10)
            except asyncio.CancelledError:
                cancelled.set()
                raise
            return "never"

    async def _gone():
        return True

    with pytest.raises(ClientDisconnected):
        await generate_assessment_text(SlowClient(), FIELDS_PROFILE, "p", "req-3", is_disconnected=_gone)

    await asyncio.wait_for(cancelled.wait(), timeout=1)


@pytest.mark.asyncio
async def test_generation_completes_while_client_connected(monkeypatch, make_generation_client):
    monkeypatch.setattr(pipeline_module, "DISCONNECT_POLL_INTERVAL", 0.01)

    async def _connected():
        return False

    client = make_generation_client(text="done")
    assert await generate_assessment_text(client, FIELDS_PROFILE, "p", "req-4", is_disconnected=_connected) == "done"


def test_transient_report_paths_are_unique(report_tmp_dir):
    first = transient_report_path()
    second = transient_report_path()
    assert first != second
    assert first.parent == report_tmp_dir
    assert first.name.startswith(TRANSIENT_PREFIX)
    assert first.suffix == ".pdf"


def test_transient_report_path_creates_directory(tmp_path):
    target = tmp_path / "nested" / "dir"
    assert transient_report_path(target).parent.is_dir()


@pytest.mark.asyncio
async def test_run_report_pipeline_fields_mode(make_generation_client, report_tmp_dir, monkeypatch):
    rendered = {}
    real_render = pipeline_module.render_report_pdf

    async def _spy_render(path, title, header_lines, body, request_id):
        rendered.update(title=title, header_lines=header_lines, body=body)
        return await real_render(path, title, header_lines, body, request_id)

    monkeypatch.setattr(pipeline_module, "render_report_pdf", _spy_render)
    client = make_generation_client(text="## Executive Summary\n- Improve lighting\n")

    report = await run_report_pipeline(
        {"businessName": "Acme", "contactName": "J. Doe", "threatConcerns": "theft"},
        FIELDS_PROFILE,
        client,
        "req-5",
    )

    prompt = client.calls[0][0][1]["content"]
    for value in ("Acme", "J. Doe", "theft"):
        assert value in prompt
    assert rendered["body"] == "Executive Summary\n• Improve lighting"
    assert rendered["title"] == "Security Assessment Report"
    assert rendered["header_lines"] == [
        "Business Security & Emergency Preparedness Assessment",
        "Business Name: Acme",
        "Contact Name: J. Doe",
    ]
    assert report.download_name == "Security_Assessment_Report.pdf"
    assert report.path.parent == report_tmp_dir
    assert report.path.read_bytes().startswith(b"%PDF")


@pytest.mark.asyncio
async def test_run_report_pipeline_answers_mode_names_download_with_timestamp(make_generation_client, monkeypatch):
    monkeypatch.setattr("secassess.generation_logic.profiles.time.time", lambda: 1700000000.123)
    client = make_generation_client(text="Risk: High")

    report = await run_report_pipeline({"answers": {"doors": "weak"}}, ANSWERS_PROFILE, client, "req-6")

    assert report.download_name == "security-report-1700000000123.pdf"
    assert '"doors": "weak"' in client.calls[0][0][1]["content"]


@pytest.mark.asyncio
async def test_run_report_pipeline_validation_happens_before_generation(make_generation_client):
    client = make_generation_client(text="unused")
    with pytest.raises(IntakeValidationError):
        await run_report_pipeline({}, ANSWERS_PROFILE, client, "req-7")
    assert client.calls == []


@pytest.mark.asyncio
async def test_run_report_pipeline_service_error_creates_no_file(make_generation_client, report_tmp_dir):
    client = make_generation_client(error=ServiceError("401 Incorrect API key"))
    with pytest.raises(ServiceError):
        await run_report_pipeline({"businessName": "Acme"}, FIELDS_PROFILE, client, "req-8")
    assert list(report_tmp_dir.iterdir()) == []


@pytest.mark.asyncio
async def test_run_report_pipeline_render_error_leaves_no_file(make_generation_client, report_tmp_dir, monkeypatch):
    def _explode(path, *_args):
        path.write_bytes(b"%PDF-partial")
        raise ValueError("bad glyph table")

    monkeypatch.setattr("secassess.services.pdf_renderer.render_pdf", _explode)
    client = make_generation_client(text="body")

    with pytest.raises(RenderError):
        await run_report_pipeline({}, FIELDS_PROFILE, client, "req-9")
    assert list(report_tmp_dir.iterdir()) == []
