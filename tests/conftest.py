import pytest

from secassess.core.config import settings


class FakeGenerationClient:
    """Stands in for the OpenAI-backed client; records every call."""

    def __init__(self, text: str = "", error: Exception | None = None):
        self.text = text
        self.error = error
        self.calls: list[tuple[list[dict[str, str]], str]] = []

    async def generate(self, messages, model):
        self.calls.append((messages, model))
        if self.error is not None:
            raise self.error
        return self.text


@pytest.fixture
def make_generation_client():
    return FakeGenerationClient


# Every test writes transient PDFs into its own directory
@pytest.fixture(autouse=True)
def report_tmp_dir(tmp_path, monkeypatch):
    report_dir = tmp_path / "reports"
    report_dir.mkdir()
    monkeypatch.setattr(settings, "report_tmp_dir", report_dir, raising=False)
    return report_dir
