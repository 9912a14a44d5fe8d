import asyncio
import logging
from collections.abc import Iterable
from pathlib import Path

from reportlab.lib.pagesizes import LETTER
from reportlab.lib.utils import simpleSplit
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen.canvas import Canvas

from secassess.core.cleanup import remove_transient_file

# Configure module logger
logger = logging.getLogger(__name__)

PAGE_SIZE = LETTER
MARGIN = 50
CONTENT_WIDTH = 500
FONT_NAME = "Helvetica"
TITLE_FONT_SIZE = 20
HEADER_FONT_SIZE = 12
BODY_FONT_SIZE = 11
LEADING_FACTOR = 1.2


class RenderError(Exception):
    """Raised when the PDF stream cannot be written."""


class PdfTextWriter:
    """Writes wrapped, left-aligned lines top to bottom, breaking pages as needed."""

    def __init__(self, path: Path, title: str = ""):
        self.canvas = Canvas(str(path), pagesize=PAGE_SIZE)
        if title:
            self.canvas.setTitle(title)
        self._page_height = PAGE_SIZE[1]
        self.y = self._page_height - MARGIN
        self.pages = 1

    def _ensure_room(self, font_size: float) -> None:
        if self.y - font_size * LEADING_FACTOR < MARGIN:
            self.canvas.showPage()
            self.pages += 1
            self.y = self._page_height - MARGIN

    def write(self, text: str, font_size: float, underline: bool = False) -> None:
        """Write one logical line, wrapping it at CONTENT_WIDTH."""
        wrapped = simpleSplit(text, FONT_NAME, font_size, CONTENT_WIDTH) or [""]
        for line in wrapped:
            self._ensure_room(font_size)
            baseline = self.y - font_size
            self.canvas.setFont(FONT_NAME, font_size)
            self.canvas.drawString(MARGIN, baseline, line)
            if underline and line:
                width = stringWidth(line, FONT_NAME, font_size)
                self.canvas.setLineWidth(font_size / 20)
                self.canvas.line(MARGIN, baseline - 2, MARGIN + width, baseline - 2)
            self.y -= font_size * LEADING_FACTOR

    def move_down(self, font_size: float) -> None:
        self.y -= font_size * LEADING_FACTOR

    def close(self) -> None:
        self.canvas.save()


def render_pdf(path: Path, title: str, header_lines: Iterable[str], body: str) -> int:
    """Write title, header lines and body to *path*. Returns the number of pages."""
    writer = PdfTextWriter(path, title=title)

    writer.write(title, TITLE_FONT_SIZE, underline=True)
    writer.move_down(TITLE_FONT_SIZE)

    for header in header_lines:
        writer.write(header, HEADER_FONT_SIZE)
    writer.move_down(HEADER_FONT_SIZE)

    for line in body.splitlines():
        writer.write(line, BODY_FONT_SIZE)

    writer.close()
    return writer.pages


async def render_report_pdf(
    path: Path,
    title: str,
    header_lines: list[str],
    body: str,
    request_id: str,
) -> Path:
    """Render the report off the event loop. A partial file is removed before RenderError propagates."""

    def _sync() -> Path:
        logger.info("[%s] Rendering PDF to %s", request_id, path)
        try:
            pages = render_pdf(path, title, header_lines, body)
        except Exception as err:
            logger.exception("[%s] PDF rendering failed", request_id)
            remove_transient_file(path, request_id)
            raise RenderError(str(err) or err.__class__.__name__) from err
        logger.info("[%s] PDF ready (%d pages, %d bytes)", request_id, pages, path.stat().st_size)
        return path

    return await asyncio.to_thread(_sync)
