"""Serves the rendered PDF as a download and removes it afterwards."""

import logging

from fastapi.responses import FileResponse
from starlette.types import Receive
from starlette.types import Scope
from starlette.types import Send

from secassess.core.cleanup import remove_transient_file
from secassess.models.intake_models import RenderedReport

__all__ = [
    "PDF_MEDIA_TYPE",
    "TransientFileResponse",
]

logger = logging.getLogger(__name__)

PDF_MEDIA_TYPE = "application/pdf"


class TransientFileResponse(FileResponse):
    """A FileResponse that unlinks its file once sending ends, whether or not the send succeeded."""

    def __init__(self, report: RenderedReport):
        super().__init__(
            report.path,
            media_type=PDF_MEDIA_TYPE,
            filename=report.download_name,
        )
        self.report = report

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        logger.info("[%s] Delivering %s as %s", self.report.request_id, self.report.path.name, self.report.download_name)
        try:
            await super().__call__(scope, receive, send)
        finally:
            remove_transient_file(self.report.path, self.report.request_id)
            logger.info("[%s] Cleanup done", self.report.request_id)
