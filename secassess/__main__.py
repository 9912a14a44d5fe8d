import uvicorn

from secassess.core.config import settings
from secassess.core.logging import LOGGING_CONFIG


def run() -> None:
    """Start the API server on the configured host and port."""
    uvicorn.run(
        "secassess.main:app",
        host=settings.host,
        port=settings.port,
        log_config=LOGGING_CONFIG,
    )


if __name__ == "__main__":
    run()
