"""Application configuration settings.

This module defines the application-wide settings using Pydantic's BaseSettings.
It allows for loading configurations from environment variables and .env files,
providing type validation and default values.
"""

import tempfile
from pathlib import Path
from typing import Annotated

from pydantic import Field
from pydantic import field_validator
from pydantic_settings import BaseSettings
from pydantic_settings import NoDecode

# Matches the permissive cors() setup the front-end was built against
DEFAULT_CORS_ORIGINS = ["*"]


class Settings(BaseSettings):
    """Manages application settings, loading them from environment variables or an .env file.

    Attributes:
        openai_api_key: API key for the OpenAI generation service. Checked on first use, not at startup.
        model_id: Identifier for the language model to be used.
        llm_connect_timeout: LLM client connect timeout in seconds.
        llm_read_timeout: LLM client read timeout in seconds.
        llm_total_timeout: Upper bound in seconds for a whole generation call.
        report_tmp_dir: Directory where transient PDF files are written.
        cleanup_ttl: Age in seconds after which leftover transient PDFs are swept.
        max_request_bytes: Largest accepted request body.
        cors_allowed_origins: List of allowed origins for CORS.
        static_dir: Directory holding the prebuilt front-end bundle.
        host: Interface uvicorn binds to.
        port: Port uvicorn listens on.
    """

    openai_api_key: str | None = Field(default=None)
    model_id: str = Field(default="gpt-4.1-mini")

    llm_connect_timeout: float = Field(default=10.0, description="LLM client connect timeout in seconds.")
    llm_read_timeout: float = Field(default=120.0, description="LLM client read timeout in seconds.")
    llm_total_timeout: float = Field(default=180.0, description="Overall budget for one generation call.")

    report_tmp_dir: Path = Field(default_factory=lambda: Path(tempfile.gettempdir()))
    cleanup_ttl: int = Field(default=900)
    max_request_bytes: int = Field(default=1024 * 1024)

    cors_allowed_origins: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: list(DEFAULT_CORS_ORIGINS),
    )

    static_dir: Path = Field(default=Path("public"))
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3000)

    model_config = {
        "env_file": ".env",
        "protected_namespaces": ("settings_",),
        "env_prefix": "",  # No prefix for environment variables
        "extra": "ignore",
    }

    @field_validator("cors_allowed_origins", mode="before")  # type: ignore
    @classmethod
    def assemble_cors_origins(cls, v: str | list[str] | None) -> list[str]:
        """Assembles the list of CORS allowed origins.

        If 'v' is a string, it splits it by commas. If 'v' is already a list,
        it's used directly. Otherwise, returns the default list of origins.
        """
        if isinstance(v, str) and v:
            return [origin.strip() for origin in v.split(",")]
        elif isinstance(v, list):
            return v
        return list(DEFAULT_CORS_ORIGINS)


settings = Settings()
