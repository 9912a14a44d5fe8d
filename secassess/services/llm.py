import asyncio
import logging
import pathlib
from functools import lru_cache
from typing import Any
from typing import Protocol

import httpx
import jinja2
from openai import AsyncOpenAI
from openai import OpenAIError

from secassess.core.config import Settings
from secassess.core.config import settings
from secassess.core.exceptions import ConfigurationError

# Configure module logger
logger = logging.getLogger(__name__)


class ServiceError(Exception):
    """Raised when the upstream generation call fails (auth, quota, network, timeout)."""


# --- Reusable Jinja2 Environment ---
PROMPT_DIR = pathlib.Path(__file__).parent / "prompt_templates"
env = jinja2.Environment(
    loader=jinja2.FileSystemLoader(PROMPT_DIR),
    keep_trailing_newline=True,
    trim_blocks=True,
    lstrip_blocks=True,
    undefined=jinja2.StrictUndefined,
)


def build_prompt(template_name: str, context: dict[str, Any]) -> str:
    """Render the instruction template *template_name* with *context*.

    Values are interpolated verbatim; no escaping is applied.
    """
    try:
        template = env.get_template(template_name)
        return template.render(**context)
    except jinja2.TemplateNotFound:
        logger.error("Template not found: %s", template_name)
        raise ConfigurationError(f"Prompt template '{template_name}' not found.") from None
    except jinja2.UndefinedError as e:
        logger.error("Template %s references a missing value: %s", template_name, e)
        raise ConfigurationError(f"Prompt template '{template_name}' is missing a value: {e}") from e


# ---------------------------------------------------------------
# Generation client
# ---------------------------------------------------------------


class GenerationClient(Protocol):
    """Anything that turns chat-style messages into assessment prose."""

    async def generate(self, messages: list[dict[str, str]], model: str) -> str: ...


class OpenAIGenerationClient:
    """Generation client backed by the OpenAI Responses API.

    The SDK client is built on first use so a missing API key surfaces as a
    ServiceError on the first request instead of a crash at startup.
    """

    def __init__(self, config: Settings):
        self._config = config
        self._client: AsyncOpenAI | None = None

    def _get_client(self) -> AsyncOpenAI:
        if self._client is None:
            if not self._config.openai_api_key:
                logger.error("OPENAI_API_KEY is not configured; generation is unavailable.")
                raise ServiceError("OpenAI API key is not configured (set OPENAI_API_KEY).")
            self._client = AsyncOpenAI(
                api_key=self._config.openai_api_key,
                timeout=httpx.Timeout(
                    self._config.llm_connect_timeout,
                    read=self._config.llm_read_timeout,
                ),
                max_retries=0,
            )
        return self._client

    async def generate(self, messages: list[dict[str, str]], model: str) -> str:
        client = self._get_client()
        logger.info("Making generation call with model: %s", model)
        try:
            rsp = await asyncio.wait_for(
                client.responses.create(model=model, input=messages),
                timeout=self._config.llm_total_timeout,
            )
        except asyncio.TimeoutError as e:
            logger.error("Generation call exceeded %.0fs budget", self._config.llm_total_timeout)
            raise ServiceError(f"Generation service timed out after {self._config.llm_total_timeout:.0f}s") from e
        except OpenAIError as e:
            logger.error("OpenAI API error: %s", str(e), exc_info=True)
            raise ServiceError(str(e)) from e

        text = (getattr(rsp, "output_text", None) or "").strip()
        logger.debug("Generation response received, length: %d chars", len(text))
        return text


@lru_cache(maxsize=1)
def get_generation_client() -> GenerationClient:
    """FastAPI dependency returning the process-wide generation client."""
    return OpenAIGenerationClient(settings)
