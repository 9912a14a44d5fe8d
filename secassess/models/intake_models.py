from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import field_validator
from pydantic.alias_generators import to_camel


class IntakeMode(str, Enum):
    """Selects how a request body is read and which report profile renders it."""

    FIELDS = "fields"
    ANSWERS = "answers"


class IntakeForm(BaseModel):
    """Flat intake answers sent by the front-end form, keyed in camelCase on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )

    business_name: str = ""
    contact_name: str = ""
    phone: str = ""
    email: str = ""
    address: str = ""
    business_activity: str = ""
    employees: str = ""
    facility: str = ""
    current_security: str = ""
    past_incidents: str = ""
    threat_concerns: str = ""
    critical_assets: str = ""
    emergency_preparedness: str = ""
    desired_outcomes: str = ""

    @field_validator("*", mode="before")
    @classmethod
    def trim_or_blank(cls, v: Any) -> str:
        """Trim strings; anything else (null, numbers, objects) becomes an empty string."""
        if isinstance(v, str):
            return v.strip()
        return ""


class AnswersForm(BaseModel):
    """Free-form questionnaire answers, forwarded to the prompt untouched."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    answers: Any


class RenderedReport(BaseModel):
    """A PDF written to a transient path, owned by a single request."""

    path: Path
    download_name: str
    request_id: str
