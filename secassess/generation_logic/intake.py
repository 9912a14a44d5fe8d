"""Reads request payloads into intake forms and derives prompt/header data from them."""

import json
import logging
from typing import Any

from secassess.core.exceptions import IntakeValidationError
from secassess.models.intake_models import AnswersForm
from secassess.models.intake_models import IntakeForm
from secassess.models.intake_models import IntakeMode

__all__ = [
    "CLIENT_DATA_LABELS",
    "normalize_intake",
    "prompt_context",
    "identity_lines",
]

logger = logging.getLogger(__name__)

# Field name -> label shown to the model, in prompt order
CLIENT_DATA_LABELS: dict[str, str] = {
    "business_name": "Business Name",
    "contact_name": "Primary Contact",
    "phone": "Phone",
    "email": "Email",
    "address": "Address",
    "business_activity": "Business Activity",
    "employees": "# Employees",
    "facility": "Facility Characteristics",
    "current_security": "Current Security Measures",
    "past_incidents": "Past Incidents",
    "threat_concerns": "Threat Concerns",
    "critical_assets": "Critical Assets",
    "emergency_preparedness": "Emergency Preparedness",
    "desired_outcomes": "Desired Outcomes",
}


def normalize_intake(payload: dict[str, Any], mode: IntakeMode) -> IntakeForm | AnswersForm:
    """Build the intake form for *mode*.

    In fields mode nothing is required and every value ends up a trimmed string.
    In answers mode the `answers` value is required and forwarded as-is.
    """
    if mode is IntakeMode.ANSWERS:
        if payload.get("answers") is None:
            raise IntakeValidationError(
                "Missing 'answers' field",
                details="The request body must contain an 'answers' object.",
            )
        return AnswersForm(answers=payload["answers"])

    form = IntakeForm.model_validate(payload)
    logger.debug("Normalized intake form with %d non-empty fields", sum(1 for v in form.model_dump().values() if v))
    return form


def prompt_context(form: IntakeForm | AnswersForm) -> dict[str, Any]:
    """Values interpolated into the prompt template for *form*."""
    if isinstance(form, AnswersForm):
        return {"answers_json": json.dumps(form.answers, indent=2, ensure_ascii=False, default=str)}
    values = form.model_dump()
    return {"client_data": [(label, values[name]) for name, label in CLIENT_DATA_LABELS.items()]}


def identity_lines(form: IntakeForm | AnswersForm) -> list[str]:
    """Business/contact header lines, included only when the value is non-empty."""
    if isinstance(form, AnswersForm):
        answers = form.answers if isinstance(form.answers, dict) else {}
        business = answers.get("businessName")
        contact = answers.get("contactName")
        business = business.strip() if isinstance(business, str) else ""
        contact = contact.strip() if isinstance(contact, str) else ""
    else:
        business, contact = form.business_name, form.contact_name

    lines = []
    if business:
        lines.append(f"Business Name: {business}")
    if contact:
        lines.append(f"Contact Name: {contact}")
    return lines
