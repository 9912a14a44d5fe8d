"""Report profiles: the fixed configuration that distinguishes the two intake modes."""

import time
from dataclasses import dataclass

from secassess.models.intake_models import IntakeMode

__all__ = [
    "ReportProfile",
    "FIELDS_PROFILE",
    "ANSWERS_PROFILE",
    "PROFILES",
]


@dataclass(frozen=True)
class ReportProfile:
    mode: IntakeMode
    prompt_template: str
    system_message: str
    title: str
    subtitle: str | None = None
    # When set, the download is named "<prefix>-<epoch millis>.pdf"; otherwise fixed_download_name is used.
    timestamp_prefix: str | None = None
    fixed_download_name: str = "report.pdf"

    def download_name(self, now: float | None = None) -> str:
        if self.timestamp_prefix:
            millis = int((time.time() if now is None else now) * 1000)
            return f"{self.timestamp_prefix}-{millis}.pdf"
        return self.fixed_download_name


FIELDS_PROFILE = ReportProfile(
    mode=IntakeMode.FIELDS,
    prompt_template="security_assessment.jinja2",
    system_message="You generate structured security assessment text.",
    title="Security Assessment Report",
    subtitle="Business Security & Emergency Preparedness Assessment",
    fixed_download_name="Security_Assessment_Report.pdf",
)

ANSWERS_PROFILE = ReportProfile(
    mode=IntakeMode.ANSWERS,
    prompt_template="risk_report.jinja2",
    system_message="You are a security consultant who writes clear, prioritised risk reports.",
    title="Security Risk Report",
    subtitle="Security Questionnaire Risk Analysis",
    timestamp_prefix="security-report",
)

PROFILES: dict[IntakeMode, ReportProfile] = {
    FIELDS_PROFILE.mode: FIELDS_PROFILE,
    ANSWERS_PROFILE.mode: ANSWERS_PROFILE,
}
