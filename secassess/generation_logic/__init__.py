"""Generation logic package.

This package groups the helpers that take an intake payload all the way to a
downloadable PDF (normalization, prompt rendering, generation, rendering,
delivery). Keeping them here allows `secassess/api/routes.py` to stay minimal
and focused on HTTP routing.
"""

from .pipeline import run_report_pipeline  # noqa: F401
from .profiles import ANSWERS_PROFILE  # noqa: F401
from .profiles import FIELDS_PROFILE  # noqa: F401
from .report_delivery import TransientFileResponse  # noqa: F401
