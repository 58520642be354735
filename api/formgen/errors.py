"""
Error Taxonomy for Form Gen
Every failure surfaced to a user carries a single human-readable message.
"""
from typing import Optional


class FormGenError(Exception):
    """Base class for all user-facing failures."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class GenerationError(FormGenError):
    """
    Form generation failed.

    `reason` distinguishes the cause:
    "empty_input", "upstream", "malformed_json", "missing_fields" or "invalid_items".
    """

    def __init__(self, message: str, reason: str = "upstream"):
        super().__init__(message)
        self.reason = reason


class OcrError(FormGenError):
    """OCR of a single page image failed. Recovered locally by ingestion."""


class IngestionError(FormGenError):
    """The uploaded file is unsupported or unreadable."""


class ExportError(FormGenError):
    """Exporting a form to Google Forms failed."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        form_id: Optional[str] = None,
    ):
        super().__init__(message)
        # Platform HTTP status, or the local equivalent for pre-flight failures
        self.status_code = status_code
        # Set when the shell form was created before the failure (it is not rolled back).
        self.form_id = form_id
