"""Error taxonomy for the contact intelligence pipeline.

Single-item operations raise these; batch operations catch them per item,
log a ``BatchItemError`` record and carry on with the rest of the batch.
"""

from __future__ import annotations

from typing import Any


class ContactIntelError(Exception):
    """Base class for all pipeline errors.

    Attributes:
        code: Stable machine-readable error code
        details: Extra context for the caller's logs
    """

    code = "CONTACT_INTEL_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.details = details or {}


class InputError(ContactIntelError):
    """An input record is entirely unusable."""

    code = "INPUT_ERROR"


class ConfigError(ContactIntelError):
    """Configuration could not be loaded or failed validation."""

    code = "CONFIG_ERROR"


class AssessmentError(ContactIntelError):
    """Unexpected failure while assessing a piece of content."""

    code = "QUALITY_ASSESSMENT_FAILED"

    def __init__(self, message: str, url: str, cause: BaseException | None = None) -> None:
        super().__init__(message, {"url": url, "error": repr(cause) if cause else None})
        self.url = url
        self.cause = cause


class ScoringError(ContactIntelError):
    """Unexpected failure while scoring or analyzing a contact."""

    code = "SCORING_FAILED"

    def __init__(self, message: str, contact_id: str, cause: BaseException | None = None) -> None:
        super().__init__(
            message, {"contact_id": contact_id, "error": repr(cause) if cause else None}
        )
        self.contact_id = contact_id
        self.cause = cause


class BatchItemError(ContactIntelError):
    """Record of one item that failed inside a batch operation."""

    code = "BATCH_ITEM_FAILED"

    def __init__(self, item: str, cause: BaseException) -> None:
        super().__init__(f"Batch item {item} failed: {cause}", {"item": item, "error": repr(cause)})
        self.item = item
        self.cause = cause
