"""
Error taxonomy for report intake, classification and alerting.

Intake-time errors (ValidationError, NotFound, PermissionDenied) are raised
to the caller. Classifier and alert errors are raised inside the
classification pipeline only and never reach the original submitter.
"""

from typing import Optional


class HealthGuardError(Exception):
    """Base class for all service-level errors."""


class ValidationError(HealthGuardError):
    """Rejected input. Raised before any write happens."""

    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(f"{field}: {message}")


class NotFound(HealthGuardError):
    def __init__(self, entity: str, entity_id: str):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found: {entity_id}")


class PermissionDenied(HealthGuardError):
    """The caller's role lacks the capability required by the operation."""


class StoreError(HealthGuardError):
    """Unexpected persistence failure."""


class ClassifierError(HealthGuardError):
    """
    Terminal failure of a single classification attempt.

    `tag` is the stable name recorded on the report as its
    classification_error.
    """

    tag = "ClassifierError"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.tag)


class ClassifierUnavailable(ClassifierError):
    tag = "ClassifierUnavailable"


class ClassifierTimeout(ClassifierError):
    tag = "ClassifierTimeout"


class ClassifierMalformedResponse(ClassifierError):
    tag = "ClassifierMalformedResponse"


class AlertWriteFailure(HealthGuardError):
    """Alert insert failed after the assessment was committed."""
