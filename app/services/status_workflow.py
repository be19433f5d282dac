"""
Status Workflow Engine - strict report state machine.

DESIGN PRINCIPLES:
- No backward transitions
- SOLVED is terminal
- Re-applying the current status is a no-op, not an error
"""

from typing import Dict, List

from app.models.report import ReportStatus


class InvalidTransition(ValueError):
    pass


class StatusWorkflowEngine:
    """
    Strict state machine for report status transitions.

    ACTIVE -> SOLVED, once.
    """

    ALLOWED_TRANSITIONS: Dict[ReportStatus, List[ReportStatus]] = {
        ReportStatus.ACTIVE: [ReportStatus.SOLVED],
        ReportStatus.SOLVED: []  # Terminal state, no transitions allowed
    }

    @classmethod
    def is_valid_transition(cls, from_status: str, to_status: str) -> bool:
        """
        Check if a status transition is valid.

        Same status is always valid (no-op).
        """
        try:
            from_enum = ReportStatus(from_status)
            to_enum = ReportStatus(to_status)
        except ValueError:
            return False

        if from_enum == to_enum:
            return True

        return to_enum in cls.ALLOWED_TRANSITIONS.get(from_enum, [])

    @classmethod
    def get_allowed_transitions(cls, current_status: str) -> List[str]:
        try:
            current_enum = ReportStatus(current_status)
        except ValueError:
            return []
        return [status.value for status in cls.ALLOWED_TRANSITIONS.get(current_enum, [])]

    @classmethod
    def validate_transition(cls, current_status: str, new_status: str) -> None:
        """
        Raises:
            InvalidTransition: If transition is not allowed
        """
        if not cls.is_valid_transition(current_status, new_status):
            allowed = cls.get_allowed_transitions(current_status)
            raise InvalidTransition(
                f"Invalid status transition: {_label(current_status)} → {_label(new_status)}. "
                f"Allowed transitions: {allowed}"
            )


def _label(status) -> str:
    return getattr(status, "value", status)
