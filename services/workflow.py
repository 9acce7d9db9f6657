"""
Loan application status workflow.

Transitions are checked against an explicit table; anything not listed is
rejected. Each transition stamps the reviewer, and approval/rejection/
disbursement stamp their own audit fields.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from models import LoanApplication
from models.enums import ApplicationStatus, UserRole
from utils.errors import ForbiddenError, InvalidTransitionError, ValidationFailed

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS: dict[ApplicationStatus, frozenset[ApplicationStatus]] = {
    ApplicationStatus.DRAFT: frozenset({
        ApplicationStatus.SUBMITTED,
        ApplicationStatus.UNDER_REVIEW,
        ApplicationStatus.APPROVED,
        ApplicationStatus.REJECTED,
    }),
    ApplicationStatus.SUBMITTED: frozenset({
        ApplicationStatus.UNDER_REVIEW,
        ApplicationStatus.APPROVED,
        ApplicationStatus.REJECTED,
    }),
    ApplicationStatus.UNDER_REVIEW: frozenset({
        ApplicationStatus.APPROVED,
        ApplicationStatus.REJECTED,
    }),
    ApplicationStatus.APPROVED: frozenset({
        ApplicationStatus.DISBURSED,
        ApplicationStatus.REJECTED,
    }),
    ApplicationStatus.DISBURSED: frozenset({ApplicationStatus.CLOSED}),
    ApplicationStatus.REJECTED: frozenset(),
    ApplicationStatus.CLOSED: frozenset(),
}

STATUS_CHANGE_ROLES = frozenset({UserRole.LOAN_OFFICER.value, UserRole.ADMIN.value})

# States in which collateral may still be added to an application
OPEN_STATUSES = frozenset({
    ApplicationStatus.DRAFT,
    ApplicationStatus.SUBMITTED,
    ApplicationStatus.UNDER_REVIEW,
})


def parse_status(value: str | ApplicationStatus | None) -> ApplicationStatus:
    if isinstance(value, ApplicationStatus):
        return value
    try:
        return ApplicationStatus((value or "").strip().upper())
    except ValueError:
        allowed = ", ".join(s.value for s in ApplicationStatus)
        raise ValidationFailed(
            f"Unknown application status '{value}'. Expected one of: {allowed}",
            code="INVALID_STATUS",
        ) from None


def is_terminal(status: ApplicationStatus) -> bool:
    return not ALLOWED_TRANSITIONS[status]


def can_transition(current: ApplicationStatus, target: ApplicationStatus) -> bool:
    return target in ALLOWED_TRANSITIONS[current]


def ensure_can_change_status(role: str) -> None:
    if role not in STATUS_CHANGE_ROLES:
        raise ForbiddenError("Unauthorized to update application status")


def apply_transition(
    application: LoanApplication,
    target: ApplicationStatus,
    actor_id: str,
    review_notes: Optional[str] = None,
    approved_amount: Optional[float] = None,
    now: Optional[datetime] = None,
) -> ApplicationStatus:
    """
    Move `application` to `target`, recording who did it and when.
    Returns the previous status. Raises InvalidTransitionError for edges not in
    ALLOWED_TRANSITIONS.
    """
    current = parse_status(application.status)
    if not can_transition(current, target):
        raise InvalidTransitionError(
            f"Cannot move application from {current.value} to {target.value}",
            details={
                "from": current.value,
                "to": target.value,
                "allowed": sorted(s.value for s in ALLOWED_TRANSITIONS[current]),
            },
        )
    now = now or datetime.now(timezone.utc)

    application.status = target.value
    application.reviewed_by_id = actor_id
    application.reviewed_at = now
    if review_notes is not None:
        application.review_notes = review_notes

    if target is ApplicationStatus.APPROVED:
        application.approved_by_id = actor_id
        application.approved_at = now
        if approved_amount:
            application.approved_amount = approved_amount
    elif target is ApplicationStatus.REJECTED:
        application.rejected_at = now
        application.rejection_reason = review_notes
    elif target is ApplicationStatus.DISBURSED:
        application.disbursed_at = now

    logger.info(
        "Application %s moved %s -> %s by %s",
        application.application_number, current.value, target.value, actor_id,
    )
    return current
