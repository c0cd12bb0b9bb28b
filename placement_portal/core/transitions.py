"""
Status Transition Rules for applications, interviews and job postings.

The `check_*` functions never raise for a refused change; they return a
`TransitionCheck` and the caller decides how to report it. The only
function here that writes is `record_interview_result`, which updates an
interview and the application it decides inside the caller's transaction.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from placement_portal.core.constants import (
    ApplicationStatus, InterviewResult, InterviewStatus, JobStatus, PlacementStatus
)
from placement_portal.core.exceptions import IllegalTransition

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransitionCheck:
    allowed: bool
    reason: str = ""

    def raise_if_denied(self) -> None:
        if not self.allowed:
            raise IllegalTransition(self.reason)


ALLOWED = TransitionCheck(True)


def _deny(reason: str) -> TransitionCheck:
    return TransitionCheck(False, reason)


# ============================================================
# APPLICATIONS
# ============================================================

APPLICATION_PIPELINE = (
    ApplicationStatus.submitted,
    ApplicationStatus.under_review,
    ApplicationStatus.shortlisted,
    ApplicationStatus.interview_scheduled,
    ApplicationStatus.selected,
    ApplicationStatus.offer_accepted,
)

APPLICATION_TERMINAL = frozenset({
    ApplicationStatus.rejected,
    ApplicationStatus.withdrawn,
    ApplicationStatus.offer_accepted,
    ApplicationStatus.offer_rejected,
})

NOT_WITHDRAWABLE = frozenset({
    ApplicationStatus.selected,
    ApplicationStatus.offer_accepted,
    ApplicationStatus.rejected,
})

# Statuses a shortlist-only grant may set
SHORTLIST_STATUSES = frozenset({
    ApplicationStatus.under_review,
    ApplicationStatus.shortlisted,
})

SCHEDULABLE_STATUSES = frozenset({
    ApplicationStatus.submitted,
    ApplicationStatus.under_review,
    ApplicationStatus.shortlisted,
    ApplicationStatus.interview_scheduled,
})


def check_withdrawal(current: ApplicationStatus, is_owner: bool) -> TransitionCheck:
    if not is_owner:
        return _deny("Only the applicant can withdraw an application")
    current = ApplicationStatus(current)
    if current == ApplicationStatus.withdrawn:
        return _deny("Application is already withdrawn")
    if current in NOT_WITHDRAWABLE or current in APPLICATION_TERMINAL:
        return _deny(f"Cannot withdraw application at this stage ({current.value})")
    return ALLOWED


def check_application_transition(current: ApplicationStatus, target: ApplicationStatus) -> TransitionCheck:
    """Staff-initiated status change. Withdrawal goes through `check_withdrawal`."""
    current = ApplicationStatus(current)
    target = ApplicationStatus(target)

    if current in APPLICATION_TERMINAL:
        return _deny(f"Application is already {current.value}")
    if target == ApplicationStatus.withdrawn:
        return _deny("Only the applicant can withdraw an application")
    if target == current:
        return _deny(f"Application is already {current.value}")
    if target == ApplicationStatus.rejected:
        return ALLOWED
    if target in (ApplicationStatus.offer_accepted, ApplicationStatus.offer_rejected):
        if current != ApplicationStatus.selected:
            return _deny("Offer responses are only recorded for selected applications")
        return ALLOWED
    if APPLICATION_PIPELINE.index(target) > APPLICATION_PIPELINE.index(current):
        return ALLOWED
    return _deny(f"Cannot move application from {current.value} to {target.value}")


def mark_withdrawn(application) -> list:
    """
    Mark an application withdrawn and cancel its open interviews in the
    same transaction. Returns the interviews that were cancelled.
    """
    application.status = ApplicationStatus.withdrawn
    cancelled = [i for i in application.interviews if InterviewStatus(i.status) in OPEN_INTERVIEW_STATUSES]
    for interview in cancelled:
        interview.status = InterviewStatus.cancelled
    return cancelled


def check_interview_scheduling(current: ApplicationStatus) -> TransitionCheck:
    current = ApplicationStatus(current)
    if current not in SCHEDULABLE_STATUSES:
        return _deny(f"Cannot schedule an interview for an application that is {current.value}")
    return ALLOWED


def apply_application_status(application, target: ApplicationStatus, actor_user_id: Optional[int], now, notes: str = None) -> None:
    """Write a staff status change with its audit fields and cascades."""
    target = ApplicationStatus(target)
    application.status = target
    application.reviewed_by = actor_user_id
    application.reviewed_at = now
    if notes:
        application.notes = notes
    if target == ApplicationStatus.offer_accepted and application.student is not None:
        application.student.placement_status = PlacementStatus.placed
    logger.info("Application %s -> %s by user %s", application.id, target.value, actor_user_id)


# ============================================================
# INTERVIEWS
# ============================================================

INTERVIEW_TRANSITIONS = {
    InterviewStatus.scheduled: frozenset({
        InterviewStatus.completed, InterviewStatus.rescheduled,
        InterviewStatus.cancelled, InterviewStatus.no_show,
    }),
    InterviewStatus.rescheduled: frozenset({
        InterviewStatus.scheduled, InterviewStatus.completed,
        InterviewStatus.cancelled, InterviewStatus.no_show,
    }),
    InterviewStatus.completed: frozenset(),
    InterviewStatus.cancelled: frozenset(),
    InterviewStatus.no_show: frozenset(),
}

OPEN_INTERVIEW_STATUSES = frozenset({InterviewStatus.scheduled, InterviewStatus.rescheduled})

PASSING_RESULTS = frozenset({InterviewResult.passed, InterviewResult.selected})
FAILING_RESULTS = frozenset({InterviewResult.failed, InterviewResult.rejected})


def check_interview_transition(current: InterviewStatus, target: InterviewStatus) -> TransitionCheck:
    current = InterviewStatus(current)
    target = InterviewStatus(target)
    if target == current:
        return ALLOWED
    if target in INTERVIEW_TRANSITIONS[current]:
        return ALLOWED
    if not INTERVIEW_TRANSITIONS[current]:
        return _deny(f"Interview is already {current.value}")
    return _deny(f"Cannot move interview from {current.value} to {target.value}")


def check_interview_editable(application_status: ApplicationStatus) -> TransitionCheck:
    if ApplicationStatus(application_status) == ApplicationStatus.withdrawn:
        return _deny("The application for this interview has been withdrawn")
    return ALLOWED


def check_reschedule(current: InterviewStatus) -> TransitionCheck:
    """A date or time change forces `rescheduled`."""
    return check_interview_transition(current, InterviewStatus.rescheduled)


def application_status_for_result(result: InterviewResult) -> Optional[ApplicationStatus]:
    result = InterviewResult(result)
    if result in PASSING_RESULTS:
        return ApplicationStatus.selected
    if result in FAILING_RESULTS:
        return ApplicationStatus.rejected
    return None


def record_interview_result(
    interview,
    now,
    actor_user_id: Optional[int],
    status: Optional[InterviewStatus] = None,
    result: Optional[InterviewResult] = None,
    feedback: Optional[str] = None,
) -> Tuple[object, object]:
    """
    Set an interview's status/result and cascade the outcome to its application.

    Must run inside the caller's `get_db_session()` block so the interview
    and the application commit together. A decisive result with no explicit
    status completes the interview. Raises `IllegalTransition` when either
    write is not allowed; nothing is modified in that case.

    Returns (interview, application).
    """
    application = interview.application
    check_interview_editable(application.status).raise_if_denied()

    target_status = InterviewStatus(status) if status is not None else None
    if target_status is None and result is not None and application_status_for_result(result) is not None:
        target_status = InterviewStatus.completed
    if target_status is not None:
        check_interview_transition(interview.status, target_status).raise_if_denied()

    cascaded = application_status_for_result(result) if result is not None else None
    if cascaded is not None and application.status != cascaded:
        check_application_transition(application.status, cascaded).raise_if_denied()

    if target_status is not None:
        interview.status = target_status
    if result is not None:
        interview.result = InterviewResult(result)
    if feedback:
        interview.feedback = feedback

    if cascaded is not None and application.status != cascaded:
        apply_application_status(application, cascaded, actor_user_id, now)

    return interview, application


# ============================================================
# JOB POSTINGS
# ============================================================

JOB_TRANSITIONS = {
    JobStatus.draft: frozenset({JobStatus.pending, JobStatus.cancelled}),
    JobStatus.pending: frozenset({JobStatus.active, JobStatus.draft, JobStatus.cancelled}),
    JobStatus.active: frozenset({JobStatus.closed, JobStatus.cancelled}),
    JobStatus.closed: frozenset({JobStatus.active}),
    JobStatus.cancelled: frozenset(),
}


def check_job_transition(current: JobStatus, target: JobStatus) -> TransitionCheck:
    current = JobStatus(current)
    target = JobStatus(target)
    if target in JOB_TRANSITIONS[current]:
        return ALLOWED
    return _deny(f"Cannot move job from {current.value} to {target.value}")
