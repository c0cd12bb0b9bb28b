from datetime import datetime
from types import SimpleNamespace

import pytest

from placement_portal.core.constants import (
    ApplicationStatus, InterviewResult, InterviewStatus, JobStatus, PlacementStatus
)
from placement_portal.core.exceptions import IllegalTransition
from placement_portal.core.transitions import (
    check_application_transition, check_interview_scheduling, check_interview_transition,
    check_job_transition, check_reschedule, check_withdrawal, mark_withdrawn, record_interview_result
)

NOW = datetime(2025, 3, 1, 10, 0)


def _interview(status=InterviewStatus.scheduled, application_status=ApplicationStatus.interview_scheduled):
    student = SimpleNamespace(placement_status=PlacementStatus.active)
    application = SimpleNamespace(
        id=7, status=application_status, student=student, reviewed_by=None, reviewed_at=None, notes=None
    )
    return SimpleNamespace(status=status, result=InterviewResult.pending, feedback=None, application=application)


def test_withdrawal_allowed_while_submitted() -> None:
    assert check_withdrawal(ApplicationStatus.submitted, is_owner=True).allowed


def test_withdrawal_refused_after_selection() -> None:
    check = check_withdrawal(ApplicationStatus.selected, is_owner=True)
    assert not check.allowed
    with pytest.raises(IllegalTransition):
        check.raise_if_denied()


def test_withdrawal_refused_for_non_owner() -> None:
    assert not check_withdrawal(ApplicationStatus.submitted, is_owner=False).allowed


def test_withdrawing_twice_is_refused() -> None:
    assert not check_withdrawal(ApplicationStatus.withdrawn, is_owner=True).allowed


def test_staff_moves_forward_through_pipeline() -> None:
    assert check_application_transition(ApplicationStatus.submitted, ApplicationStatus.shortlisted).allowed
    assert not check_application_transition(ApplicationStatus.shortlisted, ApplicationStatus.submitted).allowed


def test_staff_cannot_withdraw_or_reopen_terminal_applications() -> None:
    assert not check_application_transition(ApplicationStatus.submitted, ApplicationStatus.withdrawn).allowed
    assert not check_application_transition(ApplicationStatus.rejected, ApplicationStatus.shortlisted).allowed


def test_offer_responses_need_selection() -> None:
    assert check_application_transition(ApplicationStatus.selected, ApplicationStatus.offer_accepted).allowed
    assert not check_application_transition(ApplicationStatus.shortlisted, ApplicationStatus.offer_accepted).allowed


def test_rejection_allowed_from_any_open_status() -> None:
    for status in (ApplicationStatus.submitted, ApplicationStatus.interview_scheduled, ApplicationStatus.selected):
        assert check_application_transition(status, ApplicationStatus.rejected).allowed


def test_interviews_only_for_open_applications() -> None:
    assert check_interview_scheduling(ApplicationStatus.shortlisted).allowed
    assert not check_interview_scheduling(ApplicationStatus.rejected).allowed
    assert not check_interview_scheduling(ApplicationStatus.withdrawn).allowed


def test_completed_interview_is_final() -> None:
    assert not check_interview_transition(InterviewStatus.completed, InterviewStatus.scheduled).allowed
    assert not check_reschedule(InterviewStatus.cancelled).allowed
    assert check_reschedule(InterviewStatus.scheduled).allowed


def test_selected_result_completes_interview_and_selects_application() -> None:
    interview, application = record_interview_result(
        _interview(), now=NOW, actor_user_id=3, result=InterviewResult.selected
    )
    assert interview.status == InterviewStatus.completed
    assert interview.result == InterviewResult.selected
    assert application.status == ApplicationStatus.selected
    assert application.reviewed_by == 3
    assert application.reviewed_at == NOW


def test_failed_result_rejects_application() -> None:
    _, application = record_interview_result(_interview(), now=NOW, actor_user_id=3, result=InterviewResult.failed)
    assert application.status == ApplicationStatus.rejected


def test_on_hold_result_leaves_application_alone() -> None:
    interview, application = record_interview_result(
        _interview(), now=NOW, actor_user_id=3, result=InterviewResult.on_hold, feedback="Second round pending"
    )
    assert interview.status == InterviewStatus.scheduled
    assert interview.feedback == "Second round pending"
    assert application.status == ApplicationStatus.interview_scheduled


def test_refused_cascade_changes_nothing() -> None:
    interview = _interview(application_status=ApplicationStatus.withdrawn)
    with pytest.raises(IllegalTransition):
        record_interview_result(interview, now=NOW, actor_user_id=3, result=InterviewResult.passed)
    assert interview.status == InterviewStatus.scheduled
    assert interview.result == InterviewResult.pending


def test_job_lifecycle() -> None:
    assert check_job_transition(JobStatus.pending, JobStatus.active).allowed
    assert check_job_transition(JobStatus.closed, JobStatus.active).allowed
    assert not check_job_transition(JobStatus.cancelled, JobStatus.active).allowed
    assert not check_job_transition(JobStatus.draft, JobStatus.active).allowed


def test_withdrawal_cancels_only_open_interviews() -> None:
    open_round = SimpleNamespace(status=InterviewStatus.scheduled)
    moved_round = SimpleNamespace(status=InterviewStatus.rescheduled)
    finished_round = SimpleNamespace(status=InterviewStatus.completed)
    application = SimpleNamespace(
        status=ApplicationStatus.interview_scheduled, interviews=[open_round, moved_round, finished_round]
    )

    cancelled = mark_withdrawn(application)

    assert application.status == ApplicationStatus.withdrawn
    assert cancelled == [open_round, moved_round]
    assert finished_round.status == InterviewStatus.completed
    assert open_round.status == moved_round.status == InterviewStatus.cancelled


def test_result_refused_for_withdrawn_application() -> None:
    interview = _interview(application_status=ApplicationStatus.withdrawn)
    with pytest.raises(IllegalTransition):
        record_interview_result(interview, now=NOW, actor_user_id=3, result=InterviewResult.on_hold)
    assert interview.result == InterviewResult.pending
