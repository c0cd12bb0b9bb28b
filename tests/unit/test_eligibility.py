from types import SimpleNamespace

from placement_portal.core.eligibility import evaluate_eligibility, is_eligible


def _student(**overrides):
    values = dict(cgpa=7.2, active_backlogs=0, department_id=1, batch_year=2025, degree="BTech")
    values.update(overrides)
    return SimpleNamespace(**values)


def _job(**overrides):
    values = dict(
        required_cgpa=None,
        allowed_backlogs=None,
        eligible_departments=[],
        eligible_batches=[],
        eligible_degrees=[],
    )
    values.update(overrides)
    return SimpleNamespace(**values)


def _placement_drive():
    return _job(
        required_cgpa=7.0,
        allowed_backlogs=0,
        eligible_departments=[3, 5],
        eligible_batches=[2025],
        eligible_degrees=["BTech", "MTech"],
    )


def test_student_above_cgpa_cutoff_is_eligible() -> None:
    assert is_eligible(_student(cgpa=7.2, department_id=3), _placement_drive())


def test_student_below_cgpa_cutoff_is_not_eligible() -> None:
    result = evaluate_eligibility(_student(cgpa=6.9, department_id=3), _placement_drive())
    assert not result.eligible
    assert result.reasons == ["Minimum CGPA of 7.00 required"]


def test_cgpa_equal_to_cutoff_passes() -> None:
    assert is_eligible(_student(cgpa=7.0), _job(required_cgpa=7.0))


def test_unconstrained_job_admits_everyone() -> None:
    assert is_eligible(_student(cgpa=None, active_backlogs=5, department_id=None), _job())


def test_missing_cgpa_fails_a_cgpa_requirement() -> None:
    assert not is_eligible(_student(cgpa=None), _job(required_cgpa=6.0))


def test_each_constraint_is_checked_independently() -> None:
    job = _job(
        required_cgpa=8.0,
        allowed_backlogs=0,
        eligible_departments=[2],
        eligible_batches=[2026],
        eligible_degrees=["MTech"],
    )
    result = evaluate_eligibility(_student(cgpa=7.5, active_backlogs=2), job)

    assert not result.eligible
    assert len(result.reasons) == 5


def test_backlog_limit_allows_up_to_the_limit() -> None:
    job = _job(allowed_backlogs=1)
    assert is_eligible(_student(active_backlogs=1), job)
    assert not is_eligible(_student(active_backlogs=2), job)


def test_list_constraints_require_membership() -> None:
    assert not is_eligible(_student(department_id=3), _job(eligible_departments=[1, 2]))
    assert not is_eligible(_student(batch_year=2024), _job(eligible_batches=[2025]))
    assert not is_eligible(_student(degree="MBA"), _job(eligible_degrees=["BTech", "MTech"]))
    assert is_eligible(_student(department_id=2), _job(eligible_departments=[1, 2]))
