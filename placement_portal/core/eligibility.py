"""
Eligibility Evaluator - may this student apply to this job?

Pure functions over plain attribute access, so they accept ORM rows,
the `StudentSnapshot` carried by the request actor, or any object with the
same attributes. The job listing filter and the apply gate both call
`is_eligible`, so a student is never shown a job the apply step refuses.
"""

from dataclasses import dataclass, field
from typing import List


@dataclass
class EligibilityResult:
    eligible: bool
    reasons: List[str] = field(default_factory=list)


def evaluate_eligibility(student, job) -> EligibilityResult:
    """Run all five checks and collect every failed criterion."""
    reasons = []

    required_cgpa = getattr(job, "required_cgpa", None)
    if required_cgpa is not None:
        cgpa = getattr(student, "cgpa", None)
        if cgpa is None or float(cgpa) < float(required_cgpa):
            reasons.append(f"Minimum CGPA of {float(required_cgpa):.2f} required")

    allowed_backlogs = getattr(job, "allowed_backlogs", None)
    if allowed_backlogs is not None:
        backlogs = getattr(student, "active_backlogs", None) or 0
        if int(backlogs) > int(allowed_backlogs):
            reasons.append(f"At most {allowed_backlogs} active backlog(s) allowed")

    departments = getattr(job, "eligible_departments", None) or []
    if departments and getattr(student, "department_id", None) not in departments:
        reasons.append("Your department is not eligible")

    batches = getattr(job, "eligible_batches", None) or []
    if batches and getattr(student, "batch_year", None) not in batches:
        reasons.append("Your batch is not eligible")

    degrees = getattr(job, "eligible_degrees", None) or []
    if degrees and getattr(student, "degree", None) not in degrees:
        reasons.append("Your degree is not eligible")

    return EligibilityResult(eligible=not reasons, reasons=reasons)


def is_eligible(student, job) -> bool:
    return evaluate_eligibility(student, job).eligible
