"""
Eligibility evaluation.

Compares a student profile against the thresholds a job declares. Score
thresholds fail closed when the student has no recorded score (missing is
read as 0). Categorical thresholds (graduation year, branch) fail open when
either side is missing. Both functions are pure and only read attributes.
"""

from dataclasses import dataclass
from typing import Any, List, Optional


@dataclass(frozen=True)
class EligibilityCheck:
    """Outcome of one eligibility criterion."""

    criterion: str
    required: Any
    actual: Any
    passed: bool


# (criterion name, job threshold attribute, profile attribute)
_SCORE_CRITERIA = (
    ("cgpa", "min_cgpa", "cgpa"),
    ("tenth_percentage", "min_tenth_percentage", "tenth_percentage"),
    ("twelfth_percentage", "min_twelfth_percentage", "twelfth_percentage"),
)


def _score(value: Any) -> float:
    if value is None or value == "":
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _normalize_branch(value: Any) -> str:
    return str(value).strip().lower()


def eligibility_report(job: Any, profile: Optional[Any]) -> List[EligibilityCheck]:
    """
    Evaluate every threshold the job declares.

    Args:
        job: Object with min_cgpa, min_tenth_percentage, min_twelfth_percentage,
            required_graduation_year and allowed_branches attributes
        profile: Student profile (or None, treated as all fields missing)

    Returns:
        One EligibilityCheck per declared threshold, in a stable order.
        A job with no thresholds yields an empty report.
    """
    checks: List[EligibilityCheck] = []

    for criterion, job_attr, profile_attr in _SCORE_CRITERIA:
        minimum = getattr(job, job_attr, None)
        if minimum is None:
            continue
        actual = getattr(profile, profile_attr, None) if profile is not None else None
        checks.append(
            EligibilityCheck(
                criterion=criterion,
                required=minimum,
                actual=actual,
                passed=_score(actual) >= float(minimum),
            )
        )

    required_year = getattr(job, "required_graduation_year", None)
    if required_year is not None:
        actual_year = getattr(profile, "graduation_year", None) if profile is not None else None
        passed = actual_year is None or int(actual_year) == int(required_year)
        checks.append(EligibilityCheck("graduation_year", required_year, actual_year, passed))

    allowed_branches = getattr(job, "allowed_branches", None) or []
    if allowed_branches:
        branch = getattr(profile, "branch", None) if profile is not None else None
        if branch is None or str(branch).strip() == "":
            passed = True
        else:
            allowed = {_normalize_branch(b) for b in allowed_branches}
            passed = _normalize_branch(branch) in allowed
        checks.append(EligibilityCheck("branch", list(allowed_branches), branch, passed))

    return checks


def evaluate_eligibility(job: Any, profile: Optional[Any]) -> bool:
    """Return True when the profile satisfies every threshold the job declares."""
    return all(check.passed for check in eligibility_report(job, profile))
