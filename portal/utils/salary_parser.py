"""
Salary parsing utilities for dashboard aggregates.

Job postings carry salary as free text ("8 LPA", "80k per month",
"₹50,000/month", "Competitive"). Dashboards show an average package in
lakhs per annum, so each descriptor is normalized to that scale here.
The result is a display aggregate only.
"""

import re
from typing import Iterable, Optional

# Currency symbols and thousands separators are dropped before tokenizing
_STRIP_PATTERN = re.compile(r"[₹$€£,]")
_NUMBER_PATTERN = re.compile(r"\d+(?:\.\d+)?")
_LAKH_PATTERN = re.compile(r"lpa|lakh|lac")
_THOUSAND_PATTERN = re.compile(r"\d\s*k\b|thousand")
_MONTHLY_PATTERN = re.compile(r"per\s*month|/\s*month|monthly")

ONE_LAKH = 100000
THOUSANDS_PER_LAKH = 100


def parse_salary_to_lakhs(salary: Optional[str]) -> Optional[float]:
    """
    Normalize a free-text salary descriptor to lakhs per annum.

    Examples:
        "8 LPA" → 8.0
        "6-10 LPA" → 8.0
        "80k per month" → 9.6 (80 thousand × 12 months / 100)
        "800k" → 8.0 (annual, thousands, no LPA marker)
        "₹50,000/month" → 6.0 (50000 × 12 / 100000)
        "Competitive" → None

    Args:
        salary: Salary text as entered on the posting

    Returns:
        Salary in lakhs per annum, or None when no number can be read
    """
    if not salary:
        return None

    normalized = _STRIP_PATTERN.sub("", str(salary).lower()).strip()
    values = [float(token) for token in _NUMBER_PATTERN.findall(normalized)]
    if not values:
        return None

    average = sum(values) / len(values)

    in_lakhs = bool(_LAKH_PATTERN.search(normalized))
    in_thousands = bool(_THOUSAND_PATTERN.search(normalized))
    per_month = bool(_MONTHLY_PATTERN.search(normalized))

    if per_month:
        if in_thousands:
            average = (average * 12) / THOUSANDS_PER_LAKH
        else:
            # Plain currency units per month
            average = (average * 12) / ONE_LAKH
    elif in_thousands and not in_lakhs:
        # Annual figure expressed in thousands, e.g. 800k
        average = average / THOUSANDS_PER_LAKH

    return average


def average_package(salaries: Iterable[Optional[str]]) -> Optional[float]:
    """Mean of the parseable salaries in lakhs, rounded to 2 places; None if none parse."""
    values = [value for value in (parse_salary_to_lakhs(s) for s in salaries) if value is not None]
    if not values:
        return None
    return round(sum(values) / len(values), 2)
