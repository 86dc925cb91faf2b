import pytest

from portal.utils.salary_parser import average_package, parse_salary_to_lakhs


@pytest.mark.parametrize(
    "salary, expected",
    [
        ("8 LPA", 8.0),
        ("6-10 LPA", 8.0),
        ("12 lakh", 12.0),
        ("4.5 Lac per annum", 4.5),
        ("80k per month", 9.6),
        ("800k", 8.0),
        ("₹50,000/month", 6.0),
        ("25,000 monthly", 3.0),
    ],
)
def test_parse_salary_to_lakhs(salary, expected):
    assert parse_salary_to_lakhs(salary) == pytest.approx(expected)


@pytest.mark.parametrize("salary", [None, "", "Competitive", "As per industry standards"])
def test_unparseable_salary_is_none(salary):
    assert parse_salary_to_lakhs(salary) is None


def test_lakh_marker_wins_over_thousands():
    # "k" inside a word is not a thousands marker
    assert parse_salary_to_lakhs("7 lakh, negotiable") == pytest.approx(7.0)


def test_average_package_skips_unparseable():
    assert average_package(["8 LPA", "Competitive", "800k", None]) == 8.0


def test_average_package_rounds_to_two_places():
    assert average_package(["8 LPA", "9 LPA", "9 LPA"]) == 8.67


def test_average_package_none_when_nothing_parses():
    assert average_package(["Competitive", ""]) is None
    assert average_package([]) is None
