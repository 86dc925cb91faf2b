"""Placement portal API: students, companies and admins around job postings."""

__version__ = "1.0.0"
