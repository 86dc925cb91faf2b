"""Database models."""

# Import all models in dependency order to ensure proper relationship initialization

# Base models (no foreign keys)
from portal.models.user import User

# Models with foreign keys to base models
from portal.models.company import CompanyProfile
from portal.models.student import StudentProfile
from portal.models.job import Job, JobQuestion

# Models with foreign keys to other models
from portal.models.application import Application, ApplicationAnswer
from portal.models.student_interactions import SavedJob

# Export all models
__all__ = [
    "User",
    "CompanyProfile",
    "StudentProfile",
    "Job",
    "JobQuestion",
    "Application",
    "ApplicationAnswer",
    "SavedJob",
]
