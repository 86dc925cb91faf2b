"""
Student-related interaction models
Jobs bookmarked by students
"""

from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Index, Uuid
from sqlalchemy.orm import relationship

from portal.db.base import Base


class SavedJob(Base):
    """
    Jobs saved/bookmarked by students
    Many-to-one with student_profiles, many-to-one with jobs
    """
    __tablename__ = "saved_jobs"

    # Note: id, created_at, updated_at are inherited from Base class (UUID)
    student_profile_id = Column(
        Uuid(as_uuid=True), ForeignKey("student_profiles.id", ondelete="CASCADE"), nullable=False
    )
    job_id = Column(Uuid(as_uuid=True), ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False)
    saved_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    student_profile = relationship("StudentProfile", back_populates="saved_jobs")
    job = relationship("Job", lazy="joined")

    __table_args__ = (
        Index("idx_saved_jobs_job", "job_id"),
        Index("idx_saved_jobs_profile_job", "student_profile_id", "job_id", unique=True),  # Prevent duplicates
    )

    def __repr__(self):
        return f"<SavedJob(student_profile_id={self.student_profile_id}, job_id={self.job_id})>"
