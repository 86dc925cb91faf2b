"""Job posting model."""

from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import relationship

from portal.db.base import Base, JSONType


class Job(Base):
    """Job or internship posting owned by a company user."""

    __tablename__ = "jobs"

    posted_by = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    company_profile_id = Column(
        Uuid(as_uuid=True), ForeignKey("company_profiles.id", ondelete="SET NULL"), nullable=True, index=True
    )

    title = Column(String(500), nullable=False, index=True)
    company = Column(String(255))  # Display name snapshotted when posted
    job_type = Column(String(50), default="full-time")  # internship, full-time, part-time, remote
    location = Column(String(255))
    salary = Column(String(255))  # Free text: "8 LPA", "80k per month", ...
    description = Column(Text)
    experience_level = Column(String(20), default="fresher")  # fresher, 0-2, 2-5, 5+

    # Ordered lists
    requirements = Column(JSONType, default=list)
    responsibilities = Column(JSONType, default=list)
    benefits = Column(JSONType, default=list)
    skills = Column(JSONType, default=list)

    # Eligibility thresholds, NULL means no constraint
    min_cgpa = Column(Float, nullable=True)
    min_tenth_percentage = Column(Float, nullable=True)
    min_twelfth_percentage = Column(Float, nullable=True)
    required_graduation_year = Column(Integer, nullable=True)
    allowed_branches = Column(JSONType, nullable=True)  # ["CS", "EE"]

    vacancies = Column(Integer, default=1)
    application_deadline = Column(DateTime, nullable=True)

    # Inactive jobs wait for admin review and are hidden from students
    is_active = Column(Boolean, default=True, nullable=False, index=True)

    # Relationships
    owner = relationship("User", lazy="joined")
    company_profile = relationship("CompanyProfile", back_populates="jobs_posted")
    questions = relationship(
        "JobQuestion",
        back_populates="job",
        order_by="JobQuestion.position",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    def __repr__(self):
        return f"<Job {self.title} by {self.posted_by}>"


class JobQuestion(Base):
    """Free-form question a company attaches to a posting."""

    __tablename__ = "job_questions"

    job_id = Column(Uuid(as_uuid=True), ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)
    question = Column(Text, nullable=False)
    is_required = Column(Boolean, default=False, nullable=False)

    job = relationship("Job", back_populates="questions")

    def __repr__(self):
        return f"<JobQuestion {self.job_id}#{self.position}>"
