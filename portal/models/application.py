"""Application model."""

from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship

from portal.db.base import Base, JSONType


class Application(Base):
    """A student's application to one job."""

    __tablename__ = "applications"
    __table_args__ = (
        UniqueConstraint("student_id", "job_id", name="unique_student_job_application"),
    )

    student_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    job_id = Column(Uuid(as_uuid=True), ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False, index=True)

    # Snapshot taken at submission, independent of later profile edits
    personal_info = Column(JSONType, default=dict)  # {"full_name", "email", "phone", "linkedin"}
    education = Column(JSONType, default=dict)  # {"college", "degree", "status", "graduation_year", "cgpa", "marks_type"}
    skills = Column(JSONType, default=list)
    projects = Column(Text)
    extracurricular = Column(Text)

    # Uploaded artifacts (filenames)
    resume = Column(String(500))
    cover_letter_file = Column(String(500))
    cover_letter_text = Column(Text)

    # Status tracking
    status = Column(String(20), default="applied", nullable=False, index=True)
    eligibility_ok = Column(Boolean, default=False, nullable=False)
    applied_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    # Relationships
    student = relationship("User", lazy="joined")
    job = relationship("Job", lazy="joined")
    answers = relationship(
        "ApplicationAnswer",
        back_populates="application",
        order_by="ApplicationAnswer.position",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    def __repr__(self):
        return f"<Application {self.student_id} -> {self.job_id}>"


class ApplicationAnswer(Base):
    """Answer to one of the job's declared questions."""

    __tablename__ = "application_answers"
    __table_args__ = (
        UniqueConstraint("application_id", "question_id", name="unique_application_question"),
    )

    application_id = Column(
        Uuid(as_uuid=True), ForeignKey("applications.id", ondelete="CASCADE"), nullable=False, index=True
    )
    question_id = Column(Uuid(as_uuid=True), ForeignKey("job_questions.id", ondelete="CASCADE"), nullable=False)
    position = Column(Integer, nullable=False, default=0)
    answer = Column(Text, nullable=False)

    application = relationship("Application", back_populates="answers")
    question = relationship("JobQuestion", lazy="joined")

    def __repr__(self):
        return f"<ApplicationAnswer {self.application_id}:{self.question_id}>"
