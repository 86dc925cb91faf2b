"""Student profile model."""

from sqlalchemy import Column, Date, Float, ForeignKey, Integer, String, Uuid
from sqlalchemy.orm import relationship

from portal.db.base import Base, JSONType


class StudentProfile(Base):
    """Student profile, one per student user."""

    __tablename__ = "student_profiles"

    user_id = Column(
        Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False
    )

    # Education
    college = Column(String(255))
    course = Column(String(255))
    specialization = Column(String(255))
    branch = Column(String(100))  # CS, EE, ME, ...
    graduation_year = Column(Integer)
    tenth_percentage = Column(Float)
    twelfth_percentage = Column(Float)
    cgpa = Column(Float)

    # Personal
    phone = Column(String(20))
    date_of_birth = Column(Date)

    # JSON fields
    skills = Column(JSONType, default=list)  # ["Python", "React", ...]
    social_links = Column(JSONType, default=dict)  # {"linkedin": "", "github": "", "portfolio": ""}

    # Resume filename inside UPLOAD_DIR/resumes
    resume = Column(String(500))

    # Recomputed on every profile mutation
    profile_completion = Column(Integer, default=0, nullable=False)

    # Relationships
    user = relationship("User", lazy="joined")
    saved_jobs = relationship("SavedJob", back_populates="student_profile", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<StudentProfile {self.user_id}>"
