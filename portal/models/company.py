"""Company profile model."""

from sqlalchemy import Column, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import relationship

from portal.db.base import Base, JSONType


class CompanyProfile(Base):
    """Company profile, one per company user."""

    __tablename__ = "company_profiles"

    user_id = Column(
        Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    company_name = Column(String(255), nullable=False, index=True)
    industry = Column(String(100), default="")
    website = Column(String(500))
    size = Column(String(50))  # startup, small, medium, large, enterprise
    founded = Column(Integer)
    description = Column(Text)
    logo = Column(String(500))

    # Contact info
    contact_person = Column(String(255))
    phone = Column(String(20))
    address = Column(JSONType, default=dict)  # {"street", "city", "state", "country", "zip_code"}
    social_links = Column(JSONType, default=dict)  # {"linkedin", "twitter", "facebook"}

    # Relationships
    user = relationship("User", lazy="joined")
    jobs_posted = relationship("Job", back_populates="company_profile", order_by="Job.created_at.desc()")

    def __repr__(self):
        return f"<CompanyProfile {self.company_name}>"
