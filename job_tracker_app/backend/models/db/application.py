import uuid

from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship
from .database import Base
from .user import _utcnow
from ...constants import DEFAULT_STATUS


class Application(Base):
    __tablename__ = "applications"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)
    section_id = Column(String(36), ForeignKey("sections.id", ondelete="SET NULL"), index=True, nullable=True)

    company_name = Column(String(200), index=True, nullable=False)
    position_title = Column(String(200), nullable=False)
    job_posting_url = Column(String(2000), nullable=True)
    location = Column(String(200), nullable=True)
    work_type = Column(String(20), nullable=True)
    salary_range_min = Column(Integer, nullable=True)
    salary_range_max = Column(Integer, nullable=True)
    status = Column(String(40), default=DEFAULT_STATUS, nullable=False)
    date_applied = Column(Date, index=True, nullable=False)

    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    section = relationship("Section", back_populates="applications")

    @property
    def section_name(self):
        return self.section.name if self.section is not None else None
