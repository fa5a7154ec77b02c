import uuid

from sqlalchemy import Column, DateTime, ForeignKey, Index, String, func
from sqlalchemy.orm import relationship
from .database import Base
from .user import _utcnow


class Section(Base):
    __tablename__ = "sections"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)
    name = Column(String(100), nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    # Deleting a section detaches its applications instead of deleting them
    applications = relationship("Application", back_populates="section")


# Names are unique per owner, ignoring case
Index("uq_sections_user_lower_name", Section.user_id, func.lower(Section.name), unique=True)
