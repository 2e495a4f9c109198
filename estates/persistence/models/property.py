"""Property model (read-only from the lead pipeline's point of view)."""

from sqlalchemy import Boolean, Column, DateTime, Integer, String

from estates.core.clock import utcnow
from estates.persistence.database import Base


class Property(Base):
    """Property listing. Leads copy its name and slug at creation time."""

    __tablename__ = "properties"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False)
    slug = Column(String(255), unique=True, nullable=False, index=True)
    is_active = Column(Boolean, default=True, nullable=False)
    views = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<Property(id={self.id}, slug={self.slug})>"
