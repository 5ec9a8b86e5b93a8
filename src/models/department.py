"""Department model."""

from sqlalchemy import Column, Integer, String, DateTime, Boolean, Text, ForeignKey
from datetime import datetime, timezone

from .base import Base


class Department(Base):
    """Organizational department that scopes team names and codes."""

    __tablename__ = "departments"

    id = Column(Integer, primary_key=True)
    name = Column(String(100), unique=True, nullable=False)
    code = Column(String(20), unique=True, nullable=False)
    description = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    def to_summary(self):
        return {"id": self.id, "name": self.name, "code": self.code}

    def to_dict(self, team_count=None):
        data = {
            **self.to_summary(),
            "description": self.description,
            "isActive": self.is_active,
            "createdBy": self.created_by,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }
        if team_count is not None:
            data["teamCount"] = team_count
        return data

    def __repr__(self):
        return f"<Department(id={self.id}, code={self.code})>"
