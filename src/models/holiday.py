"""Company holiday calendar model."""

from sqlalchemy import (
    Column,
    Integer,
    String,
    Date,
    DateTime,
    Enum,
    Boolean,
    Text,
    ForeignKey,
    Index,
    text,
)
from datetime import datetime, timezone
import enum

from .base import Base


class HolidayType(enum.Enum):
    """Holiday classification shown on the dashboard calendar."""

    NATIONAL = "National"
    REGIONAL = "Regional"
    RELIGIOUS = "Religious"
    COMPANY = "Company"
    OPTIONAL = "Optional"

    @classmethod
    def parse(cls, value):
        if isinstance(value, cls):
            return value
        for holiday_type in cls:
            if holiday_type.value.lower() == str(value).strip().lower():
                return holiday_type
        allowed = ", ".join(t.value for t in cls)
        raise ValueError(f"Invalid holiday type '{value}'. Allowed: {allowed}")


class Holiday(Base):
    """A holiday on a calendar date.

    Deleting a holiday only clears ``is_active``; at most one active holiday may
    exist per date, which the partial unique index enforces at the database level.
    """

    __tablename__ = "holidays"
    __table_args__ = (
        Index(
            "uq_holidays_active_date",
            "date",
            unique=True,
            sqlite_where=text("is_active = 1"),
            postgresql_where=text("is_active"),
        ),
    )

    id = Column(Integer, primary_key=True)
    holiday_name = Column(String(150), nullable=False)
    date = Column(Date, nullable=False, index=True)
    year = Column(Integer, nullable=False, index=True)
    holiday_type = Column(
        Enum(HolidayType, values_callable=lambda types: [t.value for t in types]),
        nullable=False,
    )
    description = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    updated_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    def set_date(self, value):
        """Assign the date and keep the derived year in step."""
        self.date = value
        self.year = value.year

    @property
    def day(self):
        return self.date.strftime("%A") if self.date else None

    def to_dict(self):
        return {
            "id": self.id,
            "holidayName": self.holiday_name,
            "date": self.date.isoformat() if self.date else None,
            "year": self.year,
            "day": self.day,
            "holidayType": self.holiday_type.value if self.holiday_type else None,
            "description": self.description,
            "isActive": self.is_active,
            "createdBy": self.created_by,
            "updatedBy": self.updated_by,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        return f"<Holiday(id={self.id}, date={self.date}, active={self.is_active})>"
