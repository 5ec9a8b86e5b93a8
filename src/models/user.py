"""User model and role enumeration."""

from sqlalchemy import (
    Column,
    Integer,
    String,
    DateTime,
    Enum,
    Boolean,
    ForeignKey,
)
from datetime import datetime, timezone
import enum

from .base import Base


class UserRole(enum.Enum):
    """User role enumeration.

    Values are the display labels used by the dashboard and stored in the
    database, so they must not be renamed.
    """

    ADMIN = "Admin"
    VICE_PRESIDENT = "Vice President"
    HR_BP = "HR BP"
    HR_MANAGER = "HR Manager"
    HR_EXECUTIVE = "HR Executive"
    TEAM_MANAGER = "Team Manager"
    TEAM_LEADER = "Team Leader"
    EMPLOYEE = "Employee"

    @classmethod
    def parse(cls, value):
        """Resolve a role from its label ("HR BP") or member name ("HR_BP")."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            raise ValueError(f"Invalid role: {value!r}")

        for role in cls:
            if role.value.lower() == value.strip().lower():
                return role
        try:
            return cls[value.strip().upper().replace(" ", "_")]
        except KeyError:
            raise ValueError(f"Invalid role: {value}")


class User(Base):
    """Employee record used for authentication, authorization and team membership."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    employee_id = Column(String(50), unique=True, nullable=False)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    role = Column(
        Enum(UserRole, values_callable=lambda roles: [r.value for r in roles]),
        default=UserRole.EMPLOYEE,
        nullable=False,
    )
    department_id = Column(
        Integer,
        ForeignKey("departments.id", use_alter=True, name="fk_users_department_id"),
        nullable=True,
    )
    # Denormalized back-reference; only the roster service writes it
    team_id = Column(
        Integer,
        ForeignKey("teams.id", use_alter=True, name="fk_users_team_id"),
        nullable=True,
    )
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}"

    def has_role(self, role):
        """Check if user has a specific role."""
        return self.role == UserRole.parse(role)

    def can_access(self):
        """Check if user can access the system."""
        return bool(self.is_active)

    def to_summary(self):
        """Short form embedded in team and holiday payloads."""
        return {
            "id": self.id,
            "employeeId": self.employee_id,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "email": self.email,
            "role": self.role.value if self.role else None,
        }

    def to_dict(self):
        """Convert user to dictionary."""
        return {
            **self.to_summary(),
            "department": self.department_id,
            "team": self.team_id,
            "isActive": self.is_active,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"
