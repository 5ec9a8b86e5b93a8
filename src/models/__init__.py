"""Models package for the HR admin API."""

# Import base first
from .base import Base

# Import all model classes for easy access
from .user import User, UserRole
from .department import Department
from .team import Team, TeamMember
from .holiday import Holiday, HolidayType

__all__ = [
    "Base",
    "User",
    "UserRole",
    "Department",
    "Team",
    "TeamMember",
    "Holiday",
    "HolidayType",
]
