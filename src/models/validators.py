"""Pydantic validation models for API requests.

Request bodies arrive in the dashboard's camelCase; every model accepts both
the camelCase alias and the snake_case field name.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, List, Any
from datetime import date, datetime

from config.settings import settings
from src.models.holiday import HolidayType
from src.models.user import UserRole


class RequestModel(BaseModel):
    """Common configuration for request bodies."""

    model_config = ConfigDict(
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="ignore",
    )

    def provided_fields(self) -> dict:
        """Fields the client actually sent, keyed by snake_case name."""
        return self.model_dump(exclude_unset=True)


def _blank_to_none(v: Any) -> Any:
    # The dashboard sends "" for an unselected dropdown
    if v == "":
        return None
    return v


class PaginationParams(RequestModel):
    """Validation for page/limit query parameters."""

    page: int = Field(default=1, ge=1)
    limit: int = Field(default=10, ge=1, le=1000)


# =============================================================================
# Teams
# =============================================================================


class TeamCreateRequest(RequestModel):
    """Validation for team creation."""

    name: str = Field(min_length=1, max_length=100)
    code: str = Field(min_length=1, max_length=20)
    description: Optional[str] = Field(default=None, max_length=500)
    department_id: int = Field(alias="department")
    team_manager_id: Optional[int] = Field(default=None, alias="teamManager")
    team_leader_id: Optional[int] = Field(default=None, alias="teamLeader")
    max_size: Optional[int] = Field(default=None, ge=1, alias="maxSize")

    @field_validator("code")
    @classmethod
    def normalize_code(cls, v: str) -> str:
        return v.upper()

    @field_validator("team_manager_id", "team_leader_id", mode="before")
    @classmethod
    def blank_reference_is_none(cls, v: Any) -> Any:
        return _blank_to_none(v)

    @field_validator("max_size")
    @classmethod
    def validate_max_size(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v > settings.teams.max_size_limit:
            raise ValueError(f"Max size must be between 1 and {settings.teams.max_size_limit}")
        return v


class TeamUpdateRequest(RequestModel):
    """Validation for team updates. Only fields present in the body are applied."""

    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    team_manager_id: Optional[int] = Field(default=None, alias="teamManager")
    team_leader_id: Optional[int] = Field(default=None, alias="teamLeader")
    max_size: Optional[int] = Field(default=None, ge=1, alias="maxSize")
    is_active: Optional[bool] = Field(default=None, alias="isActive")

    @field_validator("team_manager_id", "team_leader_id", mode="before")
    @classmethod
    def blank_reference_is_none(cls, v: Any) -> Any:
        return _blank_to_none(v)

    @field_validator("max_size")
    @classmethod
    def validate_max_size(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v > settings.teams.max_size_limit:
            raise ValueError(f"Max size must be between 1 and {settings.teams.max_size_limit}")
        return v


class AddMemberRequest(RequestModel):
    """Validation for adding a member to a team."""

    user_id: int = Field(alias="userId")
    role: str = Field(default_factory=lambda: settings.teams.default_member_role, min_length=1, max_length=50)


# =============================================================================
# Holidays
# =============================================================================


def _calendar_date(v: Any) -> Any:
    """Reduce datetimes and ISO timestamps to their calendar date."""
    if isinstance(v, datetime):
        return v.date()
    if isinstance(v, str) and len(v.strip()) > 10:
        v = v.strip()
        try:
            return datetime.fromisoformat(v.replace("Z", "+00:00")).date()
        except ValueError:
            raise ValueError("Date must be in YYYY-MM-DD format")
    return v


class HolidayCreateRequest(RequestModel):
    """Validation for holiday creation."""

    holiday_name: str = Field(min_length=1, max_length=150, alias="holidayName")
    holiday_date: date = Field(alias="date")
    holiday_type: HolidayType = Field(alias="holidayType")
    description: Optional[str] = Field(default=None, max_length=500)

    @field_validator("holiday_date", mode="before")
    @classmethod
    def validate_date(cls, v: Any) -> Any:
        return _calendar_date(v)

    @field_validator("holiday_type", mode="before")
    @classmethod
    def validate_holiday_type(cls, v: Any) -> HolidayType:
        return HolidayType.parse(v)


class HolidayUpdateRequest(RequestModel):
    """Validation for holiday updates."""

    holiday_name: Optional[str] = Field(default=None, min_length=1, max_length=150, alias="holidayName")
    holiday_date: Optional[date] = Field(default=None, alias="date")
    holiday_type: Optional[HolidayType] = Field(default=None, alias="holidayType")
    description: Optional[str] = Field(default=None, max_length=500)

    @field_validator("holiday_date", mode="before")
    @classmethod
    def validate_date(cls, v: Any) -> Any:
        return _calendar_date(v)

    @field_validator("holiday_type", mode="before")
    @classmethod
    def validate_holiday_type(cls, v: Any) -> Optional[HolidayType]:
        if v is None:
            return v
        return HolidayType.parse(v)


class BulkHolidayRequest(RequestModel):
    """Validation for bulk holiday creation; items are validated one by one."""

    holidays: List[Any] = Field(min_length=1)


class UpcomingHolidaysParams(RequestModel):
    """Validation for the upcoming holidays query."""

    limit: int = Field(default=5, ge=1, le=100)


class HolidayListParams(PaginationParams):
    """Validation for holiday listing filters."""

    limit: int = Field(default=50, ge=1, le=1000)
    year: Optional[int] = Field(default=None, ge=1900, le=2200)
    month: Optional[int] = Field(default=None, ge=1, le=12)
    holiday_type: Optional[str] = Field(default=None, alias="type")


# =============================================================================
# Departments
# =============================================================================


class DepartmentCreateRequest(RequestModel):
    """Validation for department creation."""

    name: str = Field(min_length=1, max_length=100)
    code: str = Field(min_length=1, max_length=20)
    description: Optional[str] = Field(default=None, max_length=500)

    @field_validator("code")
    @classmethod
    def normalize_code(cls, v: str) -> str:
        return v.upper()


class DepartmentUpdateRequest(RequestModel):
    """Validation for department updates."""

    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    code: Optional[str] = Field(default=None, min_length=1, max_length=20)
    description: Optional[str] = Field(default=None, max_length=500)
    is_active: Optional[bool] = Field(default=None, alias="isActive")

    @field_validator("code")
    @classmethod
    def normalize_code(cls, v: Optional[str]) -> Optional[str]:
        return v.upper() if v else v


# =============================================================================
# Users
# =============================================================================


class UserCreateRequest(RequestModel):
    """Validation for onboarding a user."""

    employee_id: str = Field(min_length=1, max_length=50, alias="employeeId")
    first_name: str = Field(min_length=1, max_length=100, alias="firstName")
    last_name: str = Field(min_length=1, max_length=100, alias="lastName")
    email: str = Field(min_length=3, max_length=255)
    role: UserRole = UserRole.EMPLOYEE
    department_id: Optional[int] = Field(default=None, alias="department")

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        if "@" not in v or v.startswith("@") or v.endswith("@"):
            raise ValueError("Invalid email address")
        return v.lower()

    @field_validator("role", mode="before")
    @classmethod
    def validate_role(cls, v: Any) -> UserRole:
        return UserRole.parse(v)


class UserUpdateRequest(RequestModel):
    """Validation for administrative user edits."""

    first_name: Optional[str] = Field(default=None, min_length=1, max_length=100, alias="firstName")
    last_name: Optional[str] = Field(default=None, min_length=1, max_length=100, alias="lastName")
    email: Optional[str] = Field(default=None, min_length=3, max_length=255)
    role: Optional[UserRole] = None
    department_id: Optional[int] = Field(default=None, alias="department")
    is_active: Optional[bool] = Field(default=None, alias="isActive")

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        if "@" not in v or v.startswith("@") or v.endswith("@"):
            raise ValueError("Invalid email address")
        return v.lower()

    @field_validator("role", mode="before")
    @classmethod
    def validate_role(cls, v: Any) -> Optional[UserRole]:
        if v is None:
            return v
        return UserRole.parse(v)