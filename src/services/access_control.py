"""Role-based access control for teams, departments, holidays and users.

All authorization decisions go through this module. The permission table is
keyed by (role, resource kind, operation) and maps to a rule; a missing entry
means the operation is denied.

Usage:
    from src.services.access_control import Operation, require_access

    require_access(actor, team, Operation.UPDATE)
"""

import enum
import logging
from dataclasses import dataclass
from typing import Optional

from src.models.user import UserRole
from src.services.errors import ForbiddenError

logger = logging.getLogger(__name__)


class ResourceKind(enum.Enum):
    TEAM = "team"
    DEPARTMENT = "department"
    HOLIDAY = "holiday"
    USER = "user"


class Operation(enum.Enum):
    READ = "read"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    MANAGE_MEMBERS = "manage_members"


class Rule(enum.Enum):
    """How a permission entry is decided against a concrete resource."""

    ALWAYS = "always"
    TEAM_MANAGER_OF = "team_manager_of"
    TEAM_LEADER_OF = "team_leader_of"


PRIVILEGED_ROLES = frozenset({
    UserRole.ADMIN,
    UserRole.VICE_PRESIDENT,
    UserRole.HR_BP,
    UserRole.HR_MANAGER,
    UserRole.HR_EXECUTIVE,
})

# Fields a Team Manager may change on a team they manage
TEAM_MANAGER_EDITABLE_FIELDS = frozenset({"description", "max_size", "team_leader_id"})


def _build_permission_table():
    table = {}

    for role in PRIVILEGED_ROLES:
        for kind in ResourceKind:
            for operation in Operation:
                table[(role, kind, operation)] = Rule.ALWAYS

    for operation in (Operation.READ, Operation.UPDATE, Operation.MANAGE_MEMBERS):
        table[(UserRole.TEAM_MANAGER, ResourceKind.TEAM, operation)] = Rule.TEAM_MANAGER_OF

    table[(UserRole.TEAM_LEADER, ResourceKind.TEAM, Operation.READ)] = Rule.TEAM_LEADER_OF

    # Calendar and org chart are readable by everyone signed in
    for role in UserRole:
        table.setdefault((role, ResourceKind.HOLIDAY, Operation.READ), Rule.ALWAYS)
        table.setdefault((role, ResourceKind.DEPARTMENT, Operation.READ), Rule.ALWAYS)

    return table


PERMISSIONS = _build_permission_table()


@dataclass(frozen=True)
class Actor:
    """The authenticated user performing a request."""

    id: int
    role: UserRole
    email: str = ""
    name: str = ""

    @classmethod
    def from_user(cls, user):
        return cls(id=user.id, role=user.role, email=user.email, name=user.full_name)

    @property
    def is_privileged(self) -> bool:
        return self.role in PRIVILEGED_ROLES


def _resolve(resource):
    """Split ``resource`` into (kind, instance).

    ``resource`` is either a model instance or a ResourceKind for collection
    level operations such as create.
    """
    if isinstance(resource, ResourceKind):
        return resource, None

    from src.models import Team, Department, Holiday, User

    for model, kind in (
        (Team, ResourceKind.TEAM),
        (Department, ResourceKind.DEPARTMENT),
        (Holiday, ResourceKind.HOLIDAY),
        (User, ResourceKind.USER),
    ):
        if isinstance(resource, model):
            return kind, resource

    raise TypeError(f"Unsupported resource for access control: {type(resource).__name__}")


def rule_for(actor: Actor, kind: ResourceKind, operation: Operation) -> Optional[Rule]:
    """Return the permission rule for the actor's role, or None when denied."""
    return PERMISSIONS.get((actor.role, kind, operation))


def can_access(actor: Actor, resource, operation: Operation) -> bool:
    """Decide whether ``actor`` may perform ``operation`` on ``resource``."""
    kind, instance = _resolve(resource)
    rule = rule_for(actor, kind, operation)

    if rule is None:
        return False
    if rule is Rule.ALWAYS:
        return True
    if instance is None:
        # Ownership rules need a concrete team to compare against
        return False
    if rule is Rule.TEAM_MANAGER_OF:
        return instance.team_manager_id is not None and instance.team_manager_id == actor.id
    if rule is Rule.TEAM_LEADER_OF:
        return instance.team_leader_id is not None and instance.team_leader_id == actor.id
    return False


_DENIAL_MESSAGES = {
    (ResourceKind.TEAM, Operation.READ): "Access denied. You can only view teams you are assigned to.",
    (ResourceKind.TEAM, Operation.UPDATE): "Access denied. You can only edit teams assigned to you.",
    (ResourceKind.TEAM, Operation.MANAGE_MEMBERS): (
        "Access denied. You can only manage members of teams assigned to you."
    ),
}


def require_access(actor: Actor, resource, operation: Operation, message: Optional[str] = None):
    """Raise ForbiddenError unless ``actor`` may perform ``operation`` on ``resource``."""
    if can_access(actor, resource, operation):
        return

    kind, instance = _resolve(resource)
    logger.warning(
        f"Access denied: user={actor.id} role={actor.role.value} "
        f"operation={operation.value} {kind.value}={getattr(instance, 'id', None)}"
    )
    raise ForbiddenError(
        message
        or _DENIAL_MESSAGES.get((kind, operation))
        or f"Access denied. Your role cannot {operation.value.replace('_', ' ')} {kind.value}s."
    )


def check_team_update_fields(actor: Actor, fields) -> None:
    """Reject patch fields outside the Team Manager subset.

    Only applies to Team Managers; privileged roles may update every field.
    """
    if actor.role != UserRole.TEAM_MANAGER:
        return

    rejected = set(fields) - TEAM_MANAGER_EDITABLE_FIELDS
    if rejected:
        logger.warning(f"Team Manager {actor.id} attempted to update restricted fields: {sorted(rejected)}")
        raise ForbiddenError(
            "Team Managers can only update team description, max team size, and team leader.",
            details={"rejectedFields": sorted(rejected)},
        )


def drop_blank_restricted_fields(actor: Actor, patch: dict) -> dict:
    """Drop blank values a Team Manager sends for fields outside their subset."""
    if actor.role != UserRole.TEAM_MANAGER:
        return patch
    return {
        field: value
        for field, value in patch.items()
        if value is not None or field in TEAM_MANAGER_EDITABLE_FIELDS
    }
