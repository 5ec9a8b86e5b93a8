"""Team roster management.

TeamRosterService owns the Team aggregate: the team row and its membership
records. Every check runs before any mutation, and every roster change also
rewrites the team row so the optimistic version check on Team catches a
concurrent writer.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm.exc import StaleDataError

from config.settings import settings
from src.models import Department, Team, TeamMember, User, UserRole
from src.services.access_control import (
    Actor,
    Operation,
    ResourceKind,
    check_team_update_fields,
    drop_blank_restricted_fields,
    require_access,
)
from src.services.errors import (
    CapacityError,
    ConflictError,
    ForbiddenError,
    MembershipNotFoundError,
    NotFoundError,
    ValidationError,
)
from src.utils.pagination import paginate

logger = logging.getLogger(__name__)

CONCURRENT_MODIFICATION_MESSAGE = "Team was modified concurrently, please retry"


class TeamRosterService:
    """Team CRUD and membership lifecycle for one database session."""

    def __init__(self, session):
        self.session = session

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def _scoped_query(self, actor: Actor):
        query = self.session.query(Team)

        if actor.is_privileged:
            return query
        if actor.role == UserRole.TEAM_MANAGER:
            return query.filter(Team.team_manager_id == actor.id)
        if actor.role == UserRole.TEAM_LEADER:
            return query.filter(Team.team_leader_id == actor.id)
        return None

    def list_teams(
        self,
        actor: Actor,
        page: int = 1,
        limit: int = 10,
        search: Optional[str] = None,
        department_id: Optional[int] = None,
        is_active: Optional[bool] = None,
    ):
        """Return (teams, pagination) visible to ``actor``, newest first."""
        query = self._scoped_query(actor)
        if query is None:
            return [], {
                "currentPage": max(int(page), 1),
                "totalPages": 0,
                "totalCount": 0,
                "hasNext": False,
                "hasPrev": max(int(page), 1) > 1,
            }

        if search:
            pattern = f"%{search.strip()}%"
            query = query.filter(
                or_(
                    Team.name.ilike(pattern),
                    Team.code.ilike(pattern),
                    Team.description.ilike(pattern),
                )
            )
        if department_id is not None:
            query = query.filter(Team.department_id == department_id)
        if is_active is not None:
            query = query.filter(Team.is_active == is_active)

        query = query.order_by(Team.created_at.desc(), Team.id.desc())
        return paginate(query, page, limit)

    def _load_team(self, team_id) -> Team:
        team = self.session.get(Team, team_id)
        if team is None:
            raise NotFoundError("Team not found")
        return team

    def get_team(self, actor: Actor, team_id) -> Team:
        team = self._load_team(team_id)
        require_access(actor, team, Operation.READ)
        return team

    def my_managed_teams(self, actor: Actor):
        if actor.role != UserRole.TEAM_MANAGER:
            raise ForbiddenError("Access denied. This endpoint is only for Team Managers.")

        return (
            self.session.query(Team)
            .filter(Team.team_manager_id == actor.id)
            .order_by(Team.created_at.desc(), Team.id.desc())
            .all()
        )

    def my_team(self, actor: Actor) -> Team:
        if actor.role != UserRole.TEAM_LEADER:
            raise ForbiddenError("Access denied. This endpoint is only for Team Leaders.")

        team = (
            self.session.query(Team)
            .filter(Team.team_leader_id == actor.id)
            .order_by(Team.id)
            .first()
        )
        if team is None:
            raise NotFoundError("No team assigned to you as Team Leader")
        return team

    # ------------------------------------------------------------------
    # Validation helpers
    # ------------------------------------------------------------------

    def _find_duplicate(self, department_id, name=None, code=None, exclude_id=None):
        """Return "name" or "code" when another team in the department uses it."""
        query = self.session.query(Team).filter(Team.department_id == department_id)
        if exclude_id is not None:
            query = query.filter(Team.id != exclude_id)

        if name is not None and query.filter(func.lower(Team.name) == name.lower()).first():
            return "name"
        if code is not None and query.filter(Team.code == code.upper()).first():
            return "code"
        return None

    def _validate_assignee(self, user_id, role: UserRole, label: str):
        """Check ``user_id`` resolves to an active user holding ``role``."""
        if user_id is None:
            return None

        user = self.session.get(User, user_id)
        if user is None or user.role != role or not user.is_active:
            raise ValidationError(f"Invalid {label} selected. User must have {role.value} role.")
        return user

    def _flush(self, action: str, team: Team):
        """Flush pending changes, translating version and constraint conflicts."""
        try:
            self.session.flush()
        except StaleDataError:
            self.session.rollback()
            logger.warning(f"Concurrent modification detected while trying to {action} team {team.id}")
            raise ConflictError(CONCURRENT_MODIFICATION_MESSAGE)
        except IntegrityError as e:
            self.session.rollback()
            logger.warning(f"Integrity conflict while trying to {action} team: {e.orig}")
            raise ConflictError(f"Could not {action} team: conflicting record exists")

    # ------------------------------------------------------------------
    # Team lifecycle
    # ------------------------------------------------------------------

    def create_team(self, actor: Actor, request) -> Team:
        """Create a team with an empty roster from a TeamCreateRequest."""
        require_access(actor, ResourceKind.TEAM, Operation.CREATE)

        department = self.session.get(Department, request.department_id)
        if department is None:
            raise ValidationError("Invalid department selected")

        duplicate = self._find_duplicate(department.id, name=request.name, code=request.code)
        if duplicate:
            logger.warning(f"Rejected team creation: duplicate {duplicate} in department {department.id}")
            raise ConflictError(f"A team with this {duplicate} already exists in the selected department")

        self._validate_assignee(request.team_manager_id, UserRole.TEAM_MANAGER, "team manager")
        self._validate_assignee(request.team_leader_id, UserRole.TEAM_LEADER, "team leader")

        team = Team(
            name=request.name,
            code=request.code.upper(),
            description=request.description,
            department_id=department.id,
            team_manager_id=request.team_manager_id,
            team_leader_id=request.team_leader_id,
            max_size=request.max_size or settings.teams.default_max_size,
            member_count=0,
            is_active=True,
            created_by=actor.id,
        )
        self.session.add(team)
        self._flush("create", team)

        logger.info(f"Team {team.code} ({team.id}) created by user {actor.id}")
        return team

    def update_team(self, actor: Actor, team_id, request) -> Team:
        """Apply the fields present in a TeamUpdateRequest."""
        team = self._load_team(team_id)
        require_access(actor, team, Operation.UPDATE)

        patch = drop_blank_restricted_fields(actor, request.provided_fields())
        check_team_update_fields(actor, patch)

        if "name" in patch and patch["name"] and patch["name"].lower() != team.name.lower():
            if self._find_duplicate(team.department_id, name=patch["name"], exclude_id=team.id):
                raise ConflictError("A team with this name already exists in the department")

        if patch.get("team_manager_id") is not None:
            self._validate_assignee(patch["team_manager_id"], UserRole.TEAM_MANAGER, "team manager")
        if patch.get("team_leader_id") is not None:
            self._validate_assignee(patch["team_leader_id"], UserRole.TEAM_LEADER, "team leader")

        if patch.get("max_size") is not None and patch["max_size"] < team.member_count:
            raise ConflictError(
                f"Max size cannot be less than the current number of members ({team.member_count})"
            )

        for field in ("name", "description", "team_manager_id", "team_leader_id", "max_size", "is_active"):
            if field not in patch:
                continue
            value = patch[field]
            if field in ("name", "max_size", "is_active") and value is None:
                continue
            setattr(team, field, value)

        team.updated_by = actor.id
        self._flush("update", team)

        logger.info(f"Team {team.id} updated by user {actor.id}: {sorted(patch)}")
        return team

    def delete_team(self, actor: Actor, team_id) -> None:
        team = self._load_team(team_id)
        require_access(actor, team, Operation.DELETE)

        if team.members:
            raise ConflictError("Cannot delete team with existing members. Please remove all members first.")

        self.session.delete(team)
        self._flush("delete", team)
        logger.info(f"Team {team_id} deleted by user {actor.id}")

    # ------------------------------------------------------------------
    # Membership
    # ------------------------------------------------------------------

    def _assign_user_to_team(self, team: Team, user: User, role: str) -> TeamMember:
        """Append the membership record and point the user back at the team."""
        member = TeamMember(
            user_id=user.id,
            user=user,
            role=role,
            joined_date=datetime.now(timezone.utc),
        )
        team.members.append(member)
        team.member_count = len(team.members)
        user.team_id = team.id
        return member

    def _release_user_from_team(self, team: Team, member: TeamMember) -> None:
        """Drop the membership record and clear the user's back-reference."""
        team.members.remove(member)
        team.member_count = len(team.members)

        user = member.user or self.session.get(User, member.user_id)
        if user is not None and user.team_id == team.id:
            user.team_id = None

    def add_member(self, actor: Actor, team_id, user_id, role: Optional[str] = None) -> Team:
        team = self._load_team(team_id)
        require_access(actor, team, Operation.MANAGE_MEMBERS)

        user = self.session.get(User, user_id)
        if user is None:
            raise ValidationError("User not found")

        if team.find_member(user.id) is not None:
            raise ConflictError("User is already a member of this team")

        other_membership = (
            self.session.query(TeamMember)
            .filter(TeamMember.user_id == user.id, TeamMember.team_id != team.id)
            .first()
        )
        if other_membership is not None or (user.team_id is not None and user.team_id != team.id):
            logger.warning(f"User {user.id} already belongs to team {user.team_id}, cannot add to {team.id}")
            raise ConflictError("User is already a member of another team")

        if team.is_full:
            logger.warning(f"Team {team.id} is at capacity ({team.max_size}), rejected user {user.id}")
            raise CapacityError("Team is at maximum capacity")

        self._assign_user_to_team(team, user, role or settings.teams.default_member_role)
        team.updated_by = actor.id
        self._flush("add member to", team)

        logger.info(f"User {user.id} added to team {team.id} by user {actor.id} ({team.member_count}/{team.max_size})")
        return team

    def remove_member(self, actor: Actor, team_id, user_id) -> Team:
        team = self._load_team(team_id)
        require_access(actor, team, Operation.MANAGE_MEMBERS)

        member = team.find_member(user_id)
        if member is None:
            raise MembershipNotFoundError("User is not a member of this team")

        self._release_user_from_team(team, member)
        team.updated_by = actor.id
        self._flush("remove member from", team)

        logger.info(f"User {user_id} removed from team {team.id} by user {actor.id}")
        return team
