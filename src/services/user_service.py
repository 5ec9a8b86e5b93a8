"""User directory: onboarding, role changes and deactivation."""

import logging
from typing import Optional

from sqlalchemy import func, or_

from src.models import Department, Team, User, UserRole
from src.services.access_control import PRIVILEGED_ROLES, Actor, Operation, ResourceKind, require_access
from src.services.errors import ConflictError, NotFoundError, ValidationError
from src.utils.pagination import paginate

logger = logging.getLogger(__name__)


class UserService:
    """Administrative user management for one database session.

    Users are never deleted, only deactivated; a deactivated user can no
    longer authenticate.
    """

    def __init__(self, session):
        self.session = session

    def list_users(
        self,
        actor: Actor,
        page: int = 1,
        limit: int = 10,
        search: Optional[str] = None,
        role: Optional[str] = None,
        department_id: Optional[int] = None,
        team_id: Optional[int] = None,
        is_active: Optional[bool] = None,
    ):
        require_access(actor, ResourceKind.USER, Operation.READ)

        query = self.session.query(User)

        if search:
            pattern = f"%{search.strip()}%"
            query = query.filter(
                or_(
                    User.first_name.ilike(pattern),
                    User.last_name.ilike(pattern),
                    User.email.ilike(pattern),
                    User.employee_id.ilike(pattern),
                )
            )
        if role:
            try:
                query = query.filter(User.role == UserRole.parse(role))
            except ValueError as e:
                raise ValidationError(str(e))
        if department_id is not None:
            query = query.filter(User.department_id == department_id)
        if team_id is not None:
            query = query.filter(User.team_id == team_id)
        if is_active is not None:
            query = query.filter(User.is_active == is_active)

        query = query.order_by(User.last_name.asc(), User.first_name.asc(), User.id.asc())
        return paginate(query, page, limit)

    def get_user(self, actor: Actor, user_id) -> User:
        user = self.session.get(User, user_id)
        if user is None:
            raise NotFoundError("User not found")
        require_access(actor, user, Operation.READ)
        return user

    def _check_department(self, department_id):
        if department_id is not None and self.session.get(Department, department_id) is None:
            raise ValidationError("Invalid department selected")

    def create_user(self, actor: Actor, request) -> User:
        require_access(actor, ResourceKind.USER, Operation.CREATE)

        if self.session.query(User).filter(func.lower(User.email) == request.email.lower()).first():
            raise ConflictError("A user with this email already exists")
        if self.session.query(User).filter(User.employee_id == request.employee_id).first():
            raise ConflictError("A user with this employee ID already exists")
        self._check_department(request.department_id)

        user = User(
            employee_id=request.employee_id,
            first_name=request.first_name,
            last_name=request.last_name,
            email=request.email,
            role=request.role,
            department_id=request.department_id,
            is_active=True,
        )
        self.session.add(user)
        self.session.flush()

        logger.info(f"User {user.email} ({user.id}) created with role {user.role.value} by user {actor.id}")
        return user

    def _assignments(self, user: User):
        """Teams ``user`` is currently assigned to as manager or leader."""
        managed = self.session.query(Team).filter(Team.team_manager_id == user.id).count()
        led = self.session.query(Team).filter(Team.team_leader_id == user.id).count()
        return managed, led

    def update_user(self, actor: Actor, user_id, request) -> User:
        user = self.session.get(User, user_id)
        if user is None:
            raise NotFoundError("User not found")
        require_access(actor, user, Operation.UPDATE)

        patch = request.provided_fields()

        new_email = patch.get("email")
        if new_email and new_email != user.email:
            duplicate = (
                self.session.query(User)
                .filter(func.lower(User.email) == new_email.lower(), User.id != user.id)
                .first()
            )
            if duplicate:
                raise ConflictError("A user with this email already exists")

        if "department_id" in patch:
            self._check_department(patch["department_id"])

        new_role = patch.get("role")
        if new_role is not None and new_role != user.role:
            managed, led = self._assignments(user)
            if managed and new_role != UserRole.TEAM_MANAGER:
                raise ConflictError(
                    f"User manages {managed} team(s). Reassign the team manager before changing this role."
                )
            if led and new_role != UserRole.TEAM_LEADER:
                raise ConflictError(
                    f"User leads {led} team(s). Reassign the team leader before changing this role."
                )

        for field in ("first_name", "last_name", "email", "role", "is_active"):
            if patch.get(field) is not None:
                setattr(user, field, patch[field])
        if "department_id" in patch:
            user.department_id = patch["department_id"]

        self.session.flush()

        if patch.get("is_active") is False:
            logger.info(f"User {user.id} deactivated by user {actor.id}")
        logger.info(f"User {user.id} updated by user {actor.id}: {sorted(patch)}")
        return user

    @staticmethod
    def roles():
        """Role catalogue for the dashboard's dropdowns."""
        return [
            {"value": role.value, "name": role.name, "privileged": role in PRIVILEGED_ROLES}
            for role in UserRole
        ]
