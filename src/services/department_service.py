"""Department directory."""

import logging
from typing import Optional

from sqlalchemy import func, or_

from src.models import Department, Team, User
from src.services.access_control import Actor, Operation, ResourceKind, require_access
from src.services.errors import ConflictError, NotFoundError
from src.utils.pagination import paginate

logger = logging.getLogger(__name__)


class DepartmentService:
    def __init__(self, session):
        self.session = session

    def team_counts(self, department_ids):
        """Map department id to the number of teams in it."""
        if not department_ids:
            return {}
        rows = (
            self.session.query(Team.department_id, func.count(Team.id))
            .filter(Team.department_id.in_(department_ids))
            .group_by(Team.department_id)
            .all()
        )
        counts = {department_id: 0 for department_id in department_ids}
        counts.update(dict(rows))
        return counts

    def list_departments(
        self,
        page: int = 1,
        limit: int = 10,
        search: Optional[str] = None,
        is_active: Optional[bool] = None,
    ):
        query = self.session.query(Department)

        if search:
            pattern = f"%{search.strip()}%"
            query = query.filter(or_(Department.name.ilike(pattern), Department.code.ilike(pattern)))
        if is_active is not None:
            query = query.filter(Department.is_active == is_active)

        return paginate(query.order_by(Department.name.asc()), page, limit)

    def get_department(self, department_id) -> Department:
        department = self.session.get(Department, department_id)
        if department is None:
            raise NotFoundError("Department not found")
        return department

    def _check_unique(self, name=None, code=None, exclude_id=None):
        query = self.session.query(Department)
        if exclude_id is not None:
            query = query.filter(Department.id != exclude_id)

        if name is not None and query.filter(func.lower(Department.name) == name.lower()).first():
            raise ConflictError("A department with this name already exists")
        if code is not None and query.filter(Department.code == code.upper()).first():
            raise ConflictError("A department with this code already exists")

    def create_department(self, actor: Actor, request) -> Department:
        require_access(actor, ResourceKind.DEPARTMENT, Operation.CREATE)
        self._check_unique(name=request.name, code=request.code)

        department = Department(
            name=request.name,
            code=request.code.upper(),
            description=request.description,
            is_active=True,
            created_by=actor.id,
        )
        self.session.add(department)
        self.session.flush()

        logger.info(f"Department {department.code} ({department.id}) created by user {actor.id}")
        return department

    def update_department(self, actor: Actor, department_id, request) -> Department:
        department = self.get_department(department_id)
        require_access(actor, department, Operation.UPDATE)

        patch = request.provided_fields()
        self._check_unique(name=patch.get("name"), code=patch.get("code"), exclude_id=department.id)

        for field in ("name", "code", "description", "is_active"):
            if field in patch and (patch[field] is not None or field == "description"):
                setattr(department, field, patch[field])

        self.session.flush()
        logger.info(f"Department {department.id} updated by user {actor.id}: {sorted(patch)}")
        return department

    def delete_department(self, actor: Actor, department_id) -> None:
        department = self.get_department(department_id)
        require_access(actor, department, Operation.DELETE)

        team_count = self.team_counts([department.id])[department.id]
        if team_count:
            raise ConflictError(
                f"Cannot delete department with {team_count} team(s). Reassign or delete its teams first."
            )

        # Members of the department simply become unassigned
        self.session.query(User).filter(User.department_id == department.id).update(
            {User.department_id: None}, synchronize_session=False
        )
        self.session.delete(department)
        self.session.flush()
        logger.info(f"Department {department_id} deleted by user {actor.id}")
