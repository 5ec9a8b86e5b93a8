"""Tests for the department and user directory services."""

import pytest

from src.models import Department, User, UserRole
from src.models.validators import (
    DepartmentCreateRequest,
    DepartmentUpdateRequest,
    UserCreateRequest,
    UserUpdateRequest,
)
from src.services.access_control import Actor
from src.services.department_service import DepartmentService
from src.services.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from src.services.user_service import UserService


@pytest.fixture
def departments(db_session):
    return DepartmentService(db_session)


@pytest.fixture
def users(db_session):
    return UserService(db_session)


class TestDepartments:
    def test_create_upper_cases_code(self, departments, admin):
        dept = departments.create_department(admin, DepartmentCreateRequest(name="Finance", code="fin"))
        assert dept.code == "FIN"
        assert dept.created_by == admin.id

    def test_name_unique_case_insensitive(self, departments, admin, department):
        with pytest.raises(ConflictError, match="name already exists"):
            departments.create_department(admin, DepartmentCreateRequest(name="engineering", code="EN2"))

    def test_code_unique(self, departments, admin, department):
        with pytest.raises(ConflictError, match="code already exists"):
            departments.create_department(admin, DepartmentCreateRequest(name="Platform", code="eng"))

    def test_update_rename_collision(self, departments, admin, department, other_department):
        with pytest.raises(ConflictError):
            departments.update_department(admin, other_department.id, DepartmentUpdateRequest(name="Engineering"))

    def test_update_fields(self, departments, admin, department):
        updated = departments.update_department(
            admin, department.id, DepartmentUpdateRequest(description=None, isActive=False)
        )
        assert updated.description is None
        assert updated.is_active is False
        assert updated.name == "Engineering"

    def test_cannot_delete_department_with_teams(self, departments, admin, department, make_team):
        make_team()

        with pytest.raises(ConflictError, match="1 team"):
            departments.delete_department(admin, department.id)

    def test_delete_unassigns_users(self, departments, admin, department, make_user, db_session):
        user = make_user(department=department)

        departments.delete_department(admin, department.id)
        db_session.commit()
        db_session.expire_all()

        assert db_session.get(Department, department.id) is None
        assert db_session.get(User, user.id).department_id is None

    def test_list_with_team_counts(self, departments, department, other_department, make_team):
        make_team()
        items, pagination = departments.list_departments(search="e")

        assert [d.code for d in items] == ["ENG", "OPS"]
        assert departments.team_counts([d.id for d in items]) == {department.id: 1, other_department.id: 0}
        assert pagination["totalCount"] == 2

    def test_employee_cannot_create(self, departments, employee_user):
        with pytest.raises(ForbiddenError):
            departments.create_department(
                Actor.from_user(employee_user), DepartmentCreateRequest(name="Finance", code="FIN")
            )

    def test_missing(self, departments):
        with pytest.raises(NotFoundError):
            departments.get_department(404)


class TestUsers:
    def new_user(self, **overrides):
        data = {
            "employeeId": "EMP9000",
            "firstName": "Priya",
            "lastName": "Shah",
            "email": "Priya.Shah@Example.com",
            "role": "HR BP",
        }
        data.update(overrides)
        return UserCreateRequest.model_validate(data)

    def test_create(self, users, admin, department):
        user = users.create_user(admin, self.new_user(department=department.id))

        assert user.email == "priya.shah@example.com"
        assert user.role is UserRole.HR_BP
        assert user.department_id == department.id
        assert user.is_active is True

    def test_role_accepts_member_names(self):
        assert self.new_user(role="TEAM_LEADER").role is UserRole.TEAM_LEADER

    def test_duplicate_email(self, users, admin):
        users.create_user(admin, self.new_user())

        with pytest.raises(ConflictError, match="email already exists"):
            users.create_user(admin, self.new_user(employeeId="EMP9001"))

    def test_duplicate_employee_id(self, users, admin):
        users.create_user(admin, self.new_user())

        with pytest.raises(ConflictError, match="employee ID already exists"):
            users.create_user(admin, self.new_user(email="other@example.com"))

    def test_unknown_department(self, users, admin):
        with pytest.raises(ValidationError, match="Invalid department"):
            users.create_user(admin, self.new_user(department=404))

    def test_team_manager_cannot_manage_users(self, users, manager_user, employee_user):
        with pytest.raises(ForbiddenError):
            users.get_user(Actor.from_user(manager_user), employee_user.id)

    def test_demoting_assigned_manager_conflicts(self, users, admin, make_team, manager_user):
        make_team(manager=manager_user)

        with pytest.raises(ConflictError, match="manages 1 team"):
            users.update_user(admin, manager_user.id, UserUpdateRequest(role="Employee"))

    def test_demoting_assigned_leader_conflicts(self, users, admin, make_team, leader_user):
        make_team(leader=leader_user)

        with pytest.raises(ConflictError, match="leads 1 team"):
            users.update_user(admin, leader_user.id, UserUpdateRequest(role="Team Manager"))

    def test_promoting_unassigned_user(self, users, admin, employee_user):
        updated = users.update_user(admin, employee_user.id, UserUpdateRequest(role="Team Leader"))
        assert updated.role is UserRole.TEAM_LEADER

    def test_deactivate(self, users, admin, employee_user):
        updated = users.update_user(admin, employee_user.id, UserUpdateRequest(isActive=False))
        assert updated.is_active is False

    def test_list_filters(self, users, admin, make_user, department):
        make_user(UserRole.TEAM_LEADER, first_name="Zed", department=department)
        make_user(UserRole.EMPLOYEE, first_name="Yan", is_active=False)

        leaders, _ = users.list_users(admin, role="Team Leader")
        assert [u.first_name for u in leaders] == ["Zed"]

        inactive, _ = users.list_users(admin, is_active=False)
        assert [u.first_name for u in inactive] == ["Yan"]

        in_department, _ = users.list_users(admin, department_id=department.id)
        assert [u.first_name for u in in_department] == ["Zed"]

        found, _ = users.list_users(admin, search="zed")
        assert len(found) == 1

    def test_roles_catalogue(self):
        roles = UserService.roles()
        assert [r["value"] for r in roles][:2] == ["Admin", "Vice President"]
        assert {r["value"] for r in roles if not r["privileged"]} == {"Team Manager", "Team Leader", "Employee"}
