"""Tests for the team API endpoints."""

import pytest

from src.models import Team, TeamMember, User


@pytest.fixture
def alpha(make_team, manager_user, leader_user):
    return make_team(name="Alpha", code="A1", max_size=2, manager=manager_user, leader=leader_user)


class TestListAndGet:
    def test_requires_authentication(self, client):
        response = client.get("/api/teams")

        assert response.status_code == 401
        assert response.get_json()["success"] is False

    def test_rejects_malformed_header(self, client):
        response = client.get("/api/teams", headers={"Authorization": "Token abc"})
        assert response.status_code == 401

    def test_rejects_bad_token(self, client):
        response = client.get("/api/teams", headers={"Authorization": "Bearer not-a-jwt"})

        assert response.status_code == 401
        assert response.get_json()["message"] == "Invalid token"

    def test_rejects_deactivated_user(self, client, make_user, auth_headers):
        inactive = make_user(is_active=False)

        response = client.get("/api/teams", headers=auth_headers(inactive))
        assert response.status_code == 401

    def test_accepts_cookie_token(self, client, admin_user, auth_token, alpha):
        client.set_cookie("auth_token", auth_token(admin_user))
        response = client.get("/api/teams")

        assert response.status_code == 200

    def test_list_envelope(self, client, admin_user, auth_headers, alpha):
        response = client.get("/api/teams?limit=5", headers=auth_headers(admin_user))

        assert response.status_code == 200
        data = response.get_json()
        assert data["success"] is True
        assert data["pagination"] == {
            "currentPage": 1,
            "totalPages": 1,
            "totalCount": 1,
            "hasNext": False,
            "hasPrev": False,
        }
        team = data["teams"][0]
        assert team["name"] == "Alpha"
        assert team["maxSize"] == 2
        assert team["currentSize"] == 0
        assert team["department"]["code"] == "ENG"
        assert team["teamManager"]["firstName"] == "Manny"
        assert team["members"] == []

    def test_employee_sees_empty_page(self, client, employee_user, auth_headers, alpha):
        response = client.get("/api/teams", headers=auth_headers(employee_user))

        assert response.status_code == 200
        assert response.get_json()["teams"] == []

    def test_get_missing_team_is_404_even_for_employee(self, client, employee_user, auth_headers):
        response = client.get("/api/teams/999", headers=auth_headers(employee_user))

        assert response.status_code == 404
        assert response.get_json()["message"] == "Team not found"

    def test_get_forbidden(self, client, employee_user, auth_headers, alpha):
        response = client.get(f"/api/teams/{alpha.id}", headers=auth_headers(employee_user))
        assert response.status_code == 403

    def test_leader_reads_own_team(self, client, leader_user, auth_headers, alpha):
        response = client.get(f"/api/teams/{alpha.id}", headers=auth_headers(leader_user))

        assert response.status_code == 200
        assert response.get_json()["team"]["code"] == "A1"

    def test_my_teams_and_my_team(self, client, manager_user, leader_user, auth_headers, alpha):
        managed = client.get("/api/teams/my-teams", headers=auth_headers(manager_user))
        assert [t["code"] for t in managed.get_json()["teams"]] == ["A1"]

        led = client.get("/api/teams/my-team", headers=auth_headers(leader_user))
        assert led.get_json()["team"]["id"] == alpha.id

        wrong_role = client.get("/api/teams/my-team", headers=auth_headers(manager_user))
        assert wrong_role.status_code == 403


class TestCreate:
    def test_create(self, client, hr_user, auth_headers, department, manager_user):
        response = client.post(
            "/api/teams",
            json={
                "name": "Payments",
                "code": "pay",
                "description": "Money movers",
                "department": department.id,
                "teamManager": manager_user.id,
                "teamLeader": "",
                "maxSize": 5,
            },
            headers=auth_headers(hr_user),
        )

        assert response.status_code == 201
        data = response.get_json()
        assert data["message"] == "Team created successfully"
        assert data["team"]["code"] == "PAY"
        assert data["team"]["teamLeader"] is None
        assert data["team"]["createdBy"] == hr_user.id

    def test_validation_errors_list_fields(self, client, admin_user, auth_headers):
        response = client.post("/api/teams", json={"code": "X"}, headers=auth_headers(admin_user))

        assert response.status_code == 400
        data = response.get_json()
        assert data["message"] == "Validation failed"
        fields = {e["field"] for e in data["errors"]}
        assert {"name", "department"} <= fields

    def test_max_size_limit(self, client, admin_user, auth_headers, department):
        response = client.post(
            "/api/teams",
            json={"name": "Huge", "code": "HUGE", "department": department.id, "maxSize": 51},
            headers=auth_headers(admin_user),
        )
        assert response.status_code == 400

    def test_duplicate_is_400(self, client, admin_user, auth_headers, alpha, department):
        response = client.post(
            "/api/teams",
            json={"name": "alpha", "code": "Z9", "department": department.id},
            headers=auth_headers(admin_user),
        )

        assert response.status_code == 400
        assert "already exists" in response.get_json()["message"]

    def test_team_manager_cannot_create(self, client, manager_user, auth_headers, department):
        response = client.post(
            "/api/teams",
            json={"name": "Mine", "code": "MINE", "department": department.id},
            headers=auth_headers(manager_user),
        )
        assert response.status_code == 403


class TestUpdate:
    def test_manager_updates_allowed_fields(self, client, manager_user, auth_headers, alpha):
        response = client.put(
            f"/api/teams/{alpha.id}",
            json={"description": "Checkout squad", "maxSize": 4},
            headers=auth_headers(manager_user),
        )

        assert response.status_code == 200
        team = response.get_json()["team"]
        assert team["description"] == "Checkout squad"
        assert team["maxSize"] == 4

    def test_manager_rename_is_forbidden(self, client, manager_user, auth_headers, alpha, db_session):
        response = client.put(
            f"/api/teams/{alpha.id}",
            json={"name": "Renamed", "description": "x"},
            headers=auth_headers(manager_user),
        )

        assert response.status_code == 403
        assert response.get_json()["details"] == {"rejectedFields": ["name"]}
        db_session.expire_all()
        assert db_session.get(Team, alpha.id).name == "Alpha"

    def test_manager_form_with_blank_dropdown(self, client, manager_user, auth_headers, alpha, db_session):
        response = client.put(
            f"/api/teams/{alpha.id}",
            json={"description": "Checkout squad", "teamManager": ""},
            headers=auth_headers(manager_user),
        )

        assert response.status_code == 200
        assert response.get_json()["team"]["teamManager"]["id"] == manager_user.id
        db_session.expire_all()
        assert db_session.get(Team, alpha.id).team_manager_id == manager_user.id

    def test_update_missing_team(self, client, admin_user, auth_headers):
        response = client.put("/api/teams/999", json={"description": "x"}, headers=auth_headers(admin_user))
        assert response.status_code == 404


class TestMembers:
    def test_add_until_full(self, client, manager_user, auth_headers, alpha, make_user, db_session):
        u1, u2, u3 = make_user(), make_user(), make_user()
        headers = auth_headers(manager_user)

        for user in (u1, u2):
            response = client.post(f"/api/teams/{alpha.id}/members", json={"userId": user.id}, headers=headers)
            assert response.status_code == 200

        response = client.post(f"/api/teams/{alpha.id}/members", json={"userId": u3.id}, headers=headers)
        assert response.status_code == 400
        assert response.get_json()["message"] == "Team is at maximum capacity"

        db_session.expire_all()
        team = db_session.get(Team, alpha.id)
        assert team.member_count == 2
        assert sorted(m.user_id for m in team.members) == sorted([u1.id, u2.id])
        assert db_session.get(User, u3.id).team_id is None

    def test_add_member_payload(self, client, admin_user, auth_headers, alpha, employee_user):
        response = client.post(
            f"/api/teams/{alpha.id}/members",
            json={"userId": employee_user.id, "role": "QA"},
            headers=auth_headers(admin_user),
        )

        data = response.get_json()
        assert data["message"] == "Member added to team successfully"
        member = data["team"]["members"][0]
        assert member["user"]["id"] == employee_user.id
        assert member["role"] == "QA"
        assert data["team"]["currentSize"] == 1

    def test_add_unknown_user(self, client, admin_user, auth_headers, alpha):
        response = client.post(f"/api/teams/{alpha.id}/members", json={"userId": 999}, headers=auth_headers(admin_user))
        assert response.status_code == 400

    def test_leader_cannot_manage_members(self, client, leader_user, auth_headers, alpha, employee_user):
        response = client.post(
            f"/api/teams/{alpha.id}/members", json={"userId": employee_user.id}, headers=auth_headers(leader_user)
        )
        assert response.status_code == 403

    def test_remove_member(self, client, admin_user, auth_headers, alpha, employee_user, db_session):
        headers = auth_headers(admin_user)
        client.post(f"/api/teams/{alpha.id}/members", json={"userId": employee_user.id}, headers=headers)

        response = client.delete(f"/api/teams/{alpha.id}/members/{employee_user.id}", headers=headers)

        assert response.status_code == 200
        assert response.get_json()["team"]["members"] == []
        db_session.expire_all()
        assert db_session.query(TeamMember).count() == 0

    def test_remove_absent_member_is_404(self, client, admin_user, auth_headers, alpha, employee_user):
        response = client.delete(f"/api/teams/{alpha.id}/members/{employee_user.id}", headers=auth_headers(admin_user))

        assert response.status_code == 404
        assert response.get_json()["message"] == "User is not a member of this team"


class TestDelete:
    def test_delete_with_members_is_400(self, client, admin_user, auth_headers, alpha, employee_user):
        headers = auth_headers(admin_user)
        client.post(f"/api/teams/{alpha.id}/members", json={"userId": employee_user.id}, headers=headers)

        response = client.delete(f"/api/teams/{alpha.id}", headers=headers)
        assert response.status_code == 400

    def test_delete_empty_team(self, client, admin_user, auth_headers, alpha):
        headers = auth_headers(admin_user)

        response = client.delete(f"/api/teams/{alpha.id}", headers=headers)
        assert response.status_code == 200
        assert response.get_json() == {"success": True, "message": "Team deleted successfully"}

        assert client.get(f"/api/teams/{alpha.id}", headers=headers).status_code == 404

    def test_manager_cannot_delete(self, client, manager_user, auth_headers, alpha):
        response = client.delete(f"/api/teams/{alpha.id}", headers=auth_headers(manager_user))
        assert response.status_code == 403
