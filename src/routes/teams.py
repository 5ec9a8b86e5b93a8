"""Team management API endpoints."""

from flask import Blueprint, request
from pydantic import ValidationError as RequestValidationError
import logging

from src.models.validators import (
    AddMemberRequest,
    PaginationParams,
    TeamCreateRequest,
    TeamUpdateRequest,
)
from src.services.auth import auth_required
from src.services.errors import DomainError
from src.services.team_roster import TeamRosterService
from src.utils.database import session_scope
from src.utils.request_args import bool_arg, int_arg
from src.utils.responses import internal_error_response, success_response

logger = logging.getLogger(__name__)

# Create blueprint
teams_bp = Blueprint("teams", __name__, url_prefix="/api/teams")


@teams_bp.route("", methods=["GET"])
@auth_required
def list_teams(actor):
    """List the teams visible to the current user.

    Query params: page, limit, search, department, isActive
    """
    try:
        params = PaginationParams.model_validate(
            {"page": request.args.get("page", 1), "limit": request.args.get("limit", 10)}
        )
        with session_scope() as db_session:
            teams, pagination = TeamRosterService(db_session).list_teams(
                actor,
                page=params.page,
                limit=params.limit,
                search=request.args.get("search"),
                department_id=int_arg(request.args, "department"),
                is_active=bool_arg(request.args, "isActive"),
            )
            return success_response(teams=[team.to_dict() for team in teams], pagination=pagination)
    except (DomainError, RequestValidationError):
        raise
    except Exception as e:
        return internal_error_response("fetch teams", e)


@teams_bp.route("/my-teams", methods=["GET"])
@auth_required
def my_managed_teams(actor):
    """Teams managed by the current Team Manager."""
    try:
        with session_scope() as db_session:
            teams = TeamRosterService(db_session).my_managed_teams(actor)
            return success_response(teams=[team.to_dict() for team in teams])
    except DomainError:
        raise
    except Exception as e:
        return internal_error_response("fetch managed teams", e)


@teams_bp.route("/my-team", methods=["GET"])
@auth_required
def my_team(actor):
    """The team led by the current Team Leader."""
    try:
        with session_scope() as db_session:
            team = TeamRosterService(db_session).my_team(actor)
            return success_response(team=team.to_dict())
    except DomainError:
        raise
    except Exception as e:
        return internal_error_response("fetch your team", e)


@teams_bp.route("/<int:team_id>", methods=["GET"])
@auth_required
def get_team(actor, team_id):
    try:
        with session_scope() as db_session:
            team = TeamRosterService(db_session).get_team(actor, team_id)
            return success_response(team=team.to_dict())
    except DomainError:
        raise
    except Exception as e:
        return internal_error_response("fetch team", e)


@teams_bp.route("", methods=["POST"])
@auth_required
def create_team(actor):
    """Create a team.

    Body: {name, code, description?, department, teamManager?, teamLeader?, maxSize?}
    """
    try:
        payload = TeamCreateRequest.model_validate(request.get_json(silent=True) or {})
        with session_scope() as db_session:
            team = TeamRosterService(db_session).create_team(actor, payload)
            return success_response("Team created successfully", 201, team=team.to_dict())
    except (DomainError, RequestValidationError):
        raise
    except Exception as e:
        return internal_error_response("create team", e)


@teams_bp.route("/<int:team_id>", methods=["PUT"])
@auth_required
def update_team(actor, team_id):
    """Update a team. Team Managers may only send description, maxSize and teamLeader."""
    try:
        payload = TeamUpdateRequest.model_validate(request.get_json(silent=True) or {})
        with session_scope() as db_session:
            team = TeamRosterService(db_session).update_team(actor, team_id, payload)
            return success_response("Team updated successfully", team=team.to_dict())
    except (DomainError, RequestValidationError):
        raise
    except Exception as e:
        return internal_error_response("update team", e)


@teams_bp.route("/<int:team_id>", methods=["DELETE"])
@auth_required
def delete_team(actor, team_id):
    try:
        with session_scope() as db_session:
            TeamRosterService(db_session).delete_team(actor, team_id)
        return success_response("Team deleted successfully")
    except DomainError:
        raise
    except Exception as e:
        return internal_error_response("delete team", e)


@teams_bp.route("/<int:team_id>/members", methods=["POST"])
@auth_required
def add_team_member(actor, team_id):
    """Add a member. Body: {userId, role?}"""
    try:
        payload = AddMemberRequest.model_validate(request.get_json(silent=True) or {})
        with session_scope() as db_session:
            team = TeamRosterService(db_session).add_member(actor, team_id, payload.user_id, payload.role)
            return success_response("Member added to team successfully", team=team.to_dict())
    except (DomainError, RequestValidationError):
        raise
    except Exception as e:
        return internal_error_response("add team member", e)


@teams_bp.route("/<int:team_id>/members/<int:user_id>", methods=["DELETE"])
@auth_required
def remove_team_member(actor, team_id, user_id):
    try:
        with session_scope() as db_session:
            team = TeamRosterService(db_session).remove_member(actor, team_id, user_id)
            return success_response("Member removed from team successfully", team=team.to_dict())
    except DomainError:
        raise
    except Exception as e:
        return internal_error_response("remove team member", e)
