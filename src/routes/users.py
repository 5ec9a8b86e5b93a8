"""User directory API endpoints (HR and leadership only)."""

from flask import Blueprint, request
from pydantic import ValidationError as RequestValidationError
import logging

from src.models.validators import PaginationParams, UserCreateRequest, UserUpdateRequest
from src.services.auth import auth_required, privileged_required
from src.services.errors import DomainError
from src.services.user_service import UserService
from src.utils.database import session_scope
from src.utils.request_args import bool_arg, int_arg
from src.utils.responses import internal_error_response, success_response

logger = logging.getLogger(__name__)

users_bp = Blueprint("users", __name__, url_prefix="/api/users")


@users_bp.route("", methods=["GET"])
@auth_required
def list_users(actor):
    """List users.

    Query params: page, limit, search, role, department, team, isActive
    """
    try:
        params = PaginationParams.model_validate(
            {"page": request.args.get("page", 1), "limit": request.args.get("limit", 10)}
        )
        with session_scope() as db_session:
            users, pagination = UserService(db_session).list_users(
                actor,
                page=params.page,
                limit=params.limit,
                search=request.args.get("search"),
                role=request.args.get("role"),
                department_id=int_arg(request.args, "department"),
                team_id=int_arg(request.args, "team"),
                is_active=bool_arg(request.args, "isActive"),
            )
            return success_response(users=[u.to_dict() for u in users], pagination=pagination)
    except (DomainError, RequestValidationError):
        raise
    except Exception as e:
        return internal_error_response("fetch users", e)


@users_bp.route("/roles", methods=["GET"])
@privileged_required
def list_roles(actor):
    return success_response(roles=UserService.roles())


@users_bp.route("/<int:user_id>", methods=["GET"])
@auth_required
def get_user(actor, user_id):
    try:
        with session_scope() as db_session:
            user = UserService(db_session).get_user(actor, user_id)
            return success_response(user=user.to_dict())
    except DomainError:
        raise
    except Exception as e:
        return internal_error_response("fetch user", e)


@users_bp.route("", methods=["POST"])
@privileged_required
def create_user(actor):
    """Onboard a user. Body: {employeeId, firstName, lastName, email, role?, department?}"""
    try:
        data = UserCreateRequest.model_validate(request.get_json(silent=True) or {})
        with session_scope() as db_session:
            user = UserService(db_session).create_user(actor, data)
            return success_response("User created successfully", 201, user=user.to_dict())
    except (DomainError, RequestValidationError):
        raise
    except Exception as e:
        return internal_error_response("create user", e)


@users_bp.route("/<int:user_id>", methods=["PUT"])
@auth_required
def update_user(actor, user_id):
    """Update a user; send isActive=false to deactivate."""
    try:
        data = UserUpdateRequest.model_validate(request.get_json(silent=True) or {})
        with session_scope() as db_session:
            user = UserService(db_session).update_user(actor, user_id, data)
            return success_response("User updated successfully", user=user.to_dict())
    except (DomainError, RequestValidationError):
        raise
    except Exception as e:
        return internal_error_response("update user", e)
