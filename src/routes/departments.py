"""Department API endpoints."""

from flask import Blueprint, request
from pydantic import ValidationError as RequestValidationError
import logging

from src.models.validators import DepartmentCreateRequest, DepartmentUpdateRequest, PaginationParams
from src.services.access_control import Operation, ResourceKind, require_access
from src.services.auth import auth_required
from src.services.department_service import DepartmentService
from src.services.errors import DomainError
from src.utils.database import session_scope
from src.utils.request_args import bool_arg
from src.utils.responses import internal_error_response, success_response

logger = logging.getLogger(__name__)

departments_bp = Blueprint("departments", __name__, url_prefix="/api/departments")


@departments_bp.route("", methods=["GET"])
@auth_required
def list_departments(actor):
    try:
        require_access(actor, ResourceKind.DEPARTMENT, Operation.READ)
        params = PaginationParams.model_validate(
            {"page": request.args.get("page", 1), "limit": request.args.get("limit", 10)}
        )
        with session_scope() as db_session:
            service = DepartmentService(db_session)
            departments, pagination = service.list_departments(
                page=params.page,
                limit=params.limit,
                search=request.args.get("search"),
                is_active=bool_arg(request.args, "isActive"),
            )
            counts = service.team_counts([d.id for d in departments])
            return success_response(
                departments=[d.to_dict(team_count=counts.get(d.id, 0)) for d in departments],
                pagination=pagination,
            )
    except (DomainError, RequestValidationError):
        raise
    except Exception as e:
        return internal_error_response("fetch departments", e)


@departments_bp.route("/<int:department_id>", methods=["GET"])
@auth_required
def get_department(actor, department_id):
    try:
        with session_scope() as db_session:
            service = DepartmentService(db_session)
            department = service.get_department(department_id)
            require_access(actor, department, Operation.READ)
            count = service.team_counts([department.id])[department.id]
            return success_response(department=department.to_dict(team_count=count))
    except DomainError:
        raise
    except Exception as e:
        return internal_error_response("fetch department", e)


@departments_bp.route("", methods=["POST"])
@auth_required
def create_department(actor):
    """Create a department. Body: {name, code, description?}"""
    try:
        require_access(actor, ResourceKind.DEPARTMENT, Operation.CREATE)
        data = DepartmentCreateRequest.model_validate(request.get_json(silent=True) or {})
        with session_scope() as db_session:
            department = DepartmentService(db_session).create_department(actor, data)
            return success_response("Department created successfully", 201, department=department.to_dict())
    except (DomainError, RequestValidationError):
        raise
    except Exception as e:
        return internal_error_response("create department", e)


@departments_bp.route("/<int:department_id>", methods=["PUT"])
@auth_required
def update_department(actor, department_id):
    try:
        data = DepartmentUpdateRequest.model_validate(request.get_json(silent=True) or {})
        with session_scope() as db_session:
            department = DepartmentService(db_session).update_department(actor, department_id, data)
            return success_response("Department updated successfully", department=department.to_dict())
    except (DomainError, RequestValidationError):
        raise
    except Exception as e:
        return internal_error_response("update department", e)


@departments_bp.route("/<int:department_id>", methods=["DELETE"])
@auth_required
def delete_department(actor, department_id):
    try:
        with session_scope() as db_session:
            DepartmentService(db_session).delete_department(actor, department_id)
        return success_response("Department deleted successfully")
    except DomainError:
        raise
    except Exception as e:
        return internal_error_response("delete department", e)
