"""Holiday calendar API endpoints."""

from flask import Blueprint, request
from pydantic import ValidationError as RequestValidationError
import logging

from src.models.validators import (
    BulkHolidayRequest,
    HolidayCreateRequest,
    HolidayListParams,
    HolidayUpdateRequest,
    UpcomingHolidaysParams,
)
from src.services.access_control import Operation, ResourceKind, require_access
from src.services.auth import auth_required
from src.services.errors import DomainError, ValidationError
from src.services.holiday_service import REQUIRED_FIELDS_MESSAGE, HolidayService
from src.utils.database import session_scope
from src.utils.request_args import int_arg
from src.utils.responses import internal_error_response, success_response

logger = logging.getLogger(__name__)

holidays_bp = Blueprint("holidays", __name__, url_prefix="/api/holidays")


@holidays_bp.route("", methods=["GET"])
@auth_required
def list_holidays(actor):
    """List active holidays.

    Query params: year, month (with year), type, page, limit (default 50)
    """
    try:
        require_access(actor, ResourceKind.HOLIDAY, Operation.READ)
        params = HolidayListParams.model_validate(request.args.to_dict())
        with session_scope() as db_session:
            holidays, pagination = HolidayService(db_session).list_holidays(
                year=params.year,
                month=params.month,
                holiday_type=params.holiday_type,
                page=params.page,
                limit=params.limit,
            )
            return success_response(holidays=[h.to_dict() for h in holidays], pagination=pagination)
    except (DomainError, RequestValidationError):
        raise
    except Exception as e:
        return internal_error_response("fetch holidays", e)


@holidays_bp.route("/upcoming", methods=["GET"])
@auth_required
def upcoming_holidays(actor):
    try:
        require_access(actor, ResourceKind.HOLIDAY, Operation.READ)
        params = UpcomingHolidaysParams.model_validate(request.args.to_dict())
        with session_scope() as db_session:
            holidays = HolidayService(db_session).upcoming(params.limit)
            return success_response(holidays=[h.to_dict() for h in holidays])
    except (DomainError, RequestValidationError):
        raise
    except Exception as e:
        return internal_error_response("fetch upcoming holidays", e)


@holidays_bp.route("/stats", methods=["GET"])
@auth_required
def holiday_stats(actor):
    try:
        require_access(actor, ResourceKind.HOLIDAY, Operation.READ)
        with session_scope() as db_session:
            stats = HolidayService(db_session).stats(int_arg(request.args, "year"))
        return success_response(**stats)
    except DomainError:
        raise
    except Exception as e:
        return internal_error_response("fetch holiday statistics", e)


@holidays_bp.route("/<int:holiday_id>", methods=["GET"])
@auth_required
def get_holiday(actor, holiday_id):
    try:
        with session_scope() as db_session:
            holiday = HolidayService(db_session).get_holiday(holiday_id)
            require_access(actor, holiday, Operation.READ)
            return success_response(holiday=holiday.to_dict())
    except DomainError:
        raise
    except Exception as e:
        return internal_error_response("fetch holiday", e)


@holidays_bp.route("", methods=["POST"])
@auth_required
def create_holiday(actor):
    """Create a holiday. Body: {holidayName, date, holidayType, description?}"""
    try:
        require_access(actor, ResourceKind.HOLIDAY, Operation.CREATE)
        payload = request.get_json(silent=True) or {}
        required = ("holidayName", "date", "holidayType")
        if not isinstance(payload, dict) or not all(payload.get(key) for key in required):
            raise ValidationError(REQUIRED_FIELDS_MESSAGE)
        data = HolidayCreateRequest.model_validate(payload)
        with session_scope() as db_session:
            holiday = HolidayService(db_session).create_holiday(actor, data)
            return success_response("Holiday created successfully", 201, holiday=holiday.to_dict())
    except (DomainError, RequestValidationError):
        raise
    except Exception as e:
        return internal_error_response("create holiday", e)


@holidays_bp.route("/bulk", methods=["POST"])
@auth_required
def bulk_create_holidays(actor):
    """Create many holidays at once. Body: {holidays: [...]}

    Items are validated one by one; rejected items come back in ``errors``.
    """
    try:
        require_access(actor, ResourceKind.HOLIDAY, Operation.CREATE)
        payload = BulkHolidayRequest.model_validate(request.get_json(silent=True) or {})
        with session_scope() as db_session:
            created, errors = HolidayService(db_session).bulk_create(actor, payload.holidays)
            return success_response(
                f"Successfully created {len(created)} holidays",
                201,
                createdCount=len(created),
                errorCount=len(errors),
                createdHolidays=[h.to_dict() for h in created],
                errors=errors,
            )
    except (DomainError, RequestValidationError):
        raise
    except Exception as e:
        return internal_error_response("bulk create holidays", e)


@holidays_bp.route("/<int:holiday_id>", methods=["PUT"])
@auth_required
def update_holiday(actor, holiday_id):
    try:
        data = HolidayUpdateRequest.model_validate(request.get_json(silent=True) or {})
        with session_scope() as db_session:
            holiday = HolidayService(db_session).update_holiday(actor, holiday_id, data)
            return success_response("Holiday updated successfully", holiday=holiday.to_dict())
    except (DomainError, RequestValidationError):
        raise
    except Exception as e:
        return internal_error_response("update holiday", e)


@holidays_bp.route("/<int:holiday_id>", methods=["DELETE"])
@auth_required
def delete_holiday(actor, holiday_id):
    """Soft delete a holiday."""
    try:
        with session_scope() as db_session:
            HolidayService(db_session).delete_holiday(actor, holiday_id)
        return success_response("Holiday deleted successfully")
    except DomainError:
        raise
    except Exception as e:
        return internal_error_response("delete holiday", e)
