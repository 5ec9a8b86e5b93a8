"""Company holiday calendar.

At most one active holiday may exist per calendar date. Deletion is soft: the
row stays with ``is_active`` cleared and no longer blocks its date.
"""

import calendar
import logging
from datetime import date
from typing import Optional

from pydantic import ValidationError as RequestValidationError
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError

from src.models import Holiday, HolidayType
from src.models.validators import HolidayCreateRequest
from src.services.access_control import Actor, Operation, ResourceKind, require_access
from src.services.errors import ConflictError, NotFoundError, ValidationError
from src.utils.pagination import paginate

logger = logging.getLogger(__name__)

REQUIRED_FIELDS_MESSAGE = "Holiday name, date, and type are required"
BULK_CONFLICT_MESSAGE = "A holiday in this batch conflicts with an existing holiday, please retry"


class HolidayService:
    """Holiday CRUD, bulk import and statistics for one database session."""

    def __init__(self, session):
        self.session = session

    def _active(self):
        return self.session.query(Holiday).filter(Holiday.is_active.is_(True))

    def _active_on(self, holiday_date: date, exclude_id=None) -> Optional[Holiday]:
        query = self._active().filter(Holiday.date == holiday_date)
        if exclude_id is not None:
            query = query.filter(Holiday.id != exclude_id)
        return query.first()

    def list_holidays(self, year=None, month=None, holiday_type=None, page=1, limit=50):
        """Active holidays in date order, optionally narrowed to a year, month or type.

        The month filter only applies together with a year.
        """
        query = self._active()

        if year:
            query = query.filter(Holiday.year == year)
            if month:
                last_day = calendar.monthrange(year, month)[1]
                query = query.filter(
                    Holiday.date >= date(year, month, 1),
                    Holiday.date <= date(year, month, last_day),
                )

        if holiday_type and holiday_type.lower() != "all":
            try:
                query = query.filter(Holiday.holiday_type == HolidayType.parse(holiday_type))
            except ValueError as e:
                raise ValidationError(str(e))

        query = query.order_by(Holiday.date.asc(), Holiday.id.asc())
        return paginate(query, page, limit)

    def upcoming(self, limit: int = 5):
        """Next ``limit`` active holidays from today onwards."""
        return (
            self._active()
            .filter(Holiday.date >= date.today())
            .order_by(Holiday.date.asc())
            .limit(limit)
            .all()
        )

    def get_holiday(self, holiday_id) -> Holiday:
        holiday = self.session.get(Holiday, holiday_id)
        if holiday is None:
            raise NotFoundError("Holiday not found")
        return holiday

    def _build(self, actor: Actor, request: HolidayCreateRequest) -> Holiday:
        """Check the date is free and stage a new holiday in the session."""
        if self._active_on(request.holiday_date) is not None:
            raise ConflictError("A holiday already exists on this date")

        holiday = Holiday(
            holiday_name=request.holiday_name,
            holiday_type=request.holiday_type,
            description=request.description,
            is_active=True,
            created_by=actor.id,
        )
        holiday.set_date(request.holiday_date)
        self.session.add(holiday)
        return holiday

    def _flush(self, message: str):
        # The partial unique index catches a writer that slipped past the check
        try:
            self.session.flush()
        except IntegrityError as e:
            self.session.rollback()
            logger.warning(f"Holiday date conflict on flush: {e.orig}")
            raise ConflictError(message)

    def create_holiday(self, actor: Actor, request: HolidayCreateRequest) -> Holiday:
        require_access(actor, ResourceKind.HOLIDAY, Operation.CREATE)

        holiday = self._build(actor, request)
        self._flush("A holiday already exists on this date")

        logger.info(f"Holiday '{holiday.holiday_name}' on {holiday.date} created by user {actor.id}")
        return holiday

    def update_holiday(self, actor: Actor, holiday_id, request) -> Holiday:
        """Apply the fields present in a HolidayUpdateRequest."""
        holiday = self.get_holiday(holiday_id)
        require_access(actor, holiday, Operation.UPDATE)

        patch = request.provided_fields()

        new_date = patch.get("holiday_date")
        if new_date is not None and new_date != holiday.date:
            if holiday.is_active and self._active_on(new_date, exclude_id=holiday.id) is not None:
                raise ConflictError("Another holiday already exists on this date")
            holiday.set_date(new_date)

        if patch.get("holiday_name"):
            holiday.holiday_name = patch["holiday_name"]
        if patch.get("holiday_type") is not None:
            holiday.holiday_type = patch["holiday_type"]
        if "description" in patch:
            holiday.description = patch["description"]

        holiday.updated_by = actor.id
        self._flush("Another holiday already exists on this date")

        logger.info(f"Holiday {holiday.id} updated by user {actor.id}: {sorted(patch)}")
        return holiday

    def delete_holiday(self, actor: Actor, holiday_id) -> Holiday:
        """Soft delete; the date becomes free for a new holiday."""
        holiday = self.get_holiday(holiday_id)
        require_access(actor, holiday, Operation.DELETE)

        holiday.is_active = False
        holiday.updated_by = actor.id
        self.session.flush()

        logger.info(f"Holiday {holiday.id} ({holiday.date}) deactivated by user {actor.id}")
        return holiday

    def bulk_create(self, actor: Actor, items):
        """Create each item independently.

        Returns (created, errors) where errors is a list of {index, error}. A bad
        item is reported and skipped; it never aborts the rest of the batch.
        Staged items are autoflushed by each date check, so duplicates within
        the batch itself are reported too.
        """
        require_access(actor, ResourceKind.HOLIDAY, Operation.CREATE)

        created = []
        errors = []

        # Each date check autoflushes staged items, so a concurrent writer can
        # surface here as well as in the final flush
        try:
            for index, item in enumerate(items):
                try:
                    request = HolidayCreateRequest.model_validate(item)
                    created.append(self._build(actor, request))
                except RequestValidationError as e:
                    errors.append({"index": index, "error": _describe_item_error(e)})
                except ConflictError:
                    errors.append({"index": index, "error": f"Holiday already exists on {_item_date(item)}"})
        except IntegrityError as e:
            self.session.rollback()
            logger.warning(f"Holiday date conflict during bulk import: {e.orig}")
            raise ConflictError(BULK_CONFLICT_MESSAGE)

        self._flush(BULK_CONFLICT_MESSAGE)

        logger.info(f"Bulk holiday import by user {actor.id}: {len(created)} created, {len(errors)} rejected")
        return created, errors

    def stats(self, year: Optional[int] = None):
        """Totals for ``year`` (default current year) plus the next three holidays."""
        year = year or date.today().year

        holidays = (
            self._active()
            .filter(Holiday.year == year)
            .order_by(Holiday.date.asc())
            .all()
        )

        by_type = {}
        for holiday in holidays:
            group = by_type.setdefault(
                holiday.holiday_type.value,
                {"type": holiday.holiday_type.value, "count": 0, "holidays": []},
            )
            group["count"] += 1
            group["holidays"].append(
                {"holidayName": holiday.holiday_name, "date": holiday.date.isoformat(), "day": holiday.day}
            )

        total = (
            self.session.query(func.count(Holiday.id))
            .filter(Holiday.is_active.is_(True), Holiday.year == year)
            .scalar()
        )

        return {
            "year": year,
            "totalHolidays": total,
            "holidaysByType": list(by_type.values()),
            "upcomingHolidays": [h.to_dict() for h in self.upcoming(3)],
        }


def _describe_item_error(exc: RequestValidationError) -> str:
    if any(err.get("type") == "missing" for err in exc.errors()):
        return REQUIRED_FIELDS_MESSAGE

    messages = []
    for err in exc.errors():
        message = err.get("msg", "Invalid value")
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        messages.append(message)
    return "; ".join(messages)


def _item_date(item) -> str:
    if isinstance(item, dict):
        return str(item.get("date", ""))[:10]
    return ""
