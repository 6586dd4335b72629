"""Habit JSON routes."""

from __future__ import annotations

from typing import Any

from flask import jsonify, request
from pydantic import ValidationError
from werkzeug.exceptions import BadRequest

from ...errors import HabitNotFoundError
from ...extensions import get_service
from ...logging_config import get_logger
from ...services.calendar import local_instant
from ..owner import current_user
from . import bp
from .forms import CheckInForm, HabitForm, HabitUpdateForm, ReminderForm, validation_errors

logger = get_logger(__name__)


def _reference() -> object:
    """Optional ``?at=`` override of "now" for the weekly window."""

    raw = request.args.get("at")
    if not raw:
        return None
    if local_instant(raw) is None:
        raise BadRequest("Invalid 'at' timestamp")
    return raw


def _json_body() -> dict[str, Any]:
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        raise BadRequest("Invalid JSON body")
    return payload


@bp.errorhandler(BadRequest)
def _bad_request(exc: BadRequest):
    return jsonify({"message": exc.description}), 400


@bp.errorhandler(ValidationError)
def _invalid_payload(exc: ValidationError):
    logger.info("Rejected payload", extra={"path": request.path, "error_count": exc.error_count()})
    return jsonify({"message": "Invalid request", "errors": validation_errors(exc)}), 400


@bp.errorhandler(ValueError)
def _invalid_value(exc: ValueError):
    # ValidationError subclasses ValueError; Flask prefers the closer handler above.
    return jsonify({"message": str(exc)}), 400


@bp.errorhandler(HabitNotFoundError)
def _habit_not_found(exc: HabitNotFoundError):
    return jsonify({"message": "Habit not found"}), 404


@bp.get("/")
def list_habits():
    """Weekly views of every habit the user owns."""

    views = get_service().list_views(user_id=current_user(), reference=_reference())
    return jsonify([view.to_dict() for view in views])


@bp.post("/")
def create_habit():
    form = HabitForm.model_validate(_json_body())
    view = get_service().create_habit(
        user_id=current_user(),
        name=form.name,
        goal=form.goal,
        icon=form.icon.value,
        unit=form.unit,
        reference=_reference(),
    )
    return jsonify(view.to_dict()), 201


@bp.get("/<int:habit_id>")
def get_habit(habit_id: int):
    view = get_service().get_view(habit_id, user_id=current_user(), reference=_reference())
    return jsonify(view.to_dict())


@bp.patch("/<int:habit_id>")
def update_habit(habit_id: int):
    form = HabitUpdateForm.model_validate(_json_body())
    view = get_service().update_habit(
        habit_id, form.changes(), user_id=current_user(), reference=_reference()
    )
    return jsonify(view.to_dict())


@bp.delete("/<int:habit_id>")
def delete_habit(habit_id: int):
    get_service().delete_habit(habit_id, user_id=current_user())
    return jsonify({"success": True})


@bp.post("/entry")
def check_in():
    """Upsert one day's value and return the refreshed habit view."""

    form = CheckInForm.model_validate(_json_body())
    view = get_service().check_in(
        form.habit_id,
        form.occurred_on,
        form.value,
        user_id=current_user(),
        reference=_reference(),
    )
    return jsonify(view.to_dict())


@bp.get("/performance")
def performance():
    """Radar chart rows: attainment per weekday over the last seven days."""

    return jsonify(get_service().performance(user_id=current_user(), reference=_reference()))


@bp.get("/stats")
def stats():
    return jsonify(get_service().stats(user_id=current_user(), reference=_reference()))


@bp.get("/<int:habit_id>/reminders")
def list_reminders(habit_id: int):
    reminders = get_service().reminders(habit_id, user_id=current_user())
    return jsonify([reminder.to_dict() for reminder in reminders])


@bp.post("/<int:habit_id>/reminders")
def add_reminder(habit_id: int):
    form = ReminderForm.model_validate(_json_body())
    reminder = get_service().add_reminder(habit_id, form.time, user_id=current_user())
    return jsonify(reminder.to_dict()), 201
