"""Notification JSON routes."""

from __future__ import annotations

from flask import jsonify

from ...errors import NotificationNotFoundError
from ...extensions import get_service
from ..owner import current_user
from . import bp


@bp.errorhandler(NotificationNotFoundError)
def _notification_not_found(exc: NotificationNotFoundError):
    return jsonify({"message": "Notification not found"}), 404


@bp.get("/")
def list_notifications():
    """Unread notifications, newest first."""

    notifications = get_service().notifications(user_id=current_user())
    return jsonify([notification.to_dict() for notification in notifications])


@bp.delete("/<int:notification_id>")
def dismiss_notification(notification_id: int):
    """Mark a notification read; it stops showing up in the list."""

    get_service().dismiss_notification(notification_id, user_id=current_user())
    return "", 204
