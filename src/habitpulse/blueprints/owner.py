"""Request owner resolution shared by the JSON blueprints."""

from __future__ import annotations

from flask import current_app, g


def current_user() -> str:
    """Owner id set by an upstream auth layer, else the configured default user."""

    user_id = g.get("user_id")
    if user_id:
        return str(user_id)
    return current_app.config["HABITPULSE_CONFIG"].DEFAULT_USER
