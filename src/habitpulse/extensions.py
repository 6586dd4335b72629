"""Database and service wiring for the Flask app."""

from __future__ import annotations

from flask import Flask, current_app

from .config import BaseConfig
from .infra.database import bootstrap_database
from .infra.repositories.habit import SQLModelHabitRepository
from .services.views import HabitService

EXTENSION_KEY = "habitpulse"


def init_db(app: Flask) -> None:
    """Create the engine, ensure the schema and attach the habit service."""

    config: BaseConfig = app.config["HABITPULSE_CONFIG"]
    engine, session_factory = bootstrap_database(config)
    repository = SQLModelHabitRepository(session_factory)
    app.extensions[EXTENSION_KEY] = {
        "engine": engine,
        "session_factory": session_factory,
        "service": HabitService(repository, tz=config.calendar_zone()),
    }


def get_engine():
    """Return the engine bound to the current app."""

    state = current_app.extensions.get(EXTENSION_KEY)
    if state is None:  # pragma: no cover - exercised in integration tests
        raise RuntimeError("Database engine not initialized")
    return state["engine"]


def get_service() -> HabitService:
    """Return the habit service bound to the current app."""

    state = current_app.extensions.get(EXTENSION_KEY)
    if state is None:  # pragma: no cover
        raise RuntimeError("Habit service not initialized")
    return state["service"]
