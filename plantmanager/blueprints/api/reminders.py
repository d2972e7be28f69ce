"""
Plant Reminder Endpoints
========================

JSON API consumed by the reminder screens:
- list reminders in watering order, with the spotlight plant
- save (create or replace) a plant reminder
- mark a plant watered
- remove a reminder (idempotent)
"""

from __future__ import annotations

import logging

from flask import Blueprint, Response
from pydantic import ValidationError

from plantmanager.blueprints.api._common import (
    fail as _fail,
    get_json as _get_json,
    get_reminder_service as _reminder_service,
    success as _success,
)
from plantmanager.schemas import SavePlantRequest
from plantmanager.utils.http import error_response, safe_route

logger = logging.getLogger("reminders_api")

reminders_api = Blueprint("reminders_api", __name__)


@reminders_api.errorhandler(404)
def not_found(error):
    return error_response("Resource not found", 404)


@reminders_api.errorhandler(405)
def method_not_allowed(error):
    return error_response("Method not allowed", 405)


@reminders_api.get("")
@safe_route("Failed to list reminders")
def list_reminders() -> Response:
    """Every reminder, soonest first, plus the spotlight plant."""
    spotlight = _reminder_service().spotlight()
    return _success(spotlight.to_dict())


@reminders_api.get("/next")
@safe_route("Failed to get next reminder")
def next_reminder() -> Response:
    record = _reminder_service().next_plant()
    return _success({"plant": record.to_dict() if record else None})


@reminders_api.get("/<plant_id>")
@safe_route("Failed to get reminder")
def get_reminder(plant_id: str) -> Response:
    return _success({"plant": _reminder_service().get_plant(plant_id).to_dict()})


@reminders_api.put("/<plant_id>")
@safe_route("Failed to save reminder")
def save_reminder(plant_id: str) -> Response:
    """Create or replace the reminder for ``plant_id``.

    Request body::

        {"name": "Fern", "notify_at": "2026-10-20T08:30:00Z",
         "frequency": {"times": 2, "repeat_every": "week"}}
    """
    try:
        body = SavePlantRequest.model_validate(_get_json())
    except ValidationError as ve:
        return _fail("Invalid request", 400, details={"errors": ve.errors(include_url=False, include_context=False)})

    record = _reminder_service().schedule_plant(body.to_record(plant_id), body.notify_at)
    logger.info("Saved reminder for plant %s", plant_id)
    return _success({"plant": record.to_dict()})


@reminders_api.post("/<plant_id>/watered")
@safe_route("Failed to record watering")
def mark_watered(plant_id: str) -> Response:
    record = _reminder_service().complete_watering(plant_id)
    return _success({"plant": record.to_dict()})


@reminders_api.delete("/<plant_id>")
@safe_route("Failed to remove reminder")
def remove_reminder(plant_id: str) -> Response:
    _reminder_service().remove_plant(plant_id)
    return _success({"plant_id": plant_id, "removed": True})
