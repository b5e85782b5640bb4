"""
Events service routes: list, read, create, update, and delete events.

Reads are public; writes require a bearer token.
"""

import logging
from typing import Tuple, Dict, Any

from flask import Blueprint, current_app, request, jsonify, Response

from event_api.auth_service.utils import json_body, require_jwt
from event_api.events_service.service import EventService

events_bp = Blueprint("events", __name__)


def _event_service() -> EventService:
    return current_app.extensions["event_api.event_service"]


@events_bp.before_request
def before_request() -> None:
    logging.info(f"[Events] Incoming {request.method} {request.path}")


@events_bp.after_request
def after_request(response: Response) -> Response:
    logging.info(f"[Events] Response {response.status}")
    return response


@events_bp.route("/", methods=["GET"], strict_slashes=False)
def list_events() -> Tuple[Response, int]:
    """
    Return one page of events.

    Query parameters:
    - page (int, default 1, >= 1)
    - limit (int, default 10, >= 1)

    Returns:
        200: {"total", "page", "limit", "data"}.
        400: Invalid page or limit.
    """
    page = request.args.get("page", 1)
    limit = request.args.get("limit", 10)
    return jsonify(_event_service().list_events(page, limit)), 200


@events_bp.route("/<event_id>", methods=["GET"])
def get_event(event_id: str) -> Tuple[Response, int]:
    """
    Get a single event by ID, with its creator's id and name.

    Returns:
        200: Event object.
        400: Event not found.
    """
    event = _event_service().get_event(event_id)
    return jsonify(event.to_dict()), 200


@events_bp.route("/", methods=["POST"], strict_slashes=False)
@require_jwt
def create_event() -> Tuple[Response, int]:
    """
    Create an event.

    Expects JSON: {"title", "date", "createdBy", "description"?}

    Returns:
        201: The created event.
        400: Missing fields, bad date, or unknown createdBy.
        401: Unauthorized.
    """
    data: Dict[str, Any] = json_body()
    event = _event_service().create_event(data)
    return jsonify(event.to_dict()), 201


@events_bp.route("/<event_id>", methods=["PUT"])
@require_jwt
def update_event(event_id: str) -> Tuple[Response, int]:
    """
    Partially update an event. Empty values leave the stored value unchanged.

    Returns:
        200: The updated event.
        400: Event not found or bad date.
        401: Unauthorized.
    """
    data: Dict[str, Any] = json_body()
    event = _event_service().update_event(event_id, data)
    return jsonify(event.to_dict()), 200


@events_bp.route("/<event_id>", methods=["DELETE"])
@require_jwt
def delete_event(event_id: str) -> Tuple[str, int]:
    """
    Delete an event.

    Returns:
        200: Empty body.
        400: Event not found.
        401: Unauthorized.
    """
    _event_service().delete_event(event_id)
    return "", 200
