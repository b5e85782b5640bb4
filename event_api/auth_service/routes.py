"""
Authentication service route handlers.

Provides routes for:
- User registration (/register)
- User login (/login)
- User listing and creation for authenticated callers (/users)

Password and lockout logic lives in `auth_service.service`; JWT logic in
`auth_service.utils`. Domain errors raised by the service are rendered by
the gateway's error handlers.
"""

import logging
from typing import Tuple, Dict, Any

from flask import Blueprint, current_app, request, jsonify, Response

from event_api.auth_service.service import AuthService
from event_api.auth_service.utils import json_body, require_jwt

auth_bp = Blueprint("auth", __name__)


def _auth_service() -> AuthService:
    return current_app.extensions["event_api.auth_service"]


# --- REQUEST LOGGING ---
@auth_bp.before_request
def before_request() -> None:
    """
    Log the method and path of every incoming request to the authentication service.
    """
    logging.info(f"[Auth] Incoming {request.method} {request.path}")


@auth_bp.after_request
def after_request(response: Response) -> Response:
    """
    Log the response status code for every request.

    Args:
        response (Response): The Flask response object.

    Returns:
        Response: The passed-through response object.
    """
    logging.info(f"[Auth] Response {response.status}")
    return response


def _create_user() -> Tuple[Response, int]:
    data: Dict[str, Any] = json_body()
    user = _auth_service().register(data.get("name"), data.get("email"), data.get("password"))
    return jsonify(user.to_dict()), 201


# --- REGISTER ---
@auth_bp.route("/register", methods=["POST"])
def register() -> Tuple[Response, int]:
    """
    Register a new user in the system.

    Expects a JSON body with:
    - name (str)
    - email (str): Unique email address.
    - password (str)

    Returns:
        201: The created user (without password hash).
        400: Missing fields, invalid email, or "user already exists".
    """
    return _create_user()


# --- LOGIN ---
@auth_bp.route("/login", methods=["POST"])
def login() -> Tuple[Response, int]:
    """
    Authenticate a user and return a JWT.

    Expects a JSON body with:
    - email (str)
    - password (str)

    Returns:
        200: {"message", "token"}.
        400: Missing credentials.
        401: Invalid credentials (wrong password or unknown email).
        403: Account temporarily locked.
    """
    data: Dict[str, Any] = json_body()
    result = _auth_service().login(data.get("email"), data.get("password"))
    return jsonify(result), 200


# --- LIST USERS ---
@auth_bp.route("/users", methods=["GET"])
@require_jwt
def list_users() -> Tuple[Response, int]:
    """
    List all users, ordered by id.

    Requires Authorization header: Bearer <token>

    Returns:
        200: List of user objects.
        401: Unauthorized.
    """
    users = _auth_service().list_users()
    return jsonify([u.to_dict() for u in users]), 200


# --- CREATE USER ---
@auth_bp.route("/users", methods=["POST"])
@require_jwt
def create_user() -> Tuple[Response, int]:
    """
    Create a user on behalf of an authenticated caller. Same rules as /register.

    Returns:
        201: The created user.
        400: Validation error or duplicate email.
        401: Unauthorized.
    """
    return _create_user()
