"""
Shared authentication helpers.
Provides token creation, verification, the bearer-token route guard, and
JSON body parsing for the blueprints.
"""

import logging
from datetime import datetime, timedelta, timezone
from functools import wraps
from typing import Tuple, Optional, Dict, Any, Callable

import jwt
from flask import current_app, g, jsonify, request, Response

from event_api.auth_service.models import User
from event_api.errors import InvalidTokenError, TokenExpiredError

ALGORITHM = "HS256"


def json_body() -> Dict[str, Any]:
    """
    Return the request's JSON object.

    A missing or unparsable body, or JSON that is not an object (a list,
    a number...), is read as {} so the field checks report it as a 400.
    """
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


# --- JWT CREATION ---
def create_token(
    user_id: int,
    email: str,
    secret: str,
    ttl: timedelta = timedelta(hours=1),
    now: Optional[datetime] = None,
) -> str:
    """
    Generates a new JWT for a given user.

    Args:
        user_id (int): The unique ID of the user.
        email (str): The user's email, embedded as a claim.
        secret (str): HMAC signing key.
        ttl (timedelta): Token lifetime.
        now (datetime, optional): Issue time, defaults to the current UTC time.

    Returns:
        str: Encoded JWT string.
    """
    now = now or datetime.now(timezone.utc)

    payload = {
        "id": user_id,
        "email": email,
        "exp": now + ttl,
        "iat": now,
    }

    return jwt.encode(payload, secret, algorithm=ALGORITHM)


# --- JWT VALIDATION ---
def verify_token(token: str, secret: str) -> Dict[str, Any]:
    """
    Decode and validate a JWT.

    Returns:
        dict: The token claims.

    Raises:
        TokenExpiredError: The token's exp is in the past.
        InvalidTokenError: Bad signature, malformed token, or missing id claim.
    """
    try:
        claims = jwt.decode(token, secret, algorithms=[ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise TokenExpiredError()
    except jwt.InvalidTokenError:
        raise InvalidTokenError()

    if "id" not in claims:
        raise InvalidTokenError()
    return claims


def verify_token_from_request() -> Tuple[Optional[User], Optional[Response], Optional[int]]:
    """
    Verify the JWT in the Authorization header and load its user.

    The user must still exist in the store.

    Returns:
        tuple: (user, error_response, status_code)
               If successful, error_response and status_code are None.
               If failed, user is None.
    """
    unauthorized = jsonify({"message": "Unauthorized"}), 401

    # The auth scheme is case-insensitive ("Bearer", "bearer", ...)
    parts = request.headers.get("Authorization", "").split(None, 1)
    if len(parts) != 2 or parts[0].lower() != "bearer":
        logging.info("[Auth] Rejected request: missing bearer token")
        return (None,) + unauthorized

    token = parts[1].strip()

    try:
        claims = verify_token(token, current_app.config["JWT_SECRET"])
    except (TokenExpiredError, InvalidTokenError) as e:
        logging.info(f"[Auth] Rejected request: {e.message}")
        return (None,) + unauthorized

    user = current_app.extensions["event_api.store"].get_user(claims["id"])
    if user is None:
        logging.info(f"[Auth] Rejected request: user {claims['id']} no longer exists")
        return (None,) + unauthorized

    return user, None, None


def require_jwt(view: Callable) -> Callable:
    """
    Route decorator: reject the request with 401 unless it carries a valid
    bearer token. The authenticated user is available as g.current_user.
    """
    @wraps(view)
    def wrapper(*args, **kwargs):
        user, err, code = verify_token_from_request()
        if err:
            return err, code
        g.current_user = user
        return view(*args, **kwargs)

    return wrapper
