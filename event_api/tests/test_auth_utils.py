import pytest
import jwt
from datetime import datetime, timedelta, timezone

from event_api.auth_service.utils import create_token, verify_token, verify_token_from_request
from event_api.errors import InvalidTokenError, TokenExpiredError


def test_create_token():
    token = create_token(123, "a@b.com", "test_secret")

    assert isinstance(token, str)

    payload = jwt.decode(token, "test_secret", algorithms=["HS256"])
    assert payload["id"] == 123
    assert payload["email"] == "a@b.com"
    assert payload["exp"] - payload["iat"] == 3600


def test_create_token_custom_ttl():
    token = create_token(1, "a@b.com", "test_secret", ttl=timedelta(minutes=5))
    payload = jwt.decode(token, "test_secret", algorithms=["HS256"])
    assert payload["exp"] - payload["iat"] == 300


def test_verify_token():
    token = create_token(456, "x@y.org", "test_secret")

    claims = verify_token(token, "test_secret")
    assert claims["id"] == 456
    assert claims["email"] == "x@y.org"


def test_verify_token_invalid():
    with pytest.raises(InvalidTokenError):
        verify_token("invalid.token.here", "test_secret")


def test_verify_token_wrong_secret():
    token = create_token(1, "a@b.com", "other_secret")
    with pytest.raises(InvalidTokenError):
        verify_token(token, "test_secret")


def test_verify_token_expired():
    issued = datetime.now(timezone.utc) - timedelta(hours=2)
    token = create_token(1, "a@b.com", "test_secret", now=issued)
    with pytest.raises(TokenExpiredError):
        verify_token(token, "test_secret")


def test_verify_token_without_id_claim():
    token = jwt.encode({"email": "a@b.com"}, "test_secret", algorithm="HS256")
    with pytest.raises(InvalidTokenError):
        verify_token(token, "test_secret")


def test_verify_token_from_request_valid(app, registered_user):
    token = create_token(registered_user["id"], registered_user["email"], "test_secret")

    with app.test_request_context(headers={"Authorization": f"Bearer {token}"}):
        user, err, code = verify_token_from_request()
        assert user.id == registered_user["id"]
        assert err is None
        assert code is None


def test_verify_token_from_request_missing_header(app):
    with app.test_request_context():
        user, err, code = verify_token_from_request()
        assert user is None
        assert code == 401
        assert err.json["message"] == "Unauthorized"


def test_verify_token_from_request_invalid_format(app):
    with app.test_request_context(headers={"Authorization": "InvalidFormat"}):
        user, err, code = verify_token_from_request()
        assert user is None
        assert code == 401


def test_verify_token_from_request_unknown_user(app):
    token = create_token(999, "ghost@example.com", "test_secret")

    with app.test_request_context(headers={"Authorization": f"Bearer {token}"}):
        user, err, code = verify_token_from_request()
        assert user is None
        assert code == 401
        assert err.json["message"] == "Unauthorized"
