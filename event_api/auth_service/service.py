"""
Authentication service: registration, login and the account lockout policy.

Lockout rules:
- Every wrong password increments the user's failed_attempts.
- When failed_attempts goes above max_failed_logins the account is locked
  until now + lockout_duration.
- While lock_until is in the future every attempt is refused without
  checking the password or touching the counters.
- Once lock_until has passed the next attempt is evaluated normally. The
  lock fields are only cleared by a successful login.
- A successful login zeroes the counter and unlocks the account.
"""

import logging
import re
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional

from event_api.auth_service.models import User
from event_api.auth_service.passwords import PasswordManager
from event_api.auth_service.utils import create_token
from event_api.errors import (
    AccountLockedError,
    ConflictError,
    InvalidCredentialsError,
    ValidationError,
)

EMAIL_REGEX = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

# Login outcomes decided inside the store transaction
_OK = "ok"
_INVALID = "invalid"
_LOCKED = "locked"


class AuthService:
    def __init__(
        self,
        store,
        passwords: PasswordManager,
        jwt_secret: str,
        token_ttl: timedelta = timedelta(hours=1),
        max_failed_logins: int = 5,
        lockout_duration: timedelta = timedelta(minutes=2),
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.store = store
        self.passwords = passwords
        self.jwt_secret = jwt_secret
        self.token_ttl = token_ttl
        self.max_failed_logins = max_failed_logins
        self.lockout_duration = lockout_duration
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def register(self, name: Optional[str], email: Optional[str], password: Optional[str]) -> User:
        """
        Create a new user.

        Raises:
            ValidationError: A field is missing, not a string, or the email is malformed.
            ConflictError: The email is already registered.
        """
        if not name or not email or not password:
            raise ValidationError("name, email and password required")
        if not all(isinstance(v, str) for v in (name, email, password)):
            raise ValidationError("name, email and password must be strings")
        if not EMAIL_REGEX.match(email):
            raise ValidationError("invalid email format")

        if self.store.find_user_by_email(email):
            raise ConflictError("user already exists")

        user = self.store.add_user(name, email, self.passwords.hash_password(password))
        logging.info(f"[Auth] Registered user {user.id}")
        return user

    def login(self, email: Optional[str], password: Optional[str]) -> Dict[str, Any]:
        """
        Check credentials and apply the lockout policy.

        Returns:
            dict: {"message", "token"} on success.

        Raises:
            ValidationError: email or password missing or not a string.
            InvalidCredentialsError: Unknown email or wrong password.
            AccountLockedError: The account is locked right now.
        """
        if not email or not password:
            raise ValidationError("email and password required")
        if not isinstance(email, str) or not isinstance(password, str):
            raise ValidationError("email and password must be strings")

        now = self.clock()

        # Counters are read and written under a row lock so that concurrent
        # attempts on one account cannot lose increments.
        with self.store.user_for_update(email) as user:
            if user is None:
                self.passwords.verify_dummy(password)
                outcome = _INVALID
            elif user.is_locked_at(now):
                outcome = _LOCKED
            elif self.passwords.verify_password(password, user.password_hash):
                user.failed_attempts = 0
                user.is_locked = False
                user.lock_until = None
                outcome = _OK
            else:
                user.failed_attempts += 1
                if user.failed_attempts > self.max_failed_logins:
                    user.is_locked = True
                    user.lock_until = now + self.lockout_duration
                    logging.warning(
                        f"[Auth] User {user.id} locked until {user.lock_until.isoformat()} "
                        f"after {user.failed_attempts} failed attempts"
                    )
                outcome = _INVALID

        if outcome == _LOCKED:
            logging.info(f"[Auth] Login refused for locked user {user.id}")
            raise AccountLockedError()
        if outcome == _INVALID:
            if user is not None:
                logging.info(f"[Auth] Failed login for user {user.id} ({user.failed_attempts})")
            raise InvalidCredentialsError()

        token = create_token(user.id, user.email, self.jwt_secret, ttl=self.token_ttl, now=now)
        logging.info(f"[Auth] User {user.id} logged in")
        return {"message": "Login successful", "token": token}

    def list_users(self) -> List[User]:
        return self.store.list_users()
