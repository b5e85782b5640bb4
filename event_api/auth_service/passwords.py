"""
Password hashing with Argon2.

Hashes are salted and self-describing (parameters are encoded in the
digest), so verification works even after the cost settings change.
"""

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError


class PasswordManager:
    def __init__(self, time_cost: int = 3, memory_cost: int = 65536, parallelism: int = 4):
        self._ph = PasswordHasher(
            time_cost=time_cost, memory_cost=memory_cost, parallelism=parallelism
        )
        self._dummy_hash = None

    def hash_password(self, password: str) -> str:
        return self._ph.hash(password)

    def verify_dummy(self, password: str) -> bool:
        """
        Spend the same Argon2 work as a real check, against a throwaway hash.

        Used when no account matches, so an unknown email takes as long to
        reject as a wrong password. Always returns False.
        """
        if self._dummy_hash is None:
            self._dummy_hash = self._ph.hash("dummy-password-for-timing")
        self.verify_password(password, self._dummy_hash)
        return False

    def verify_password(self, password: str, password_hash: str) -> bool:
        """
        Check a plaintext password against a stored digest.

        Returns:
            bool: True on match. A mismatch or an unreadable digest is False.
        """
        try:
            return self._ph.verify(password_hash, password)
        except (VerificationError, InvalidHashError):
            return False
