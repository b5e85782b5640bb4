"""
User model for the authentication service.

Mirrors one row of the 'users' table. The password hash never leaves the
service through to_dict().
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Dict, Any


@dataclass
class User:
    id: Optional[int]
    name: str
    email: str
    password_hash: str
    failed_attempts: int = 0
    is_locked: bool = False
    lock_until: Optional[datetime] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "User":
        return cls(
            id=row["id"],
            name=row["name"],
            email=row["email"],
            password_hash=row["password_hash"],
            failed_attempts=row["failed_attempts"],
            is_locked=row["is_locked"],
            lock_until=row["lock_until"],
            created_at=row["created_at"],
        )

    def is_locked_at(self, now: datetime) -> bool:
        """A lock only counts while lock_until is strictly in the future."""
        return bool(self.is_locked and self.lock_until and self.lock_until > now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "failed_attempts": self.failed_attempts,
            "isLocked": self.is_locked,
            "lockUntil": self.lock_until.isoformat() if self.lock_until else None,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }
