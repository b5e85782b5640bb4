"""
Event model. One row of the 'events' table, joined with its creator's name.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Dict, Any


@dataclass
class Event:
    id: Optional[int]
    title: str
    date: datetime
    created_by: int
    description: Optional[str] = None
    creator_name: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Event":
        return cls(
            id=row["id"],
            title=row["title"],
            description=row["description"],
            date=row["date"],
            created_by=row["created_by"],
            creator_name=row["creator_name"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "date": self.date.isoformat(),
            "createdBy": self.created_by,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
            # Creator is exposed with id and name only
            "user": {"id": self.created_by, "name": self.creator_name},
        }
