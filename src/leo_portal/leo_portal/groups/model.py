from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple


@dataclass(frozen=True)
class CommunicationGroup:
    """Named list of members used as a bulk email audience."""

    group_id: int
    name: str
    member_ids: Tuple[int, ...] = ()
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "group_id": self.group_id,
            "name": self.name,
            "member_ids": list(self.member_ids),
            "member_count": len(self.member_ids),
        }
