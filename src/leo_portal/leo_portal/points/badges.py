from __future__ import annotations

from typing import List

from ..core.constants import ACTIVE_LEO_THRESHOLD, LEADERSHIP_KEYWORDS
from ..core.enums import Badge
from ..users.model import User


def is_club_leader(user: User) -> bool:
    if user.is_admin:
        return True
    designation = (user.designation or "").lower()
    return any(k in designation for k in LEADERSHIP_KEYWORDS)


def compute_badges(user: User, *, attendance_count: int, top_count: int) -> List[Badge]:
    """Badges earned by ``user``.

    ``top_count`` is the highest attendance count among members; ties share
    the top volunteer badge and a count of zero never earns it.
    """

    badges: List[Badge] = []
    if is_club_leader(user):
        badges.append(Badge.CLUB_LEADER)
    if attendance_count > 0 and attendance_count == top_count:
        badges.append(Badge.TOP_VOLUNTEER)
    if attendance_count >= ACTIVE_LEO_THRESHOLD:
        badges.append(Badge.ACTIVE_LEO)
    return badges
