from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User roles used for authorization."""

    MEMBER = "member"
    ADMIN = "admin"
    SUPER_ADMIN = "super_admin"

    @property
    def is_admin(self) -> bool:
        return self in (Role.ADMIN, Role.SUPER_ADMIN)


class UserStatus(str, Enum):
    """Account approval state set by admins after signup."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class MembershipFeeStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"


class AttendanceType(str, Enum):
    MEMBER = "member"
    VISITOR = "visitor"


class AttendanceStatus(str, Enum):
    PRESENT = "present"


class MarkResultStatus(str, Enum):
    """Outcome of a mark-attendance call as shown to the user."""

    SUCCESS = "success"
    ALREADY_MARKED = "already_marked"
    QUEUED = "queued"
    ERROR = "error"


class TransactionType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


class ProjectIdeaStatus(str, Enum):
    """Review workflow: draft -> pending_review -> approved/declined/needs_revision."""

    DRAFT = "draft"
    PENDING_REVIEW = "pending_review"
    APPROVED = "approved"
    DECLINED = "declined"
    NEEDS_REVISION = "needs_revision"


class TaskStatus(str, Enum):
    TODO = "todo"
    IN_PROGRESS = "in_progress"
    DONE = "done"


class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Badge(str, Enum):
    CLUB_LEADER = "club_leader"
    TOP_VOLUNTEER = "top_volunteer"
    ACTIVE_LEO = "active_leo"


class AssistantTopic(str, Enum):
    """What the dashboard assistant is being asked about."""

    SCHEDULE = "schedule"
    PROFILE = "profile"
