from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import MembershipFeeStatus, Role, UserStatus


@dataclass(frozen=True)
class User:
    """Domain entity: a portal account (member or admin).

    Note: plain data object, no DB access code here.
    """

    user_id: int
    name: str
    email: str
    password_hash: str
    role: Role
    status: UserStatus
    photo_url: Optional[str] = None
    designation: Optional[str] = None
    nic: Optional[str] = None
    date_of_birth: Optional[date] = None
    gender: Optional[str] = None
    mobile_number: Optional[str] = None
    membership_fee_status: MembershipFeeStatus = MembershipFeeStatus.PENDING
    fcm_token: Optional[str] = None
    created_at: Optional[datetime] = None

    @property
    def is_admin(self) -> bool:
        return self.role.is_admin

    @property
    def is_approved(self) -> bool:
        return self.status == UserStatus.APPROVED

    def to_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "name": self.name,
            "email": self.email,
            "role": self.role.value,
            "status": self.status.value,
            "photo_url": self.photo_url,
            "designation": self.designation,
            "nic": self.nic,
            "date_of_birth": self.date_of_birth.isoformat() if self.date_of_birth else None,
            "gender": self.gender,
            "mobile_number": self.mobile_number,
            "membership_fee_status": self.membership_fee_status.value,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


@dataclass(frozen=True)
class PasswordResetToken:
    """A stored reset link. Only the SHA-256 of the emailed token is kept."""

    token_id: int
    user_id: int
    token_hash: str
    expires_at: datetime
    used_at: Optional[datetime] = None
