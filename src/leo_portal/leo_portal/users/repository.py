from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import MembershipFeeStatus, Role, UserStatus
from .model import PasswordResetToken, User


class UserRepository(Protocol):
    """Repository interface for User.

    Note (DIP): services depend on this interface, never on a concrete DB.
    """

    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

    def create_user(
        self,
        *,
        name: str,
        email: str,
        password_hash: str,
        photo_url: str,
        role: Role,
        status: UserStatus,
        designation: Optional[str] = None,
    ) -> int:
        raise NotImplementedError

    def set_status(self, user_id: int, status: UserStatus) -> bool:
        raise NotImplementedError

    def update_admin_fields(self, user_id: int, *, name: str, role: Role, designation: Optional[str]) -> bool:
        raise NotImplementedError

    def update_profile(
        self,
        user_id: int,
        *,
        name: str,
        nic: Optional[str],
        date_of_birth: Optional[date],
        gender: Optional[str],
        mobile_number: Optional[str],
    ) -> bool:
        raise NotImplementedError

    def set_password_hash(self, user_id: int, password_hash: str) -> bool:
        raise NotImplementedError

    def set_fcm_token(self, user_id: int, token: Optional[str]) -> bool:
        raise NotImplementedError

    def set_membership_fee_status(self, user_id: int, status: MembershipFeeStatus) -> bool:
        raise NotImplementedError

    def delete_by_id(self, user_id: int) -> bool:
        raise NotImplementedError

    def list_all(self, *, status: Optional[UserStatus] = None) -> Sequence[User]:
        raise NotImplementedError

    def list_by_ids(self, user_ids: Sequence[int]) -> Sequence[User]:
        raise NotImplementedError


class PasswordResetTokenRepository(Protocol):
    def create(self, *, user_id: int, token_hash: str, expires_at: datetime) -> int:
        raise NotImplementedError

    def find_active(self, token_hash: str, now: datetime) -> Optional[PasswordResetToken]:
        """Unused token with this hash that has not expired at ``now``."""
        raise NotImplementedError

    def mark_used(self, token_id: int, used_at: datetime) -> bool:
        """Set ``used_at`` once. False when the token was already used."""
        raise NotImplementedError
