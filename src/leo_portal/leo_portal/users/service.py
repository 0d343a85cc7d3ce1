from __future__ import annotations

import hashlib
import logging
import secrets
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Optional, Tuple

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.datetime_utils import now_local, parse_iso_date
from ..common.validators import require_email, require_min_length, require_non_empty
from ..communication import emails
from ..core.constants import DEFAULT_PASSWORD_RESET_MAX_AGE_SECONDS, PLACEHOLDER_PHOTO_URL
from ..core.enums import MembershipFeeStatus, Role, UserStatus
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    IntegrationError,
    NotFoundError,
    ValidationError,
)
from ..integrations.mail import Mailer
from ..triggers import signals
from .model import PasswordResetToken, User
from .repository import PasswordResetTokenRepository, UserRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionUser:
    """What we store into Flask session after login."""

    user_id: int
    name: str
    role: Role


def _hash_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def _require_admin(role: Role) -> None:
    if not role.is_admin:
        raise AuthorizationError("You do not have permission to do that")


class AuthService:
    """Use case: signup, login and password reset."""

    def __init__(
        self,
        users: UserRepository,
        *,
        reset_tokens: Optional[PasswordResetTokenRepository] = None,
        mailer: Optional[Mailer] = None,
        reset_max_age: int = DEFAULT_PASSWORD_RESET_MAX_AGE_SECONDS,
    ):
        self._users = users
        self._reset_tokens = reset_tokens
        self._mailer = mailer
        self._reset_max_age = int(reset_max_age)

    def signup(self, *, name: str, email: str, password: str) -> int:
        name = require_min_length(name, "Name", 2)
        email = require_email(email)
        require_min_length(password, "Password", 6)

        if self._users.get_by_email(email):
            raise ValidationError("An account with this email already exists")

        user_id = self._users.create_user(
            name=name,
            email=email,
            password_hash=generate_password_hash(password),
            photo_url=PLACEHOLDER_PHOTO_URL,
            role=Role.MEMBER,
            status=UserStatus.PENDING,
        )
        logger.info("New signup user_id=%s awaiting approval", user_id)

        user = self._users.get_by_id(user_id)
        if user:
            signals.user_changed.send(self, user=user)
        return user_id

    def authenticate(self, email: str, password: str) -> SessionUser:
        user = self._users.get_by_email(email or "")
        if not user:
            raise AuthenticationError("Invalid email or password")

        try:
            ok = check_password_hash(user.password_hash, password or "")
        except ValueError:
            # e.g. placeholder or corrupted hashes
            ok = False
        if not ok:
            raise AuthenticationError("Invalid email or password")

        if user.status == UserStatus.PENDING:
            raise AuthenticationError("Your account is awaiting admin approval")
        if user.status == UserStatus.REJECTED:
            raise AuthenticationError("Your account request was declined")

        return SessionUser(user_id=user.user_id, name=user.name, role=user.role)

    def _token_store(self) -> PasswordResetTokenRepository:
        if self._reset_tokens is None or self._mailer is None:
            raise IntegrationError("Password reset is not configured")
        return self._reset_tokens

    def request_password_reset(self, email: str, *, base_url: str, now: datetime | None = None) -> bool:
        """Email a one-time reset link when the address belongs to an account.

        Returns whether a link went out. Callers show the same message either
        way so the form never tells which addresses are registered.
        """
        email = require_email(email)
        store = self._token_store()
        user = self._users.get_by_email(email)
        if not user or user.status == UserStatus.REJECTED:
            logger.info("Password reset requested for an address with no active account")
            return False

        token = secrets.token_urlsafe(32)
        store.create(
            user_id=user.user_id,
            token_hash=_hash_token(token),
            expires_at=(now or now_local()) + timedelta(seconds=self._reset_max_age),
        )
        link = f"{base_url.rstrip('/')}/reset-password/{token}"
        subject, html = emails.password_reset_message(user.name, link, self._reset_max_age // 60)
        sent = self._mailer.send(to=[user.email], subject=subject, html=html)
        logger.info("Password reset link user_id=%s sent=%s", user.user_id, sent)
        return sent

    def _active_token(self, token: str, now: datetime) -> Tuple[PasswordResetToken, User]:
        stored = self._token_store().find_active(_hash_token(token or ""), now)
        user = self._users.get_by_id(stored.user_id) if stored else None
        if not stored or not user:
            raise ValidationError("This reset link is invalid or has expired")
        return stored, user

    def user_for_reset_token(self, token: str, *, now: datetime | None = None) -> User:
        return self._active_token(token, now or now_local())[1]

    def reset_password(self, token: str, new_password: str, *, now: datetime | None = None) -> User:
        now = now or now_local()
        stored, user = self._active_token(token, now)
        require_min_length(new_password, "Password", 6)

        if not self._reset_tokens.mark_used(stored.token_id, now):
            raise ValidationError("This reset link has already been used")
        self._users.set_password_hash(user.user_id, generate_password_hash(new_password))
        logger.info("Password reset user_id=%s", user.user_id)
        return self._users.get_by_id(user.user_id)


class UserService:
    """Use case: member directory, approvals and profile management."""

    def __init__(self, users: UserRepository):
        self._users = users

    def get(self, user_id: int) -> User:
        user = self._users.get_by_id(user_id)
        if not user:
            raise NotFoundError("Member not found")
        return user

    def list_users(self, *, status: Optional[UserStatus] = None):
        return self._users.list_all(status=status)

    def list_pending(self):
        return self._users.list_all(status=UserStatus.PENDING)

    def list_approved(self):
        return self._users.list_all(status=UserStatus.APPROVED)

    def list_admins(self):
        return [u for u in self._users.list_all(status=UserStatus.APPROVED) if u.is_admin]

    def list_by_ids(self, user_ids):
        return self._users.list_by_ids(list(user_ids))

    def approve(self, *, current_role: Role, user_id: int) -> User:
        _require_admin(current_role)
        user = self.get(user_id)
        if user.status != UserStatus.PENDING:
            raise ValidationError("Only pending accounts can be approved")

        self._users.set_status(user_id, UserStatus.APPROVED)
        approved = self.get(user_id)
        logger.info("Approved user_id=%s", user_id)
        signals.user_approved.send(self, user=approved)
        signals.user_changed.send(self, user=approved)
        return approved

    def reject(self, *, current_role: Role, user_id: int) -> None:
        """Reject a pending signup. The account is removed once the notice is sent."""
        _require_admin(current_role)
        user = self.get(user_id)
        if user.status != UserStatus.PENDING:
            raise ValidationError("Only pending accounts can be rejected")

        self._users.set_status(user_id, UserStatus.REJECTED)
        rejected = self.get(user_id)
        signals.user_rejected.send(self, user=rejected)

        self._users.delete_by_id(user_id)
        logger.info("Rejected and removed user_id=%s", user_id)
        signals.user_deleted.send(self, user_id=user_id)

    def update_member(
        self,
        *,
        current_role: Role,
        user_id: int,
        name: str,
        role: Role,
        designation: Optional[str],
    ) -> User:
        _require_admin(current_role)
        self.get(user_id)
        name = require_min_length(name, "Name", 2)
        if role == Role.SUPER_ADMIN and current_role != Role.SUPER_ADMIN:
            raise AuthorizationError("Only a super admin can grant super admin")

        self._users.update_admin_fields(user_id, name=name, role=role, designation=(designation or "").strip() or None)
        updated = self.get(user_id)
        signals.user_changed.send(self, user=updated)
        return updated

    def update_own_profile(
        self,
        *,
        user_id: int,
        name: str,
        nic: Optional[str] = None,
        date_of_birth: Optional[str | date] = None,
        gender: Optional[str] = None,
        mobile_number: Optional[str] = None,
    ) -> User:
        self.get(user_id)
        name = require_min_length(name, "Name", 2)

        dob: Optional[date]
        if isinstance(date_of_birth, str) and date_of_birth.strip():
            try:
                dob = parse_iso_date(date_of_birth.strip())
            except ValueError:
                raise ValidationError("Date of birth must be YYYY-MM-DD")
        elif isinstance(date_of_birth, date):
            dob = date_of_birth
        else:
            dob = None

        mobile = (mobile_number or "").strip() or None
        if mobile and not mobile.lstrip("+").isdigit():
            raise ValidationError("Mobile number may contain digits only")

        self._users.update_profile(
            user_id,
            name=name,
            nic=(nic or "").strip() or None,
            date_of_birth=dob,
            gender=(gender or "").strip() or None,
            mobile_number=mobile,
        )
        updated = self.get(user_id)
        signals.user_changed.send(self, user=updated)
        return updated

    def register_push_token(self, *, user_id: int, token: str) -> None:
        token = require_non_empty(token, "Push token")
        self._users.set_fcm_token(user_id, token)

    def set_fee_status(self, *, current_role: Role, user_id: int, status: MembershipFeeStatus) -> None:
        _require_admin(current_role)
        self.get(user_id)
        self._users.set_membership_fee_status(user_id, status)

    def delete(self, *, current_role: Role, user_id: int) -> None:
        _require_admin(current_role)
        user = self.get(user_id)
        if user.role == Role.SUPER_ADMIN:
            raise ValidationError("A super admin account cannot be deleted")
        if not self._users.delete_by_id(user_id):
            raise ValidationError("Could not delete member")
        signals.user_deleted.send(self, user_id=user_id)

    def members_with_birthday(self, today: date):
        return [
            u
            for u in self._users.list_all(status=UserStatus.APPROVED)
            if u.date_of_birth and (u.date_of_birth.month, u.date_of_birth.day) == (today.month, today.day)
        ]

    def members_with_pending_fees(self):
        return [
            u
            for u in self._users.list_all(status=UserStatus.APPROVED)
            if u.membership_fee_status == MembershipFeeStatus.PENDING
        ]
