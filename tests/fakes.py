from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from typing import Dict, List, Optional

from src.leo_portal.leo_portal.attendance.model import AttendanceRecord, NewAttendance
from src.leo_portal.leo_portal.core.enums import (
    AttendanceStatus,
    AttendanceType,
    MembershipFeeStatus,
    Role,
    UserStatus,
)
from src.leo_portal.leo_portal.core.exceptions import ConflictError
from src.leo_portal.leo_portal.documents.model import Document
from src.leo_portal.leo_portal.events.model import Event
from src.leo_portal.leo_portal.finance.model import Transaction
from src.leo_portal.leo_portal.groups.model import CommunicationGroup
from src.leo_portal.leo_portal.points.model import MonthlyPoints, PointsEntry
from src.leo_portal.leo_portal.project_ideas.model import ProjectIdea
from src.leo_portal.leo_portal.tasks.model import Task, TaskComment
from src.leo_portal.leo_portal.users.model import PasswordResetToken, User


def make_user(
    user_id: int,
    name: str = "Member",
    *,
    email: Optional[str] = None,
    role: Role = Role.MEMBER,
    status: UserStatus = UserStatus.APPROVED,
    designation: Optional[str] = None,
    date_of_birth: Optional[date] = None,
    fee: MembershipFeeStatus = MembershipFeeStatus.PENDING,
    fcm_token: Optional[str] = None,
    password_hash: str = "!",
) -> User:
    return User(
        user_id=user_id,
        name=name,
        email=email or f"user{user_id}@leo.test",
        password_hash=password_hash,
        role=role,
        status=status,
        designation=designation,
        date_of_birth=date_of_birth,
        membership_fee_status=fee,
        fcm_token=fcm_token,
    )


def make_event(
    event_id: int,
    name: str = "Beach Cleanup",
    *,
    start_at: datetime = datetime(2026, 3, 14, 9, 0),
    latitude: Optional[float] = None,
    longitude: Optional[float] = None,
    points: int = 0,
) -> Event:
    return Event(
        event_id=event_id,
        name=name,
        start_at=start_at,
        end_at=None,
        location="Mount Lavinia",
        description="Clean the beach with the district clubs",
        latitude=latitude,
        longitude=longitude,
        points=points,
    )


class InMemoryUsers:
    def __init__(self, users=()):
        self.users: Dict[int, User] = {u.user_id: u for u in users}
        self._id = max(self.users, default=0)

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self.users.get(user_id)

    def get_by_email(self, email: str) -> Optional[User]:
        email = (email or "").strip().lower()
        return next((u for u in self.users.values() if u.email.lower() == email), None)

    def create_user(self, *, name, email, password_hash, photo_url, role, status, designation=None) -> int:
        self._id += 1
        self.users[self._id] = User(
            user_id=self._id,
            name=name,
            email=email,
            password_hash=password_hash,
            role=role,
            status=status,
            photo_url=photo_url,
            designation=designation,
        )
        return self._id

    def _patch(self, user_id: int, **changes) -> bool:
        if user_id not in self.users:
            return False
        self.users[user_id] = replace(self.users[user_id], **changes)
        return True

    def set_status(self, user_id, status) -> bool:
        return self._patch(user_id, status=status)

    def set_password_hash(self, user_id, password_hash) -> bool:
        return self._patch(user_id, password_hash=password_hash)

    def update_admin_fields(self, user_id, *, name, role, designation) -> bool:
        return self._patch(user_id, name=name, role=role, designation=designation)

    def update_profile(self, user_id, *, name, nic, date_of_birth, gender, mobile_number) -> bool:
        return self._patch(
            user_id, name=name, nic=nic, date_of_birth=date_of_birth, gender=gender, mobile_number=mobile_number
        )

    def set_fcm_token(self, user_id, token) -> bool:
        return self._patch(user_id, fcm_token=token)

    def set_membership_fee_status(self, user_id, status) -> bool:
        return self._patch(user_id, membership_fee_status=status)

    def delete_by_id(self, user_id) -> bool:
        return self.users.pop(user_id, None) is not None

    def list_all(self, *, status=None) -> List[User]:
        items = [u for u in self.users.values() if status is None or u.status == status]
        return sorted(items, key=lambda u: u.name.lower())

    def list_by_ids(self, user_ids) -> List[User]:
        return [self.users[i] for i in user_ids if i in self.users]


class InMemoryResetTokens:
    def __init__(self):
        self.tokens: Dict[int, PasswordResetToken] = {}

    def create(self, *, user_id, token_hash, expires_at) -> int:
        token_id = len(self.tokens) + 1
        self.tokens[token_id] = PasswordResetToken(
            token_id=token_id, user_id=user_id, token_hash=token_hash, expires_at=expires_at
        )
        return token_id

    def find_active(self, token_hash, now):
        return next(
            (
                t
                for t in self.tokens.values()
                if t.token_hash == token_hash and t.used_at is None and t.expires_at > now
            ),
            None,
        )

    def mark_used(self, token_id, used_at) -> bool:
        token = self.tokens.get(token_id)
        if token is None or token.used_at is not None:
            return False
        self.tokens[token_id] = replace(token, used_at=used_at)
        return True


class InMemoryEvents:
    def __init__(self, events=()):
        self.events: Dict[int, Event] = {e.event_id: e for e in events}
        self._id = max(self.events, default=0)

    def get_by_id(self, event_id):
        return self.events.get(event_id)

    def list_all(self):
        return sorted(self.events.values(), key=lambda e: e.start_at, reverse=True)

    def list_upcoming(self, *, now, limit):
        items = sorted((e for e in self.events.values() if e.start_at >= now), key=lambda e: e.start_at)
        return items[:limit]

    def list_between(self, start, end):
        return sorted((e for e in self.events.values() if start <= e.start_at < end), key=lambda e: e.start_at)

    def create_event(self, *, created_by, **fields) -> int:
        self._id += 1
        self.events[self._id] = Event(event_id=self._id, created_by=created_by, **fields)
        return self._id

    def update_event(self, event_id, **fields) -> bool:
        if event_id not in self.events:
            return False
        self.events[event_id] = replace(self.events[event_id], **fields)
        return True

    def delete_by_id(self, event_id) -> bool:
        return self.events.pop(event_id, None) is not None


class InMemoryAttendance:
    """Enforces the same uniqueness as the unique keys in the schema."""

    def __init__(self):
        self.records: Dict[int, AttendanceRecord] = {}
        self._id = 0
        self.fail_with: Optional[Exception] = None

    def _to_record(self, new: NewAttendance) -> AttendanceRecord:
        self._id += 1
        return AttendanceRecord(
            attendance_id=self._id,
            event_id=new.event_id,
            attendance_type=new.attendance_type,
            status=AttendanceStatus.PRESENT,
            marked_at=new.marked_at,
            user_id=new.user_id,
            marked_latitude=new.marked_latitude,
            marked_longitude=new.marked_longitude,
            visitor_name=new.visitor_name,
            visitor_designation=new.visitor_designation,
            visitor_club=new.visitor_club,
            visitor_comment=new.visitor_comment,
            client_id=new.client_id,
        )

    @staticmethod
    def _key(r: AttendanceRecord) -> tuple:
        if r.attendance_type == AttendanceType.VISITOR:
            return (r.event_id, "visitor", (r.visitor_name or "").strip().lower())
        return (r.event_id, "member", r.user_id)

    def _is_duplicate(self, new: NewAttendance) -> bool:
        return any(self._key(r) == new.attendee_key for r in self.records.values())

    def get_by_id(self, attendance_id):
        return self.records.get(attendance_id)

    def get_for_event_and_user(self, event_id, user_id):
        return next(
            (
                r
                for r in self.records.values()
                if r.event_id == event_id and r.user_id == user_id and r.attendance_type == AttendanceType.MEMBER
            ),
            None,
        )

    def find_visitor(self, event_id, visitor_name):
        name = visitor_name.strip().lower()
        return next(
            (
                r
                for r in self.records.values()
                if r.event_id == event_id
                and r.attendance_type == AttendanceType.VISITOR
                and (r.visitor_name or "").lower() == name
            ),
            None,
        )

    def create(self, record: NewAttendance) -> int:
        if self.fail_with is not None:
            raise self.fail_with
        if self._is_duplicate(record):
            raise ConflictError("Attendance already marked for this event")
        stored = self._to_record(record)
        self.records[stored.attendance_id] = stored
        return stored.attendance_id

    def bulk_create(self, records) -> int:
        if self.fail_with is not None:
            raise self.fail_with
        inserted = 0
        for new in records:
            if self._is_duplicate(new):
                continue
            stored = self._to_record(new)
            self.records[stored.attendance_id] = stored
            inserted += 1
        return inserted

    def list_for_user(self, user_id):
        return [r for r in self.list_all() if r.user_id == user_id]

    def list_for_event(self, event_id):
        return [r for r in self.list_all() if r.event_id == event_id]

    def list_all(self):
        return sorted(self.records.values(), key=lambda r: r.marked_at, reverse=True)

    def list_between(self, start, end):
        return [r for r in self.list_all() if start <= r.marked_at < end]

    def count_by_user(self):
        counts: Dict[int, int] = {}
        for r in self.records.values():
            if r.attendance_type == AttendanceType.MEMBER and r.user_id is not None:
                counts[r.user_id] = counts.get(r.user_id, 0) + 1
        return counts


class InMemoryPoints:
    def __init__(self):
        self.entries: Dict[int, PointsEntry] = {}
        self.monthly: Dict[tuple, MonthlyPoints] = {}
        self._id = 0

    def add_entry(self, *, user_id, user_name, entry_date, description, points, category, added_by, event_id=None):
        self._id += 1
        self.entries[self._id] = PointsEntry(
            entry_id=self._id,
            user_id=user_id,
            user_name=user_name,
            entry_date=entry_date,
            description=description,
            points=points,
            category=category,
            added_by=added_by,
            event_id=event_id,
        )
        return self._id

    def list_entries(self, *, user_id=None):
        return [e for e in self.entries.values() if user_id is None or e.user_id == user_id]

    def delete_entry(self, entry_id) -> bool:
        return self.entries.pop(entry_id, None) is not None

    def total_for_user(self, user_id) -> int:
        return sum(e.points for e in self.entries.values() if e.user_id == user_id)

    def get_monthly(self, *, year, month):
        return [m for (y, mo, _), m in sorted(self.monthly.items()) if (y, mo) == (year, month)]

    def save_monthly_batch(self, rows) -> int:
        for row in rows:
            self.monthly[(row.year, row.month, row.user_id)] = row
        return len(rows)


class InMemoryTransactions:
    def __init__(self):
        self.items: Dict[int, Transaction] = {}
        self._id = 0

    def get_by_id(self, transaction_id):
        return self.items.get(transaction_id)

    def list_all(self, *, start=None, end=None):
        items = [
            t
            for t in self.items.values()
            if (start is None or t.tx_date >= start) and (end is None or t.tx_date <= end)
        ]
        return sorted(items, key=lambda t: (t.tx_date, t.transaction_id), reverse=True)

    def create(self, *, type, tx_date, amount, category, source, notes, created_by) -> int:
        self._id += 1
        self.items[self._id] = Transaction(
            transaction_id=self._id,
            type=type,
            tx_date=tx_date,
            amount=amount,
            category=category,
            source=source,
            notes=notes,
            created_by=created_by,
        )
        return self._id

    def update(self, transaction_id, **fields) -> bool:
        if transaction_id not in self.items:
            return False
        self.items[transaction_id] = replace(self.items[transaction_id], **fields)
        return True

    def delete_by_id(self, transaction_id) -> bool:
        return self.items.pop(transaction_id, None) is not None


class InMemoryProjectIdeas:
    def __init__(self):
        self.ideas: Dict[int, ProjectIdea] = {}
        self._id = 0

    def get_by_id(self, idea_id):
        return self.ideas.get(idea_id)

    def create(self, **fields) -> int:
        self._id += 1
        self.ideas[self._id] = ProjectIdea(idea_id=self._id, **fields)
        return self._id

    def update_content(self, idea_id, **fields) -> bool:
        if idea_id not in self.ideas:
            return False
        self.ideas[idea_id] = replace(self.ideas[idea_id], **fields)
        return True

    def set_status(self, idea_id, status, *, admin_comment=None, reviewed_by=None) -> bool:
        if idea_id not in self.ideas:
            return False
        self.ideas[idea_id] = replace(
            self.ideas[idea_id], status=status, admin_comment=admin_comment, reviewed_by=reviewed_by
        )
        return True

    def list_for_author(self, author_id):
        return [i for i in self.ideas.values() if i.author_id == author_id]

    def list_submitted(self):
        return [i for i in self.ideas.values() if i.status.value != "draft"]

    def delete_by_id(self, idea_id) -> bool:
        return self.ideas.pop(idea_id, None) is not None


class InMemoryTasks:
    def __init__(self):
        self.tasks: Dict[int, Task] = {}
        self.comments: List[TaskComment] = []
        self._id = 0

    def get_by_id(self, task_id):
        return self.tasks.get(task_id)

    def list_all(self):
        return list(self.tasks.values())

    def create(self, *, title, description, assignee_ids, event_id, priority, due_date, status, created_by) -> int:
        self._id += 1
        self.tasks[self._id] = Task(
            task_id=self._id,
            title=title,
            description=description,
            status=status,
            priority=priority,
            assignee_ids=tuple(assignee_ids),
            event_id=event_id,
            due_date=due_date,
            created_by=created_by,
        )
        return self._id

    def update(self, task_id, *, assignee_ids, **fields) -> bool:
        if task_id not in self.tasks:
            return False
        self.tasks[task_id] = replace(self.tasks[task_id], assignee_ids=tuple(assignee_ids), **fields)
        return True

    def set_status(self, task_id, status) -> bool:
        if task_id not in self.tasks:
            return False
        self.tasks[task_id] = replace(self.tasks[task_id], status=status)
        return True

    def set_checklist(self, task_id, items) -> bool:
        if task_id not in self.tasks:
            return False
        self.tasks[task_id] = replace(self.tasks[task_id], checklist=tuple(items))
        return True

    def delete_by_id(self, task_id) -> bool:
        return self.tasks.pop(task_id, None) is not None

    def add_comment(self, *, task_id, author_id, author_name, body) -> int:
        comment_id = len(self.comments) + 1
        self.comments.append(
            TaskComment(comment_id=comment_id, task_id=task_id, author_id=author_id, author_name=author_name, body=body)
        )
        return comment_id

    def list_comments(self, task_id):
        return [c for c in self.comments if c.task_id == task_id]


class InMemoryDocuments:
    def __init__(self):
        self.docs: Dict[int, Document] = {}
        self._id = 0

    def get_by_id(self, document_id):
        return self.docs.get(document_id)

    def list_all(self):
        return list(self.docs.values())

    def create(self, *, name, file_name, storage_path, content_type, size_bytes, uploaded_by) -> int:
        self._id += 1
        self.docs[self._id] = Document(
            document_id=self._id,
            name=name,
            file_name=file_name,
            storage_path=storage_path,
            content_type=content_type,
            size_bytes=size_bytes,
            uploaded_by=uploaded_by,
        )
        return self._id

    def delete_by_id(self, document_id) -> bool:
        return self.docs.pop(document_id, None) is not None


class InMemoryGroups:
    def __init__(self):
        self.groups: Dict[int, CommunicationGroup] = {}
        self._id = 0

    def get_by_id(self, group_id):
        return self.groups.get(group_id)

    def list_all(self):
        return sorted(self.groups.values(), key=lambda g: g.name.lower())

    def create(self, *, name, member_ids) -> int:
        self._id += 1
        self.groups[self._id] = CommunicationGroup(group_id=self._id, name=name, member_ids=tuple(member_ids))
        return self._id

    def update(self, group_id, *, name, member_ids) -> bool:
        if group_id not in self.groups:
            return False
        self.groups[group_id] = replace(self.groups[group_id], name=name, member_ids=tuple(member_ids))
        return True

    def delete_by_id(self, group_id) -> bool:
        return self.groups.pop(group_id, None) is not None


class RecordingMailer:
    def __init__(self, *, fail_for=()):
        self.sent: List[dict] = []
        self._fail_for = set(fail_for)

    def send(self, *, to, subject, html, text=None) -> bool:
        if set(to) & self._fail_for:
            return False
        self.sent.append({"to": list(to), "subject": subject, "html": html})
        return True


class RecordingPush:
    def __init__(self):
        self.sent: List[dict] = []

    def send(self, *, tokens, title, body, data=None) -> int:
        tokens = [t for t in tokens if t]
        if tokens:
            self.sent.append({"tokens": tokens, "title": title, "body": body})
        return len(tokens)


class RecordingSheet:
    def __init__(self):
        self.upserted: List[int] = []
        self.deleted: List[int] = []

    def upsert_user(self, user) -> None:
        self.upserted.append(user.user_id)

    def delete_user(self, user_id) -> None:
        self.deleted.append(user_id)


class CannedModel:
    """JsonModel returning a fixed payload and remembering the prompts."""

    def __init__(self, payload):
        self.payload = payload
        self.prompts: List[str] = []

    def generate_json(self, prompt):
        self.prompts.append(prompt)
        return self.payload


SAMPLE_PROPOSAL = {
    "project_idea": "A weekend tree planting drive with local schools.",
    "proposed_action_plan": {
        "objective": "Plant 200 saplings",
        "pre_event_plan": ["Get permits", "Buy saplings"],
        "execution_plan": "Plant in teams",
        "post_event_plan": ["Water schedule"],
    },
    "implementation_challenges": ["Rain"],
    "challenge_solutions": ["Backup date"],
    "community_involvement": ["Schools", " "],
    "pr_plan": [{"activity": "Poster", "date": "2026-04-01", "time": "10:00"}],
    "estimated_expenses": [{"item": "Saplings", "cost": 20000}],
    "resource_personals": ["Forest officer"],
}
