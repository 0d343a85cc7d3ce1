from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from flask_mail import Mail

from .ai.assistant import AssistantService
from .ai.client import GeminiClient
from .ai.flows import JsonModel
from .attendance.factory import CheckInPolicyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.offline_queue import OfflineAttendanceQueue
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .communication.service import CommunicationService
from .core.constants import DEFAULT_ATTENDANCE_RADIUS_METERS, DEFAULT_PASSWORD_RESET_MAX_AGE_SECONDS
from .database.connection import DBConfig, DatabaseConnection
from .documents.mysql_document_repository import MySQLDocumentRepository
from .documents.repository import DocumentRepository
from .documents.service import DocumentService
from .documents.storage import LocalDocumentStorage
from .events.mysql_event_repository import MySQLEventRepository
from .events.repository import EventRepository
from .events.service import EventService
from .finance.mysql_transaction_repository import MySQLTransactionRepository
from .finance.repository import TransactionRepository
from .finance.service import FinanceService
from .groups.mysql_group_repository import MySQLGroupRepository
from .groups.repository import GroupRepository
from .groups.service import GroupService
from .integrations.mail import FlaskMailer, Mailer
from .integrations.push import FirebasePushSender, PushSender
from .integrations.sheets import GoogleUserSheet, UserSheet
from .points.mysql_points_repository import MySQLPointsRepository
from .points.repository import PointsRepository
from .points.service import PointsService
from .project_ideas.mysql_project_idea_repository import MySQLProjectIdeaRepository
from .project_ideas.repository import ProjectIdeaRepository
from .project_ideas.service import ProjectIdeaService
from .reports.service import ReportService
from .tasks.mysql_task_repository import MySQLTaskRepository
from .tasks.repository import TaskRepository
from .tasks.service import TaskService
from .users.mysql_reset_token_repository import MySQLPasswordResetTokenRepository
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import PasswordResetTokenRepository, UserRepository
from .users.service import AuthService, UserService


@dataclass(frozen=True)
class Repositories:
    users: UserRepository
    reset_tokens: PasswordResetTokenRepository
    events: EventRepository
    attendance: AttendanceRepository
    points: PointsRepository
    transactions: TransactionRepository
    project_ideas: ProjectIdeaRepository
    tasks: TaskRepository
    documents: DocumentRepository
    groups: GroupRepository


@dataclass(frozen=True)
class Integrations:
    mailer: Mailer
    push: PushSender
    user_sheet: UserSheet
    ai: JsonModel
    offline_queue: Optional[OfflineAttendanceQueue]
    storage: LocalDocumentStorage


@dataclass(frozen=True)
class Container:
    settings: Dict[str, Any]
    repos: Repositories

    mailer: Mailer
    push: PushSender
    user_sheet: UserSheet
    ai: JsonModel

    auth_service: AuthService
    user_service: UserService
    event_service: EventService
    attendance_service: AttendanceService
    points_service: PointsService
    finance_service: FinanceService
    project_idea_service: ProjectIdeaService
    task_service: TaskService
    document_service: DocumentService
    group_service: GroupService
    communication_service: CommunicationService
    report_service: ReportService
    assistant_service: AssistantService


def wire(*, settings: Dict[str, Any], repos: Repositories, integrations: Integrations) -> Container:
    """Build every service on top of the given repositories and outside services."""
    auth_service = AuthService(
        repos.users,
        reset_tokens=repos.reset_tokens,
        mailer=integrations.mailer,
        reset_max_age=int(settings.get("PASSWORD_RESET_MAX_AGE_SECONDS", DEFAULT_PASSWORD_RESET_MAX_AGE_SECONDS)),
    )
    user_service = UserService(repos.users)
    event_service = EventService(repos.events)
    attendance_service = AttendanceService(
        repos.attendance,
        repos.events,
        repos.users,
        policy_factory=CheckInPolicyFactory(
            radius_meters=float(settings.get("ATTENDANCE_RADIUS_METERS", DEFAULT_ATTENDANCE_RADIUS_METERS))
        ),
        offline_queue=integrations.offline_queue,
    )
    points_service = PointsService(repos.points, repos.users, repos.attendance)
    finance_service = FinanceService(repos.transactions)
    project_idea_service = ProjectIdeaService(repos.project_ideas, integrations.ai)
    task_service = TaskService(repos.tasks)
    document_service = DocumentService(repos.documents, integrations.storage)
    group_service = GroupService(repos.groups)
    communication_service = CommunicationService(
        mailer=integrations.mailer, users=user_service, groups=group_service, ai=integrations.ai
    )
    report_service = ReportService(
        users=user_service,
        events=event_service,
        attendance=attendance_service,
        finance=finance_service,
        points=points_service,
        tasks=task_service,
    )
    assistant_service = AssistantService(event_service, integrations.ai)

    return Container(
        settings=dict(settings),
        repos=repos,
        mailer=integrations.mailer,
        push=integrations.push,
        user_sheet=integrations.user_sheet,
        ai=integrations.ai,
        auth_service=auth_service,
        user_service=user_service,
        event_service=event_service,
        attendance_service=attendance_service,
        points_service=points_service,
        finance_service=finance_service,
        project_idea_service=project_idea_service,
        task_service=task_service,
        document_service=document_service,
        group_service=group_service,
        communication_service=communication_service,
        report_service=report_service,
        assistant_service=assistant_service,
    )


def build_container(*, db_config: dict, settings: Dict[str, Any], mail: Mail) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    repos = Repositories(
        users=MySQLUserRepository(conn),
        reset_tokens=MySQLPasswordResetTokenRepository(conn),
        events=MySQLEventRepository(conn),
        attendance=MySQLAttendanceRepository(conn),
        points=MySQLPointsRepository(conn),
        transactions=MySQLTransactionRepository(conn),
        project_ideas=MySQLProjectIdeaRepository(conn),
        tasks=MySQLTaskRepository(conn),
        documents=MySQLDocumentRepository(conn),
        groups=MySQLGroupRepository(conn),
    )

    queue_path = settings.get("OFFLINE_QUEUE_PATH")
    integrations = Integrations(
        mailer=FlaskMailer(mail, enabled=bool(settings.get("MAIL_ENABLED", True))),
        push=FirebasePushSender(settings.get("FIREBASE_CREDENTIALS_PATH")),
        user_sheet=GoogleUserSheet(
            sheet_id=settings.get("GOOGLE_SHEET_ID"),
            client_email=settings.get("GOOGLE_SERVICE_ACCOUNT_EMAIL"),
            private_key=settings.get("GOOGLE_PRIVATE_KEY"),
        ),
        ai=GeminiClient(
            settings.get("GEMINI_API_KEY"),
            model=settings.get("GEMINI_MODEL", "gemini-1.5-flash"),
            timeout=float(settings.get("AI_TIMEOUT_SECONDS", 30)),
        ),
        offline_queue=OfflineAttendanceQueue(queue_path) if queue_path else None,
        storage=LocalDocumentStorage(settings.get("UPLOAD_FOLDER", "instance/uploads")),
    )

    return wire(settings=settings, repos=repos, integrations=integrations)
