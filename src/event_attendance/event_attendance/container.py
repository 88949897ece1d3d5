from __future__ import annotations

from dataclasses import dataclass

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository, MySQLSummaryRepository
from .attendance.repository import AttendanceRepository, SummaryRepository
from .attendance.service import AttendanceService
from .core.constants import DEFAULT_MINIMUM_MINUTES_PER_WEEK, DEFAULT_PASS_MARK, SUBMISSION_WINDOW_DAYS
from .database.connection import DBConfig, DatabaseConnection
from .database.transactions import InProcessTransactions, MySQLTransactions, TransactionManager
from .events.mysql_event_repository import MySQLEventRepository
from .events.repository import EventRepository
from .events.service import EventService
from .scoring.factory import ScoringStrategyFactory
from .sessions.mysql_session_repository import MySQLSessionRepository
from .sessions.repository import SessionRepository
from .sessions.service import SessionService
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import UserService


@dataclass(frozen=True)
class Container:
    users_repo: UserRepository
    events_repo: EventRepository
    sessions_repo: SessionRepository
    attendance_repo: AttendanceRepository
    summaries_repo: SummaryRepository

    attendance_service: AttendanceService
    session_service: SessionService
    event_service: EventService
    user_service: UserService


def wire_services(
    *,
    users_repo: UserRepository,
    events_repo: EventRepository,
    sessions_repo: SessionRepository,
    attendance_repo: AttendanceRepository,
    summaries_repo: SummaryRepository,
    transactions: TransactionManager | None = None,
    window_days: int = SUBMISSION_WINDOW_DAYS,
    default_pass_mark: int = DEFAULT_PASS_MARK,
    default_minimum_minutes: int = DEFAULT_MINIMUM_MINUTES_PER_WEEK,
) -> Container:
    # one lock table for every service in this process
    transactions = transactions if transactions is not None else InProcessTransactions()
    attendance_service = AttendanceService(
        attendance_repo,
        summaries_repo,
        sessions_repo,
        events_repo,
        users_repo,
        transactions=transactions,
        strategy_factory=ScoringStrategyFactory(),
        window_days=window_days,
    )
    session_service = SessionService(
        sessions_repo,
        events_repo,
        attendance_repo,
        attendance_service,
        transactions=transactions,
    )
    event_service = EventService(
        events_repo,
        attendance_repo,
        default_pass_mark=default_pass_mark,
        default_minimum_minutes=default_minimum_minutes,
    )
    user_service = UserService(users_repo)

    return Container(
        users_repo=users_repo,
        events_repo=events_repo,
        sessions_repo=sessions_repo,
        attendance_repo=attendance_repo,
        summaries_repo=summaries_repo,
        attendance_service=attendance_service,
        session_service=session_service,
        event_service=event_service,
        user_service=user_service,
    )


def build_container(*, db_config: dict, **settings) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_settings(db_config))

    return wire_services(
        users_repo=MySQLUserRepository(conn),
        events_repo=MySQLEventRepository(conn),
        sessions_repo=MySQLSessionRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        summaries_repo=MySQLSummaryRepository(conn),
        transactions=MySQLTransactions(conn),
        **settings,
    )
