from __future__ import annotations

from dataclasses import dataclass

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.service import AttendanceService
from .complaints.mysql_complaint_repository import MySQLComplaintRepository
from .complaints.service import ComplaintService
from .core.constants import DEFAULT_BULK_MARK_WORKERS
from .database.connection import DBConfig, DatabaseConnection
from .mess.mysql_mess_repository import MySQLMessMenuRepository
from .mess.service import MessMenuService
from .notices.mysql_notice_repository import MySQLNoticeRepository
from .notices.service import NoticeService
from .notifications.service import NotificationService
from .profiles.mysql_profile_repository import MySQLProfileRepository
from .profiles.service import ProfileService, RoleService
from .rooms.mysql_room_repository import MySQLRoomRepository
from .rooms.service import RoomService
from .session.mysql_account_repository import MySQLAccountRepository
from .session.service import AuthService


@dataclass(frozen=True)
class Container:
    auth_service: AuthService
    profile_service: ProfileService
    role_service: RoleService
    attendance_service: AttendanceService
    room_service: RoomService
    complaint_service: ComplaintService
    mess_service: MessMenuService
    notice_service: NoticeService
    notification_service: NotificationService


def build_container(*, db_config: dict, bulk_mark_workers: int = DEFAULT_BULK_MARK_WORKERS) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    accounts_repo = MySQLAccountRepository(conn)
    profiles_repo = MySQLProfileRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn)
    rooms_repo = MySQLRoomRepository(conn)
    complaints_repo = MySQLComplaintRepository(conn)
    menus_repo = MySQLMessMenuRepository(conn)
    notices_repo = MySQLNoticeRepository(conn)

    notifications = NotificationService()

    return Container(
        auth_service=AuthService(accounts_repo, profiles_repo),
        profile_service=ProfileService(profiles_repo),
        role_service=RoleService(profiles_repo, notifications),
        attendance_service=AttendanceService(attendance_repo, profiles_repo, bulk_workers=bulk_mark_workers),
        room_service=RoomService(rooms_repo, notifications),
        complaint_service=ComplaintService(complaints_repo, notifications),
        mess_service=MessMenuService(menus_repo),
        notice_service=NoticeService(notices_repo),
        notification_service=notifications,
    )
