from .base import Base
from .user import UserModel, UserRoleModel
from .invitation import TeacherInvitationModel
from .class_model import ClassModel, ClassMemberModel
from .child import ChildModel, ChildClassAssignmentModel
from .post import PostModel
from .lesson_plan import LessonPlanModel
from .attendance import AttendanceModel
from .timetable import TimetableEntryModel
from .report_card import ReportCardModel
from .audit_log import AuditLogModel

__all__ = [
    "Base",
    "UserModel",
    "UserRoleModel",
    "TeacherInvitationModel",
    "ClassModel",
    "ClassMemberModel",
    "ChildModel",
    "ChildClassAssignmentModel",
    "PostModel",
    "LessonPlanModel",
    "AttendanceModel",
    "TimetableEntryModel",
    "ReportCardModel",
    "AuditLogModel",
]
