"""Dependency injection module for FastAPI.

This module provides dependency injection functions for FastAPI routes,
following Google Python Style Guide and FastAPI best practices.
"""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.orm import Session

from core.database import get_db
from generators.LearnerExtractor import LearnerExtractor
from generators.LessonPlanGenerator import LessonPlanGenerator
from utils import ai_gateway
from utils import attendance_manager
from utils import audit_log_manager
from utils import child_manager
from utils import class_manager
from utils import email_sender
from utils import invitation_manager
from utils import lesson_plan_manager
from utils import post_manager
from utils import report_card_manager
from utils import storage
from utils import timetable_manager
from utils import user_manager


def get_ai_gateway() -> ai_gateway.AIGateway:
    """Get the shared AIGateway; overridden in tests with a fake chat model."""
    return ai_gateway.get_ai_gateway()


def get_email_sender() -> email_sender.EmailSender:
    """Get an EmailSender configured from the SMTP settings."""
    return email_sender.EmailSender()


def get_blob_storage() -> storage.BlobStorage:
    return storage.BlobStorage()


def get_user_manager(db: Session = Depends(get_db)) -> user_manager.UserManager:
    """Get UserManager instance with request-scoped DB session.

    Args:
        db: Database session.

    Returns:
        UserManager instance.
    """
    return user_manager.UserManager(db)


def get_invitation_manager(
    db: Session = Depends(get_db),
    sender: email_sender.EmailSender = Depends(get_email_sender),
) -> invitation_manager.InvitationManager:
    """Get InvitationManager wired to the request's DB session and mailer.

    Args:
        db: Database session.
        sender: Transactional email sender.

    Returns:
        InvitationManager instance.
    """
    return invitation_manager.InvitationManager(
        db, user_manager=user_manager.UserManager(db), email_sender=sender
    )


def get_child_manager(
    db: Session = Depends(get_db),
    blob_storage: storage.BlobStorage = Depends(get_blob_storage),
) -> child_manager.ChildManager:
    """Get ChildManager with request-scoped DB session and blob storage."""
    return child_manager.ChildManager(db, storage=blob_storage)


def get_class_manager(db: Session = Depends(get_db)) -> class_manager.ClassManager:
    """Get ClassManager instance with request-scoped DB session."""
    return class_manager.ClassManager(db)


def get_post_manager(db: Session = Depends(get_db)) -> post_manager.PostManager:
    return post_manager.PostManager(db)


def get_lesson_plan_manager(
    db: Session = Depends(get_db),
) -> lesson_plan_manager.LessonPlanManager:
    return lesson_plan_manager.LessonPlanManager(db)


def get_attendance_manager(
    db: Session = Depends(get_db),
) -> attendance_manager.AttendanceManager:
    return attendance_manager.AttendanceManager(db)


def get_timetable_manager(
    db: Session = Depends(get_db),
) -> timetable_manager.TimetableManager:
    return timetable_manager.TimetableManager(db)


def get_report_card_manager(
    db: Session = Depends(get_db),
    blob_storage: storage.BlobStorage = Depends(get_blob_storage),
) -> report_card_manager.ReportCardManager:
    """Get ReportCardManager with request-scoped DB session and blob storage."""
    return report_card_manager.ReportCardManager(db, storage=blob_storage)


def get_audit_log_manager(
    db: Session = Depends(get_db),
) -> audit_log_manager.AuditLogManager:
    return audit_log_manager.AuditLogManager(db)


def get_learner_extractor(
    gateway: ai_gateway.AIGateway = Depends(get_ai_gateway),
) -> LearnerExtractor:
    return LearnerExtractor(gateway)


def get_lesson_plan_generator(
    gateway: ai_gateway.AIGateway = Depends(get_ai_gateway),
) -> LessonPlanGenerator:
    return LessonPlanGenerator(gateway)


# Type aliases for dependency injection
UserManagerDep = Annotated[
    user_manager.UserManager, Depends(get_user_manager)
]
InvitationManagerDep = Annotated[
    invitation_manager.InvitationManager, Depends(get_invitation_manager)
]
ChildManagerDep = Annotated[
    child_manager.ChildManager, Depends(get_child_manager)
]
ClassManagerDep = Annotated[
    class_manager.ClassManager, Depends(get_class_manager)
]
PostManagerDep = Annotated[
    post_manager.PostManager, Depends(get_post_manager)
]
LessonPlanManagerDep = Annotated[
    lesson_plan_manager.LessonPlanManager, Depends(get_lesson_plan_manager)
]
AttendanceManagerDep = Annotated[
    attendance_manager.AttendanceManager, Depends(get_attendance_manager)
]
TimetableManagerDep = Annotated[
    timetable_manager.TimetableManager, Depends(get_timetable_manager)
]
ReportCardManagerDep = Annotated[
    report_card_manager.ReportCardManager, Depends(get_report_card_manager)
]
AuditLogManagerDep = Annotated[
    audit_log_manager.AuditLogManager, Depends(get_audit_log_manager)
]
LearnerExtractorDep = Annotated[
    LearnerExtractor, Depends(get_learner_extractor)
]
LessonPlanGeneratorDep = Annotated[
    LessonPlanGenerator, Depends(get_lesson_plan_generator)
]
