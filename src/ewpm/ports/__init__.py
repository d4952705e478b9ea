"""Ports - interfaces/protocols for external dependencies."""

from .assignment_repo import AssignmentRepository
from .payment_repo import PaymentRepository
from .profile_directory import ProfileDirectory
from .rating_repo import RatingRepository
from .project_repo import ProjectRepository
from .meeting_repo import MeetingRepository
from .email_sender import EmailSender
from .archive_store import ArchiveStore

__all__ = [
    "AssignmentRepository",
    "PaymentRepository",
    "ProfileDirectory",
    "RatingRepository",
    "ProjectRepository",
    "MeetingRepository",
    "EmailSender",
    "ArchiveStore",
]
