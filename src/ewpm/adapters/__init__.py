"""Adapters - I/O implementations of ports."""

from .supabase_rest import SupabaseClient
from .supabase_tables import (
    SupabaseAssignmentRepository,
    SupabaseMeetingRepository,
    SupabasePaymentRepository,
    SupabaseProfileDirectory,
    SupabaseProjectRepository,
    SupabaseRatingRepository,
)
from .resend_email import LoggingEmailSender, ResendEmailSender
from .file_archive import FileArchiveStore

__all__ = [
    "SupabaseClient",
    "SupabaseAssignmentRepository",
    "SupabasePaymentRepository",
    "SupabaseProfileDirectory",
    "SupabaseRatingRepository",
    "SupabaseProjectRepository",
    "SupabaseMeetingRepository",
    "ResendEmailSender",
    "LoggingEmailSender",
    "FileArchiveStore",
]
