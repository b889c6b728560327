"""
Feedback lifecycle - submission, storage and admin triage.

Records are created PENDING by the submission workflow, held by the
store, and resolved once an admin reply is attached.
"""

from feedback_portal.feedback.models import FeedbackRecord, FeedbackStatus, StatusFilter
from feedback_portal.feedback.storage import FeedbackStore, FileBlobStore, open_store
from feedback_portal.feedback.submission import SubmissionInput, submit

__all__ = [
    "FeedbackRecord",
    "FeedbackStatus",
    "StatusFilter",
    "FeedbackStore",
    "FileBlobStore",
    "open_store",
    "SubmissionInput",
    "submit",
]
