"""
Triage & reply workflow for the admin inbox.

Listing and replying are pure: they return new values and leave
persistence to the caller (FeedbackStore.replace).
"""

import logging
from datetime import datetime
from typing import Iterable, Optional, Union

from feedback_portal.exceptions import ValidationError
from feedback_portal.feedback.models import FeedbackRecord, FeedbackStatus, StatusFilter
from feedback_portal.suggestions.service import SuggestionService


logger = logging.getLogger(__name__)

# vi-VN style, as shown next to the reply in the inbox
REPLIED_AT_FORMAT = "%H:%M:%S %d/%m/%Y"

MSG_EMPTY_REPLY = "Nội dung phản hồi không được để trống"


def list_feedback(
    records: Iterable[FeedbackRecord],
    status_filter: Union[StatusFilter, str] = StatusFilter.ALL,
) -> list[FeedbackRecord]:
    """
    Records matching the filter, newest first.

    Records created at the same instant keep their relative order.
    """
    status_filter = StatusFilter(status_filter)
    matching = [r for r in records if status_filter.matches(r.status)]
    return sorted(matching, key=lambda r: r.created_at_dt, reverse=True)


def reply(record: FeedbackRecord, text: str, now: Optional[datetime] = None) -> FeedbackRecord:
    """
    Attach an admin reply and mark the record resolved.

    Replying to an already resolved record overwrites the previous reply.

    Raises:
        ValidationError: if the reply text is empty
    """
    text = (text or "").strip()
    if not text:
        raise ValidationError({"text": MSG_EMPTY_REPLY})

    if record.is_resolved:
        logger.info(f"Overwriting existing reply on feedback {record.id}")

    replied_at = (now or datetime.now()).strftime(REPLIED_AT_FORMAT)
    return record.with_reply(text, replied_at)


def request_suggestion(record: FeedbackRecord, service: SuggestionService) -> str:
    """Draft a reply for the record; always returns usable text."""
    return service.suggest(record.content, record.department)


def summarize(records: Iterable[FeedbackRecord]) -> dict:
    """Counts shown on the admin dashboard."""
    records = list(records)
    by_department = {}
    for record in records:
        by_department[record.department] = by_department.get(record.department, 0) + 1

    pending = sum(1 for r in records if r.status is FeedbackStatus.PENDING)
    return {
        "total": len(records),
        "pending": pending,
        "resolved": len(records) - pending,
        "by_department": by_department,
    }


def search(records: Iterable[FeedbackRecord], query: str) -> list[FeedbackRecord]:
    """Case-insensitive match on id, name, phone number and content."""
    query_lower = query.strip().lower()
    if not query_lower:
        return list(records)
    return [
        r for r in records
        if query_lower in r.id.lower()
        or query_lower in r.full_name.lower()
        or query_lower in (r.phone_number or "").lower()
        or query_lower in r.content.lower()
    ]
