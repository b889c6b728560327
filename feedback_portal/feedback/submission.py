"""
Submission workflow - turns citizen input into a new feedback record.

Validation is local and synchronous. Nothing in this module touches
storage or the network; the caller appends the returned record to the
store.
"""

import secrets
import string
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable, Optional

from feedback_portal.config import DEPARTMENTS, ID_LENGTH, MAX_IMAGES
from feedback_portal.exceptions import ValidationError
from feedback_portal.feedback.models import FeedbackRecord, FeedbackStatus


ID_ALPHABET = string.digits + string.ascii_uppercase
MAX_ID_ATTEMPTS = 20

# Messages shown next to the offending form field
MSG_REQUIRED = "Vui lòng nhập thông tin này"
MSG_DEPARTMENT = "Khoa không hợp lệ"
MSG_TOO_MANY_IMAGES = f"Chỉ được đính kèm tối đa {MAX_IMAGES} ảnh"
MSG_EMPTY_IMAGE = "Ảnh đính kèm không hợp lệ"


@dataclass
class SubmissionInput:
    """What a citizen fills in on the public form."""
    full_name: str
    department: str
    content: str
    phone_number: Optional[str] = None
    date: Optional[str] = None
    time: Optional[str] = None
    images: list[str] = field(default_factory=list)


def generate_id(length: int = ID_LENGTH) -> str:
    """Random short id from digits and uppercase letters."""
    return "".join(secrets.choice(ID_ALPHABET) for _ in range(length))


def validate(data: SubmissionInput, departments: Iterable[str] = DEPARTMENTS) -> dict[str, str]:
    """Return a field -> message map of every problem found (empty when valid)."""
    errors = {}

    if not (data.full_name or "").strip():
        errors["fullName"] = MSG_REQUIRED

    department = (data.department or "").strip()
    if not department:
        errors["department"] = MSG_REQUIRED
    elif department not in set(departments):
        errors["department"] = MSG_DEPARTMENT

    if not (data.content or "").strip():
        errors["content"] = MSG_REQUIRED

    images = data.images or []
    if len(images) > MAX_IMAGES:
        errors["images"] = MSG_TOO_MANY_IMAGES
    elif any(not isinstance(img, str) or not img.strip() for img in images):
        errors["images"] = MSG_EMPTY_IMAGE

    return errors


def submit(
    data: SubmissionInput,
    existing_ids: Optional[Iterable[str]] = None,
    now: Optional[datetime] = None,
    departments: Iterable[str] = DEPARTMENTS,
) -> FeedbackRecord:
    """
    Validate citizen input and build a new PENDING record.

    Args:
        data: The submitted form
        existing_ids: Ids already in use; a colliding id is regenerated
        now: Submission time (defaults to the current time)
        departments: Accepted department names

    Returns:
        The new record, not yet stored

    Raises:
        ValidationError: if any required field is missing or invalid
    """
    errors = validate(data, departments)
    if errors:
        raise ValidationError(errors)

    now = now or datetime.now(timezone.utc)
    local_now = now.astimezone()
    taken = set(existing_ids or ())

    feedback_id = generate_id()
    attempts = 1
    while feedback_id in taken:
        if attempts >= MAX_ID_ATTEMPTS:
            raise RuntimeError(f"Could not generate a free feedback id after {attempts} attempts")
        feedback_id = generate_id()
        attempts += 1

    phone = (data.phone_number or "").strip() or None

    return FeedbackRecord(
        id=feedback_id,
        full_name=data.full_name.strip(),
        phone_number=phone,
        department=data.department.strip(),
        content=data.content.strip(),
        date=(data.date or "").strip() or local_now.strftime("%Y-%m-%d"),
        time=(data.time or "").strip() or local_now.strftime("%H:%M"),
        images=tuple(data.images or ()),
        status=FeedbackStatus.PENDING,
        created_at=now.isoformat(),
    )
