"""
Feedback record model.

Records are serialized with the camelCase keys used by the original
browser storage so previously saved collections stay readable.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from feedback_portal.config import MAX_IMAGES


class FeedbackStatus(str, Enum):
    """Lifecycle state of a feedback record."""
    PENDING = "PENDING"
    RESOLVED = "RESOLVED"


class StatusFilter(str, Enum):
    """Status filter used by the admin inbox."""
    ALL = "ALL"
    PENDING = "PENDING"
    RESOLVED = "RESOLVED"

    def matches(self, status: FeedbackStatus) -> bool:
        return self is StatusFilter.ALL or self.value == status.value


# Python attribute -> persisted key
_FIELD_KEYS = {
    "id": "id",
    "full_name": "fullName",
    "phone_number": "phoneNumber",
    "department": "department",
    "content": "content",
    "date": "date",
    "time": "time",
    "images": "images",
    "status": "status",
    "created_at": "createdAt",
    "admin_reply": "adminReply",
    "replied_at": "repliedAt",
}

_REQUIRED_KEYS = ("id", "fullName", "department", "content", "status", "createdAt")


@dataclass(frozen=True)
class FeedbackRecord:
    """A single citizen complaint or suggestion with its lifecycle state."""
    id: str
    full_name: str
    department: str
    content: str
    date: str
    time: str
    created_at: str
    status: FeedbackStatus = FeedbackStatus.PENDING
    phone_number: Optional[str] = None
    images: tuple[str, ...] = field(default_factory=tuple)
    admin_reply: Optional[str] = None
    replied_at: Optional[str] = None

    def __post_init__(self):
        # frozen: normalise through object.__setattr__
        object.__setattr__(self, "status", FeedbackStatus(self.status))
        object.__setattr__(self, "images", tuple(self.images))
        if self.phone_number == "":
            object.__setattr__(self, "phone_number", None)

        if len(self.images) > MAX_IMAGES:
            raise ValueError(f"A record holds at most {MAX_IMAGES} images")
        if self.admin_reply is not None and not self.admin_reply.strip():
            raise ValueError("adminReply must not be empty")
        if (self.admin_reply is not None) != self.is_resolved:
            raise ValueError("adminReply must be set exactly when status is RESOLVED")
        if not isinstance(self.created_at, str):
            raise ValueError("createdAt must be an ISO-8601 string")
        datetime.fromisoformat(self.created_at)

    @property
    def is_resolved(self) -> bool:
        return self.status is FeedbackStatus.RESOLVED

    @property
    def created_at_dt(self) -> datetime:
        """createdAt as an aware datetime; naive values are taken as UTC."""
        parsed = datetime.fromisoformat(self.created_at)
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed

    def with_reply(self, text: str, replied_at: str) -> "FeedbackRecord":
        """Return a resolved copy carrying the admin reply."""
        return replace(
            self,
            admin_reply=text,
            replied_at=replied_at,
            status=FeedbackStatus.RESOLVED,
        )

    def to_dict(self) -> dict:
        data = {}
        for attr, key in _FIELD_KEYS.items():
            value = getattr(self, attr)
            if attr == "status":
                value = value.value
            elif attr == "images":
                value = list(value)
            data[key] = value
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "FeedbackRecord":
        """
        Build a record from its persisted form.

        Raises:
            KeyError: a required key is missing
            ValueError: a value has the wrong shape or breaks an invariant
        """
        if not isinstance(data, dict):
            raise ValueError(f"Expected an object, got {type(data).__name__}")

        missing = [key for key in _REQUIRED_KEYS if key not in data]
        if missing:
            raise KeyError(f"Missing keys: {', '.join(missing)}")

        values = {
            "date": data.get("date", ""),
            "time": data.get("time", ""),
            **{key: data[key] for key in _REQUIRED_KEYS},
        }
        for key, value in values.items():
            if not isinstance(value, str):
                raise ValueError(f"{key} must be a string")
        for key in ("phoneNumber", "adminReply", "repliedAt"):
            if not isinstance(data.get(key), (str, type(None))):
                raise ValueError(f"{key} must be a string or null")

        images = data.get("images") or []
        if not isinstance(images, list) or not all(isinstance(i, str) for i in images):
            raise ValueError("images must be a list of strings")

        return cls(
            id=values["id"],
            full_name=values["fullName"],
            department=values["department"],
            content=values["content"],
            date=values["date"],
            time=values["time"],
            created_at=values["createdAt"],
            status=FeedbackStatus(values["status"]),
            phone_number=data.get("phoneNumber"),
            images=tuple(images),
            admin_reply=data.get("adminReply"),
            replied_at=data.get("repliedAt"),
        )
