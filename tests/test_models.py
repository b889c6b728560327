"""
Tests for the feedback record model and its persisted form.
"""

import pytest

from feedback_portal.feedback.models import FeedbackRecord, FeedbackStatus, StatusFilter


class TestFeedbackRecord:
    """Test the FeedbackRecord dataclass."""

    def test_defaults(self, make_record):
        """A new record is pending with no images or reply."""
        record = make_record()
        assert record.status is FeedbackStatus.PENDING
        assert record.images == ()
        assert record.admin_reply is None
        assert record.replied_at is None
        assert not record.is_resolved

    def test_rejects_too_many_images(self, make_record):
        """More than two images breaks the record invariant."""
        with pytest.raises(ValueError):
            make_record(images=("a", "b", "c"))

    def test_rejects_reply_without_resolved_status(self, make_record):
        """adminReply is only allowed on resolved records."""
        with pytest.raises(ValueError):
            make_record(admin_reply="Cảm ơn")

    def test_rejects_resolved_without_reply(self, make_record):
        """A resolved record must carry a reply."""
        with pytest.raises(ValueError):
            make_record(status=FeedbackStatus.RESOLVED)

    @pytest.mark.parametrize("text", ["", "   "])
    def test_rejects_blank_reply(self, make_record, text):
        """A resolved record cannot carry an empty reply."""
        with pytest.raises(ValueError):
            make_record().with_reply(text, "09:00:00 01/05/2024")

    def test_empty_phone_number_is_none(self, make_record):
        assert make_record(phone_number="").phone_number is None

    def test_rejects_bad_timestamp(self, make_record):
        """createdAt must be an ISO timestamp."""
        with pytest.raises(ValueError):
            make_record(created_at="yesterday")

    def test_with_reply(self, make_record):
        """with_reply resolves a copy and leaves the original alone."""
        record = make_record()
        resolved = record.with_reply("Cảm ơn", "09:00:00 01/05/2024")

        assert resolved.status is FeedbackStatus.RESOLVED
        assert resolved.admin_reply == "Cảm ơn"
        assert resolved.replied_at == "09:00:00 01/05/2024"
        assert record.status is FeedbackStatus.PENDING

    def test_naive_created_at_is_utc(self, make_record):
        """Timestamps without an offset sort as UTC."""
        record = make_record(created_at="2024-05-01T08:00:00")
        assert record.created_at_dt.utcoffset().total_seconds() == 0


class TestSerialization:
    """Test the camelCase persisted form."""

    def test_to_dict_keys(self, make_record):
        """Persisted keys match the original browser storage."""
        data = make_record(phone_number="0912345678", images=("data:image/png;base64,AAA",)).to_dict()

        assert data["id"] == "ABC123"
        assert data["fullName"] == "Nguyen Van A"
        assert data["phoneNumber"] == "0912345678"
        assert data["status"] == "PENDING"
        assert data["createdAt"] == "2024-05-01T08:00:00+00:00"
        assert data["images"] == ["data:image/png;base64,AAA"]
        assert data["adminReply"] is None

    def test_from_dict_browser_record(self):
        """A record written by the browser app loads, including a Z suffix."""
        data = {
            "id": "K3J9QX",
            "fullName": "Tran Thi B",
            "phoneNumber": "",
            "department": "Khoa Nhi",
            "content": "Nhân viên rất tận tình",
            "date": "2024-04-30",
            "time": "14:20",
            "images": [],
            "status": "RESOLVED",
            "createdAt": "2024-04-30T07:20:11.512Z",
            "adminReply": "Xin cảm ơn",
            "repliedAt": "15:01:02 30/4/2024",
        }

        record = FeedbackRecord.from_dict(data)
        assert record.id == "K3J9QX"
        assert record.phone_number is None
        assert record.is_resolved
        assert record.admin_reply == "Xin cảm ơn"

    def test_from_dict_missing_key(self):
        """Missing required keys raise KeyError."""
        with pytest.raises(KeyError):
            FeedbackRecord.from_dict({"id": "X"})

    def test_from_dict_bad_status(self, make_record):
        """Unknown status values raise ValueError."""
        data = make_record().to_dict()
        data["status"] = "ARCHIVED"
        with pytest.raises(ValueError):
            FeedbackRecord.from_dict(data)

    def test_from_dict_rejects_non_object(self):
        """Each entry must be a JSON object."""
        with pytest.raises(ValueError):
            FeedbackRecord.from_dict(["not", "a", "record"])

    @pytest.mark.parametrize("key,value", [
        ("id", 123456),
        ("date", None),
        ("time", 930),
        ("createdAt", None),
        ("phoneNumber", 912345678),
        ("adminReply", ["Xin cảm ơn"]),
        ("repliedAt", 42),
    ])
    def test_from_dict_rejects_wrong_types(self, make_record, key, value):
        """Fields of the wrong JSON type are rejected when loading."""
        data = make_record().to_dict()
        data[key] = value
        with pytest.raises(ValueError):
            FeedbackRecord.from_dict(data)

    def test_from_dict_keeps_stored_values(self, make_record):
        """Loading does not rewrite what was saved."""
        record = make_record(phone_number="0912345678").with_reply("Xin cảm ơn", "09:00:00 01/05/2024")
        assert FeedbackRecord.from_dict(record.to_dict()) == record


class TestStatusFilter:
    """Test filter matching."""

    def test_all_matches_everything(self):
        assert StatusFilter.ALL.matches(FeedbackStatus.PENDING)
        assert StatusFilter.ALL.matches(FeedbackStatus.RESOLVED)

    def test_specific_filter(self):
        assert StatusFilter.PENDING.matches(FeedbackStatus.PENDING)
        assert not StatusFilter.PENDING.matches(FeedbackStatus.RESOLVED)
        assert StatusFilter.RESOLVED.matches(FeedbackStatus.RESOLVED)
