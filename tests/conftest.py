"""
Pytest configuration and fixtures for the hospital feedback portal tests.
"""

import os
import sys
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import Mock

import pytest

# Keep the app's default data directory out of the project tree
os.environ.setdefault("PORTAL_DATA_DIR", tempfile.mkdtemp(prefix="feedback_portal_test_"))

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from feedback_portal.feedback.models import FeedbackRecord, FeedbackStatus  # noqa: E402
from feedback_portal.feedback.storage import FeedbackStore, FileBlobStore  # noqa: E402
from feedback_portal.suggestions.llm import LLMResponse, OllamaLLM  # noqa: E402
from feedback_portal.suggestions.service import SuggestionService  # noqa: E402


@pytest.fixture
def blob_store(tmp_path):
    """Blob store in a per-test directory."""
    return FileBlobStore(tmp_path / "blobs")


@pytest.fixture
def store(blob_store):
    """Empty feedback store."""
    return FeedbackStore(blob_store)


@pytest.fixture
def make_record():
    """Factory for PENDING records with sensible defaults."""
    def _make(
        id="ABC123",
        created_at="2024-05-01T08:00:00+00:00",
        department="Khoa Nội",
        **overrides,
    ) -> FeedbackRecord:
        fields = dict(
            id=id,
            full_name="Nguyen Van A",
            department=department,
            content="Chờ quá lâu",
            date="2024-05-01",
            time="08:00",
            created_at=created_at,
            status=FeedbackStatus.PENDING,
        )
        fields.update(overrides)
        return FeedbackRecord(**fields)

    return _make


@pytest.fixture
def fixed_now():
    return datetime(2024, 5, 1, 8, 30, tzinfo=timezone.utc)


@pytest.fixture
def mock_llm():
    """LLM double that answers with a fixed draft."""
    llm = Mock(spec=OllamaLLM)
    llm.model = "test-model"
    llm.host = "http://ollama.test"
    llm.is_available.return_value = True
    llm.generate.return_value = LLMResponse(
        content="Bệnh viện xin cảm ơn quý khách.",
        model="test-model",
    )
    return llm


@pytest.fixture
def suggestion_service(mock_llm):
    return SuggestionService(llm=mock_llm)
