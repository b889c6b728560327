"""
Feedback storage - Persists the feedback collection to a key-value blob store.

The whole collection is kept as one JSON array under a single key.
Every mutation overwrites that key; there is no merge, no versioning
and no migration. A blob that no longer parses is discarded.
"""

import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Iterable, Optional

from feedback_portal.config import DATA_DIR, STORAGE_KEY
from feedback_portal.exceptions import (
    DuplicateFeedbackError,
    FeedbackNotFoundError,
    PersistenceReadError,
)
from feedback_portal.feedback.models import FeedbackRecord


logger = logging.getLogger(__name__)


class FileBlobStore:
    """
    Key-value blob store backed by one file per key.

    Writes go to a temporary file in the same directory and are then
    renamed over the target, so a reader never sees a half-written blob.
    """

    def __init__(self, directory: Path = DATA_DIR):
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get(self, key: str) -> Optional[str]:
        """Return the stored blob, or None if the key was never written."""
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, value: str):
        """Overwrite the blob stored under key."""
        fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=f".{key}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(value)
            os.replace(tmp_name, self._path(key))
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise


def parse_records(blob: str) -> list[FeedbackRecord]:
    """
    Parse a stored blob into records.

    Raises:
        PersistenceReadError: the blob is not a JSON array of valid records
    """
    try:
        data = json.loads(blob)
        if not isinstance(data, list):
            raise ValueError(f"Expected a JSON array, got {type(data).__name__}")
        return [FeedbackRecord.from_dict(item) for item in data]
    except (KeyError, TypeError, ValueError) as e:
        # json.JSONDecodeError is a ValueError
        raise PersistenceReadError(f"Stored feedback could not be parsed: {e}") from e


def serialize_records(records: Iterable[FeedbackRecord]) -> str:
    return json.dumps([r.to_dict() for r in records], ensure_ascii=False, indent=2)


class FeedbackStore:
    """
    Owns the in-memory feedback collection and mirrors it to a blob store.

    Pass the store to whichever component needs it; nothing here is
    module-level state.
    """

    def __init__(self, blob_store: FileBlobStore, key: str = STORAGE_KEY):
        self.blob_store = blob_store
        self.key = key
        self._lock = threading.RLock()

        # Load existing feedback
        self.records: list[FeedbackRecord] = self.load()

    def load(self) -> list[FeedbackRecord]:
        """
        Read the persisted collection.

        Never raises: a missing blob means no records yet, and a blob
        that cannot be read or parsed is logged and treated the same way.
        """
        try:
            blob = self.blob_store.get(self.key)
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Could not read stored feedback under '{self.key}': {e}")
            return []

        if blob is None:
            return []

        try:
            records = parse_records(blob)
        except PersistenceReadError as e:
            logger.warning(f"{e}; starting with an empty collection")
            return []

        logger.debug(f"Loaded {len(records)} feedback records from '{self.key}'")
        return records

    def save_all(self, records: Optional[Iterable[FeedbackRecord]] = None):
        """Overwrite the persisted collection (the current one by default)."""
        with self._lock:
            if records is not None:
                self.records = list(records)
            self.blob_store.set(self.key, serialize_records(self.records))

    def append(self, record: FeedbackRecord) -> FeedbackRecord:
        """Add a new record and persist the collection."""
        with self._lock:
            if self.get(record.id) is not None:
                raise DuplicateFeedbackError(record.id)
            self.records.append(record)
            self.save_all()
        logger.info(f"Stored feedback {record.id} for {record.department}")
        return record

    def replace(self, record: FeedbackRecord) -> FeedbackRecord:
        """Swap in the record with the same id and persist the collection."""
        with self._lock:
            for i, existing in enumerate(self.records):
                if existing.id == record.id:
                    self.records[i] = record
                    self.save_all()
                    return record
        raise FeedbackNotFoundError(record.id)

    def get(self, feedback_id: str) -> Optional[FeedbackRecord]:
        """Get record by ID."""
        for record in self.records:
            if record.id == feedback_id:
                return record
        return None

    def require(self, feedback_id: str) -> FeedbackRecord:
        record = self.get(feedback_id)
        if record is None:
            raise FeedbackNotFoundError(feedback_id)
        return record

    def all(self) -> list[FeedbackRecord]:
        return list(self.records)

    def ids(self) -> set[str]:
        return {r.id for r in self.records}

    def __len__(self) -> int:
        return len(self.records)


def open_store(directory: Path = DATA_DIR, key: str = STORAGE_KEY) -> FeedbackStore:
    """Open the file-backed feedback store."""
    return FeedbackStore(FileBlobStore(directory), key=key)
