"""JSON snapshot file: the save/load collaborator of the state store."""

import hashlib
import logging
import os
import tempfile
from collections import deque
from pathlib import Path
from threading import Lock

from pydantic import TypeAdapter, ValidationError

from daybook.store.models import StateSnapshot

logger = logging.getLogger(__name__)

_SNAPSHOT_ADAPTER = TypeAdapter(StateSnapshot)

# Own writes still reported by the watcher after newer writes started
RECENT_DIGESTS = 16


def encode_snapshot(snapshot: StateSnapshot) -> bytes:
    """Serialize a snapshot to pretty-printed JSON."""
    return _SNAPSHOT_ADAPTER.dump_json(snapshot, indent=2)


def decode_snapshot(data: bytes | str) -> StateSnapshot:
    """Parse and validate snapshot JSON.

    Raises:
        ValueError: If the data is not a valid snapshot
    """
    try:
        return _SNAPSHOT_ADAPTER.validate_json(data)
    except ValidationError as e:
        raise ValueError(f"Invalid state snapshot: {e.error_count()} error(s)") from e


class SnapshotFile:
    """Reads and atomically writes the state snapshot on disk."""

    def __init__(self, path: Path) -> None:
        """Initialize with the snapshot file path (parent dirs are created on save)."""
        self.path = Path(path)
        self._last_digest: str | None = None
        self._recent: deque[str] = deque(maxlen=RECENT_DIGESTS)
        self._lock = Lock()

    @property
    def last_digest(self) -> str | None:
        """SHA-256 of the content last written or loaded by this process."""
        return self._last_digest

    def remember(self, digest: str | None) -> None:
        """Record content this process wrote or read, so it is not mistaken for an edit."""
        with self._lock:
            self._last_digest = digest
            if digest is not None and digest not in self._recent:
                self._recent.append(digest)

    def is_own(self, digest: str | None) -> bool:
        """Whether the digest is one of the recent contents written or loaded here."""
        with self._lock:
            return digest is not None and digest in self._recent

    def exists(self) -> bool:
        return self.path.exists()

    def load(self) -> StateSnapshot | None:
        """Load the snapshot, or None if the file does not exist.

        Raises:
            ValueError: If the file content is not a valid snapshot
        """
        if not self.path.exists():
            logger.info(f"[SnapshotFile] No state file at {self.path}")
            return None

        data = self.path.read_bytes()
        try:
            snapshot = decode_snapshot(data)
        except ValueError as e:
            raise ValueError(f"Invalid state file {self.path}: {e}") from e

        self.remember(hashlib.sha256(data).hexdigest())
        logger.info(
            f"[SnapshotFile] Loaded {len(snapshot.tasks)} tasks, {len(snapshot.notes)} notes, "
            f"{len(snapshot.areas)} areas from {self.path}"
        )
        return snapshot

    def save(self, snapshot: StateSnapshot) -> str:
        """Write the snapshot atomically (temp file + rename).

        Returns:
            SHA-256 digest of the written content
        """
        data = encode_snapshot(snapshot)
        digest = hashlib.sha256(data).hexdigest()
        self.path.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(
            dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
        )
        # Digest is known before the new content becomes visible
        previous_digest = self._last_digest
        known_before = self.is_own(digest)
        self.remember(digest)
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.replace(tmp_name, self.path)
        except BaseException:
            with self._lock:
                self._last_digest = previous_digest
                if not known_before and digest in self._recent:
                    self._recent.remove(digest)
            Path(tmp_name).unlink(missing_ok=True)
            raise

        logger.debug(f"[SnapshotFile] Wrote {len(data)} bytes to {self.path}")
        return digest

    def digest_on_disk(self) -> str | None:
        """SHA-256 of the current file content, or None if it is missing."""
        try:
            return hashlib.sha256(self.path.read_bytes()).hexdigest()
        except FileNotFoundError:
            return None
