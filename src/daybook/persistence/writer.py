"""Background writer that mirrors the latest store snapshot to disk."""

import logging
from threading import Event, Lock, Thread

from daybook.persistence.snapshot_file import SnapshotFile
from daybook.store.models import StateSnapshot, StoreEvent

logger = logging.getLogger(__name__)


class SnapshotWriter:
    """Writes snapshots on a daemon thread, fire-and-forget.

    Submitting never blocks on disk I/O. When several snapshots arrive while
    a write is in flight only the newest one is written. Write failures are
    logged and otherwise dropped; the next mutation retries with fresh state.
    """

    def __init__(self, snapshot_file: SnapshotFile) -> None:
        """Initialize writer for a snapshot file."""
        self._file = snapshot_file
        self._pending: StateSnapshot | None = None
        self._lock = Lock()
        self._wake = Event()
        self._idle = Event()
        self._idle.set()
        self._running = False
        self._thread: Thread | None = None

    def __call__(self, event: StoreEvent, snapshot: StateSnapshot) -> None:
        """Store listener entry point."""
        if event.action == "state.reloaded":
            # Reloads come from the file itself
            return
        self.submit(snapshot)

    def submit(self, snapshot: StateSnapshot) -> None:
        """Queue a snapshot, replacing any snapshot not yet written."""
        with self._lock:
            self._pending = snapshot
            self._idle.clear()
        self._wake.set()

    def start(self) -> None:
        """Start the writer thread."""
        if self._thread and self._thread.is_alive():
            return
        self._running = True
        self._thread = Thread(target=self._run_loop, name="snapshot-writer", daemon=True)
        self._thread.start()
        logger.info(f"[SnapshotWriter] Writing to {self._file.path}")

    def _run_loop(self) -> None:
        while self._running:
            self._wake.wait()
            self._wake.clear()
            self._drain()

    def _drain(self) -> None:
        while True:
            with self._lock:
                snapshot = self._pending
                self._pending = None
                if snapshot is None:
                    self._idle.set()
                    return
            try:
                self._file.save(snapshot)
            except Exception as e:
                logger.error(f"[SnapshotWriter] Failed to write {self._file.path}: {e}", exc_info=True)

    def flush(self, timeout: float = 5.0) -> bool:
        """Wait until every submitted snapshot has been written.

        Without a running thread the pending snapshot is written inline.

        Returns:
            True if the writer went idle within the timeout
        """
        if not (self._thread and self._thread.is_alive()):
            self._drain()
        return self._idle.wait(timeout)

    def stop(self) -> None:
        """Stop the thread after writing whatever is still pending."""
        self._running = False
        self._wake.set()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=2)
        self._drain()
        logger.info("[SnapshotWriter] Stopped")
