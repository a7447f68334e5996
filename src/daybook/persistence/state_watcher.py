"""File system watcher for the state snapshot file."""

import logging
from collections.abc import Callable
from pathlib import Path

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer
from watchdog.observers.api import BaseObserver

logger = logging.getLogger(__name__)


class StateFileWatcher:
    """Watches the state file and triggers a callback when it changes on disk."""

    def __init__(self, state_file: Path):
        """Initialize watcher for a state file.

        Args:
            state_file: Path to the JSON snapshot (its directory is observed)
        """
        self.state_file = Path(state_file)
        self._observer: BaseObserver | None = None
        self._callback: Callable[[str], None] | None = None

    def set_callback(self, callback: Callable[[str], None]) -> None:
        """Set callback for file system events.

        Args:
            callback: Function(event_type) called when the state file changes
        """
        self._callback = callback

    def start(self) -> None:
        """Start watching in the observer's background thread."""
        self.state_file.parent.mkdir(parents=True, exist_ok=True)
        handler = _StateFileEventHandler(self.state_file, self._callback)
        self._observer = Observer()
        self._observer.daemon = True
        self._observer.schedule(handler, str(self.state_file.parent), recursive=False)
        self._observer.start()
        logger.info(f"[StateFileWatcher] Watching {self.state_file}")

    def stop(self) -> None:
        """Stop watching and clean up resources."""
        if self._observer:
            logger.info(f"[StateFileWatcher] Stopping watcher for {self.state_file}")
            self._observer.stop()
            self._observer.join(timeout=2)
            self._observer = None


class _StateFileEventHandler(FileSystemEventHandler):
    """Internal handler filtering directory events down to the state file."""

    def __init__(self, state_file: Path, callback: Callable[[str], None] | None):
        """Initialize event handler.

        Args:
            state_file: The file to report on
            callback: Function to call on events
        """
        self.state_file_name = state_file.name
        self.callback = callback

    def _is_state_file(self, path: str | bytes) -> bool:
        if isinstance(path, bytes):
            path = path.decode("utf-8")
        return Path(path).name == self.state_file_name

    def _handle_event(self, event_type: str, event: FileSystemEvent) -> None:
        """Handle file system event and trigger callback.

        Args:
            event_type: Type of event (modified, created, deleted, moved)
            event: File system event
        """
        if event.is_directory:
            return

        # Atomic writes show up as a move of a temp file onto the state file
        paths = [event.src_path]
        dest_path = getattr(event, "dest_path", "")
        if dest_path:
            paths.append(dest_path)
        if not any(self._is_state_file(path) for path in paths):
            return

        logger.debug(f"[StateFileEventHandler] {event_type}: {self.state_file_name}")

        if self.callback:
            try:
                self.callback(event_type)
            except Exception as e:
                logger.error(f"[StateFileEventHandler] Callback error: {e}", exc_info=True)

    def on_modified(self, event: FileSystemEvent) -> None:
        """Handle file modification events."""
        self._handle_event("modified", event)

    def on_created(self, event: FileSystemEvent) -> None:
        """Handle file creation events."""
        self._handle_event("created", event)

    def on_moved(self, event: FileSystemEvent) -> None:
        """Handle file move/rename events."""
        self._handle_event("moved", event)
