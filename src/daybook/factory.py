"""Dependency injection factory."""

import asyncio
import logging
from collections.abc import AsyncGenerator, Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI

from daybook.api.models import EventMessage
from daybook.config import Config
from daybook.persistence.snapshot_file import SnapshotFile
from daybook.persistence.state_watcher import StateFileWatcher
from daybook.persistence.writer import SnapshotWriter
from daybook.seed import load_seed_document, seed_store
from daybook.store.models import StateSnapshot, StoreEvent
from daybook.store.state_store import Listener, StateStore
from daybook.websocket.connection_manager import ConnectionManager

logger = logging.getLogger(__name__)

# Global instances for dependency injection
_config: Config | None = None
_store: StateStore | None = None
_snapshot_file: SnapshotFile | None = None
_snapshot_writer: SnapshotWriter | None = None
_connection_manager: ConnectionManager | None = None
_watcher: StateFileWatcher | None = None


def get_config() -> Config:
    """Get or create Config instance."""
    global _config
    if _config is None:
        _config = Config()
    return _config


def get_snapshot_file() -> SnapshotFile:
    """Get or create the SnapshotFile for the configured state file."""
    global _snapshot_file
    if _snapshot_file is None:
        _snapshot_file = SnapshotFile(get_config().state_file)
    return _snapshot_file


def create_store(config: Config, snapshot_file: SnapshotFile) -> StateStore:
    """Build the store from the state file, seeding sample data on first run.

    Raises:
        ValueError: If the state file exists but cannot be read
    """
    snapshot = snapshot_file.load()
    store = StateStore(snapshot, area_delete_policy=config.area_delete_policy)
    if snapshot is None and config.seed_sample_data:
        seed_store(store, load_seed_document())
    return store


def get_store() -> StateStore:
    """Get or create the StateStore singleton."""
    global _store
    if _store is None:
        _store = create_store(get_config(), get_snapshot_file())
    return _store


def get_snapshot_writer() -> SnapshotWriter:
    """Get or create the SnapshotWriter singleton."""
    global _snapshot_writer
    if _snapshot_writer is None:
        _snapshot_writer = SnapshotWriter(get_snapshot_file())
    return _snapshot_writer


def get_connection_manager() -> ConnectionManager:
    """Get or create ConnectionManager singleton."""
    global _connection_manager
    if _connection_manager is None:
        _connection_manager = ConnectionManager()
    return _connection_manager


def make_broadcast_listener(
    manager: ConnectionManager, loop: asyncio.AbstractEventLoop
) -> Listener:
    """Create a store listener that pushes each change to WebSocket clients."""

    def listener(event: StoreEvent, snapshot: StateSnapshot) -> None:
        message = EventMessage.from_event(event)
        asyncio.run_coroutine_threadsafe(manager.broadcast(message), loop)

    return listener


def reload_from_disk(store: StateStore, snapshot_file: SnapshotFile) -> bool:
    """Reload the store if the state file holds content this process did not write.

    Returns:
        True if the store was reloaded
    """
    digest = snapshot_file.digest_on_disk()
    if digest is None or snapshot_file.is_own(digest):
        return False

    try:
        snapshot = snapshot_file.load()
    except ValueError as e:
        logger.warning(f"[Factory] Keeping in-memory state, state file unreadable: {e}")
        return False
    if snapshot is None:
        return False

    logger.info(f"[Factory] State file changed externally, reloading {snapshot_file.path}")
    store.load(snapshot)
    return True


def start_state_watcher(
    store: StateStore, snapshot_file: SnapshotFile, loop: asyncio.AbstractEventLoop
) -> None:
    """Watch the state file and reload the store on the event loop when it changes."""
    global _watcher

    def callback(event_type: str) -> None:
        # Store access stays on the loop thread
        loop.call_soon_threadsafe(reload_from_disk, store, snapshot_file)

    try:
        watcher = StateFileWatcher(snapshot_file.path)
        watcher.set_callback(callback)
        watcher.start()
        _watcher = watcher
    except Exception as e:
        logger.error(f"[Factory] Failed to start state file watcher: {e}", exc_info=True)


def stop_state_watcher() -> None:
    """Stop the state file watcher if running."""
    global _watcher
    if _watcher is None:
        return
    try:
        _watcher.stop()
    except Exception as e:
        logger.error(f"[Factory] Failed to stop state file watcher: {e}")
    _watcher = None


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage application lifecycle - startup and shutdown."""
    loop = asyncio.get_running_loop()
    config = get_config()
    store = get_store()
    snapshot_file = get_snapshot_file()
    writer = get_snapshot_writer()

    logger.info("[Lifespan] Starting snapshot writer...")
    writer.start()
    unsubscribers: list[Callable[[], None]] = [
        store.subscribe(writer),
        store.subscribe(make_broadcast_listener(get_connection_manager(), loop)),
    ]
    if not snapshot_file.exists():
        writer.submit(store.snapshot())

    if config.watch_state_file:
        logger.info("[Lifespan] Starting state file watcher...")
        start_state_watcher(store, snapshot_file, loop)
    try:
        yield
    finally:
        logger.info("[Lifespan] Stopping state file watcher and snapshot writer...")
        stop_state_watcher()
        for unsubscribe in unsubscribers:
            unsubscribe()
        writer.stop()


def create_app() -> FastAPI:
    """Create FastAPI application (composition root)."""
    from daybook.api.areas import router as areas_router
    from daybook.api.board import router as board_router
    from daybook.api.notes import router as notes_router
    from daybook.api.tasks import router as tasks_router
    from daybook.api.websocket import router as ws_router

    app = FastAPI(
        title="Daybook",
        description="Tasks, notes and areas with a drag-and-drop board",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.include_router(areas_router, prefix="/api")
    app.include_router(tasks_router, prefix="/api")
    app.include_router(notes_router, prefix="/api")
    app.include_router(board_router, prefix="/api")
    app.include_router(ws_router)  # WebSocket at /ws

    return app
