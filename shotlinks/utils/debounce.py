"""
Debounced Filesystem Watching

Wraps a watchdog Observer so that bursts of raw filesystem events are
delivered as batches, once the watched tree has been quiet for the debounce
window. Batches are handed to the consumer over a blocking queue; iterating a
DebouncedWatcher yields them until it is closed.
"""

import queue
import logging
import threading
import time
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_SECONDS = 2.0
MIN_DEBOUNCE_SECONDS = 1.0
# A batch is delivered once this old even if changes keep arriving
DEFAULT_MAX_BATCH_AGE_SECONDS = 30.0

# Reads, not changes
IGNORED_EVENT_TYPES = ("opened", "closed_no_write")


@dataclass(frozen=True)
class ChangeEvent:
    """A changed path, as delivered in a debounced batch"""
    path: str


class _EventCollector(FileSystemEventHandler):
    """Records changed paths until the quiet window elapses"""

    def __init__(self):
        super().__init__()
        self._lock = threading.Lock()
        self._pending: Dict[str, None] = {}
        self._first_event = 0.0
        self._last_event = 0.0

    def on_any_event(self, event: FileSystemEvent):
        if event.event_type in IGNORED_EVENT_TYPES:
            return

        paths = [event.src_path]
        dest_path = getattr(event, 'dest_path', None)
        if dest_path:
            paths.append(dest_path)

        with self._lock:
            now = time.monotonic()
            if not self._pending:
                self._first_event = now
            for path in paths:
                if isinstance(path, bytes):
                    path = path.decode('utf-8', errors='surrogateescape')
                self._pending[path] = None
            self._last_event = now

    def take_if_quiet(self, window: float, max_age: Optional[float] = None) -> List[ChangeEvent]:
        """
        Return and clear pending paths if nothing arrived for `window` seconds,
        or if the oldest pending change is at least `max_age` seconds old.
        """
        with self._lock:
            if not self._pending:
                return []
            now = time.monotonic()
            quiet = now - self._last_event >= window
            overdue = max_age is not None and now - self._first_event >= max_age
            if not (quiet or overdue):
                return []
            batch = [ChangeEvent(path) for path in self._pending]
            self._pending.clear()
            return batch


class DebouncedWatcher:
    """
    Recursively watches a directory and yields debounced batches of ChangeEvents.

    Usage:
        watcher = DebouncedWatcher(userdata_path, debounce_seconds=2.0)
        watcher.start()
        for batch in watcher:
            ...
        watcher.close()  # from another thread or a signal handler
    """

    _CLOSED = object()

    def __init__(
        self,
        path: str,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
        max_batch_age: float = DEFAULT_MAX_BATCH_AGE_SECONDS,
    ):
        self.path = str(path)
        self.debounce_seconds = max(float(debounce_seconds), MIN_DEBOUNCE_SECONDS)
        self.max_batch_age = max(float(max_batch_age), self.debounce_seconds)
        self._collector = _EventCollector()
        self._queue: "queue.Queue" = queue.Queue()
        self._observer: Optional[Observer] = None
        self._flusher: Optional[threading.Thread] = None
        self._stopped = threading.Event()

    def start(self) -> None:
        self._observer = Observer()
        self._observer.schedule(self._collector, self.path, recursive=True)
        self._observer.start()

        self._flusher = threading.Thread(target=self._flush_loop, name="shotlinks-debounce", daemon=True)
        self._flusher.start()
        logger.info(f"[Watch] Watching {self.path} (debounce {self.debounce_seconds:.1f}s)")

    def _flush_loop(self) -> None:
        tick = min(0.25, self.debounce_seconds / 4)
        while not self._stopped.wait(tick):
            batch = self._collector.take_if_quiet(self.debounce_seconds, self.max_batch_age)
            if batch:
                logger.debug(f"[Watch] Delivering batch of {len(batch)} changed paths")
                self._queue.put(batch)

    def close(self) -> None:
        """Stop watching; iteration ends after any batches already queued."""
        if self._stopped.is_set():
            return
        self._stopped.set()
        if self._observer is not None:
            self._observer.stop()
            self._observer.join()
        if self._flusher is not None:
            self._flusher.join()
        self._queue.put(self._CLOSED)

    def __iter__(self) -> Iterator[List[ChangeEvent]]:
        while True:
            batch = self._queue.get()
            if batch is self._CLOSED:
                return
            yield batch
