"""Run control: cooperative cancellation and per-property serialization."""

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager

logger = logging.getLogger(__name__)


class CancellationToken:
    """Cancellation flag checked by orchestrators between units of work."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        if not self._event.is_set():
            logger.info("Cancellation requested")
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


class PropertyRunLocks:
    """One lock per property id so runs for a property never overlap."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[int, threading.Lock] = {}

    def _lock_for(self, property_id: int) -> threading.Lock:
        with self._guard:
            return self._locks.setdefault(property_id, threading.Lock())

    @contextmanager
    def hold(self, property_id: int) -> Iterator[None]:
        lock = self._lock_for(property_id)
        if lock.locked():
            logger.info(f"Waiting for running reconstruction of property {property_id}")
        with lock:
            yield
