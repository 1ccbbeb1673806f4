from __future__ import annotations

import enum
import logging
import threading
import time
import typing as t
from dataclasses import dataclass

from ttlstore.monitoring.metrics import ttlstore_sweep_removed_total
from ttlstore.utils.config import CacheConfig
from ttlstore.utils.rwlock import RWLock

V = t.TypeVar("V")

DEFAULT_TTL_SECONDS = 30 * 60
DEFAULT_EVICTION_INTERVAL_SECONDS = 1.0
# how often a waiting sweep looks at the owning cancel event
CANCEL_POLL_SECONDS = 0.05

_logger = logging.getLogger(__name__)


class SweepState(str, enum.Enum):
    IDLE = "IDLE"
    RUNNING = "RUNNING"
    STOPPED = "STOPPED"


@dataclass
class Entry(t.Generic[V]):
    value: V
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


class TTLStore(t.Generic[V]):
    """Thread-safe key-value map whose entries expire after a fixed TTL.

    Expiry is enforced twice: ``get`` treats an expired entry as missing
    (lazy expiry), and a background thread calls ``delete_expired`` every
    ``eviction_interval_seconds`` so expired entries leave the table even
    if nobody reads them (active expiry).

    The sweep thread belongs to the store. It ends when ``stop_eviction`` is
    called, when the optional ``cancel`` event is set, or when the store is
    used as a context manager and the block exits.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        eviction_interval_seconds: float = DEFAULT_EVICTION_INTERVAL_SECONDS,
        *,
        cancel: t.Optional[threading.Event] = None,
        start_eviction: bool = True,
        time_func: t.Callable[[], float] = time.monotonic,
    ) -> None:
        if eviction_interval_seconds <= 0:
            raise ValueError(f"eviction_interval_seconds must be positive, got {eviction_interval_seconds}")
        self._items: t.Dict[str, Entry[V]] = {}
        self._ttl = float(ttl_seconds)
        self._interval = float(eviction_interval_seconds)
        self._lock = RWLock()
        self._time_func = time_func

        self._cancel = cancel
        self._stop = threading.Event()
        self._state_lock = threading.Lock()
        self._state = SweepState.IDLE
        self._thread: t.Optional[threading.Thread] = None

        if start_eviction:
            self.start_eviction()

    @classmethod
    def from_config(
        cls,
        config: CacheConfig,
        *,
        cancel: t.Optional[threading.Event] = None,
        start_eviction: bool = True,
        time_func: t.Callable[[], float] = time.monotonic,
    ) -> "TTLStore[V]":
        # a configured TTL of 0 means "use the default", not "expire on write"
        return cls(
            ttl_seconds=config.ttl_seconds or DEFAULT_TTL_SECONDS,
            eviction_interval_seconds=config.eviction_interval_seconds,
            cancel=cancel,
            start_eviction=start_eviction,
            time_func=time_func,
        )

    @property
    def ttl_seconds(self) -> float:
        return self._ttl

    @property
    def eviction_interval_seconds(self) -> float:
        return self._interval

    @property
    def sweep_state(self) -> SweepState:
        with self._state_lock:
            return self._state

    def set(self, key: str, value: V) -> None:
        with self._lock.write_locked():
            self._items[key] = Entry(value=value, expires_at=self._time_func() + self._ttl)

    def get(self, key: str) -> t.Tuple[t.Optional[V], bool]:
        """Return ``(value, True)`` for a live entry, ``(None, False)`` otherwise.

        An expired entry is reported as missing but left in place for the
        sweep, so reads never need the write lock.
        """
        with self._lock.read_locked():
            entry = self._items.get(key)
            if entry is None or entry.is_expired(self._time_func()):
                return None, False
            return entry.value, True

    def delete(self, key: str) -> None:
        with self._lock.write_locked():
            self._items.pop(key, None)

    def delete_expired(self) -> int:
        """Remove every entry expired as of one instant; return how many went."""
        now = self._time_func()
        with self._lock.write_locked():
            expired = [key for key, entry in self._items.items() if entry.is_expired(now)]
            for key in expired:
                del self._items[key]
        if expired:
            ttlstore_sweep_removed_total.inc(len(expired))
            _logger.debug("Removed %d expired entries", len(expired))
        return len(expired)

    def keys(self) -> t.List[str]:
        """Snapshot of the keys physically present, expired ones included."""
        with self._lock.read_locked():
            return list(self._items)

    def __len__(self) -> int:
        with self._lock.read_locked():
            return len(self._items)

    def start_eviction(self) -> None:
        with self._state_lock:
            # Stopped is terminal; only a fresh store can start sweeping
            if self._state is not SweepState.IDLE:
                return
            self._state = SweepState.RUNNING
            self._thread = threading.Thread(
                target=self._run_eviction,
                name="ttlstore-eviction",
                daemon=True,
            )
            self._thread.start()
        _logger.info("Eviction started, interval=%.3fs", self._interval)

    def stop_eviction(self, wait: bool = True, timeout: t.Optional[float] = None) -> None:
        """Signal the sweep thread to end.

        With ``wait`` (the default) this blocks until the thread has exited or
        ``timeout`` elapses. With ``wait=False`` it only raises the signal.
        """
        with self._state_lock:
            if self._state is SweepState.IDLE:
                self._state = SweepState.STOPPED
            thread = self._thread
        self._stop.set()
        if wait and thread is not None and thread is not threading.current_thread():
            thread.join(timeout)

    def _cancelled(self) -> bool:
        return self._cancel is not None and self._cancel.is_set()

    def _run_eviction(self) -> None:
        # Waits in short slices so a cancel is noticed as quickly as a stop.
        next_sweep = time.monotonic() + self._interval
        try:
            while not self._cancelled():
                remaining = next_sweep - time.monotonic()
                if remaining <= 0:
                    self.delete_expired()
                    next_sweep = time.monotonic() + self._interval
                    continue
                if self._stop.wait(min(remaining, CANCEL_POLL_SECONDS)):
                    break
        finally:
            with self._state_lock:
                self._state = SweepState.STOPPED
            _logger.info("Eviction stopped")

    def __enter__(self) -> "TTLStore[V]":
        return self

    def __exit__(self, *exc_info: t.Any) -> None:
        self.stop_eviction()
