"""Bounded, time-expiring session pinning store."""

import time
from collections import OrderedDict
from dataclasses import replace
from threading import RLock
from typing import Callable, Optional

from nanorouter.utils.logging import AuditLogger

from .models import RoutingDecision, SessionEntry

DEFAULT_CAPACITY = 10_000
DEFAULT_TTL_SECONDS = 60 * 60


class SessionStore:
    """
    Session id -> pinned decision cache.

    Least-recently-used eviction once capacity is reached; entries idle for
    longer than the TTL are dropped lazily on access (no sweeper thread).
    Every read refreshes the entry's TTL. All operations hold a store-wide
    lock, so read-modify-write on one session is atomic across threads.
    """

    def __init__(
        self,
        capacity: int = DEFAULT_CAPACITY,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        audit: Optional[AuditLogger] = None,
    ):
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self.capacity = capacity
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._audit = audit or AuditLogger("sessions")
        self._entries: OrderedDict[str, SessionEntry] = OrderedDict()
        self._lock = RLock()
        self._evictions = 0
        self._expirations = 0

    def _expired(self, entry: SessionEntry, now: float) -> bool:
        return now - entry.last_access >= self.ttl_seconds

    def _purge_expired(self, now: float) -> None:
        # Access order == last_access order, so expired entries sit at the front
        while self._entries:
            session_id, entry = next(iter(self._entries.items()))
            if not self._expired(entry, now):
                break
            del self._entries[session_id]
            self._expirations += 1

    def _live(self, session_id: str, now: float) -> Optional[SessionEntry]:
        entry = self._entries.get(session_id)
        if entry is None:
            return None
        if self._expired(entry, now):
            del self._entries[session_id]
            self._expirations += 1
            return None
        return entry

    def _store(self, entry: SessionEntry) -> SessionEntry:
        self._entries[entry.session_id] = entry
        self._entries.move_to_end(entry.session_id)
        while len(self._entries) > self.capacity:
            evicted, _ = self._entries.popitem(last=False)
            self._evictions += 1
            self._audit.debug("Session evicted (capacity)", session_id=evicted)
        return entry

    def get(self, session_id: str) -> Optional[SessionEntry]:
        """Return the live entry for a session, refreshing its TTL."""
        with self._lock:
            now = self._clock()
            entry = self._live(session_id, now)
            if entry is None:
                return None
            return self._store(replace(entry, last_access=now))

    def touch(self, session_id: str) -> Optional[SessionEntry]:
        """Count one more message for a live session and return the updated entry."""
        with self._lock:
            now = self._clock()
            entry = self._live(session_id, now)
            if entry is None:
                return None
            return self._store(replace(entry, message_count=entry.message_count + 1, last_access=now))

    def record(self, session_id: str, decision: RoutingDecision) -> SessionEntry:
        """
        Pin a decision to a session.

        The message counter of an existing entry is preserved; the pin
        timestamp only moves when the pinned target changes.
        """
        with self._lock:
            now = self._clock()
            self._purge_expired(now)
            previous = self._live(session_id, now)
            if previous is None:
                entry = SessionEntry(
                    session_id=session_id,
                    decision=decision,
                    pinned_at=now,
                    message_count=1,
                    last_access=now,
                )
            else:
                same_target = previous.decision.target == decision.target
                entry = replace(
                    previous,
                    decision=decision,
                    pinned_at=previous.pinned_at if same_target else now,
                    last_access=now,
                )
            self._audit.debug("Session pinned", session_id=session_id, target=decision.target)
            return self._store(entry)

    def clear(self, session_id: str) -> bool:
        """Drop one session; returns whether it existed."""
        with self._lock:
            existed = self._entries.pop(session_id, None) is not None
        if existed:
            self._audit.debug("Session cleared", session_id=session_id)
        return existed

    def clear_all(self) -> int:
        """Drop every session; returns how many were held."""
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
        return count

    def __len__(self) -> int:
        with self._lock:
            self._purge_expired(self._clock())
            return len(self._entries)

    def __contains__(self, session_id: object) -> bool:
        if not isinstance(session_id, str):
            return False
        with self._lock:
            return self._live(session_id, self._clock()) is not None

    def stats(self) -> dict[str, int]:
        with self._lock:
            self._purge_expired(self._clock())
            return {
                "active_sessions": len(self._entries),
                "capacity": self.capacity,
                "evictions": self._evictions,
                "expirations": self._expirations,
            }
