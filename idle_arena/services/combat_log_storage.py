"""In-memory per-player store of recent combat sessions.

Sessions are kept most-recent-first. Both caps are applied when a session is
written, never when it is read:
  max_logs_per_session     - only the first N entries of a fight are kept
  max_sessions_per_player  - oldest sessions are dropped beyond N

Lookup misses (unknown player, unknown session) never raise; they return an
empty list or None.

All public methods take one coarse lock, so a single instance may be shared
between request handler threads.
"""

from __future__ import annotations

import dataclasses
import itertools
import logging
import secrets
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

from idle_arena.config import settings
from idle_arena.services.combat_engine import CombatLogEntry

logger = logging.getLogger(__name__)

# Process-wide, so ids stay unique across storage instances too
_session_sequence = itertools.count(1)
_sequence_lock = threading.Lock()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    """Aware UTC copy of value. Naive datetimes are taken to be UTC already."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass
class StoredCombatSession:
    id: str
    timestamp: datetime
    logs: list[CombatLogEntry]


@dataclass
class PlayerCombatData:
    player_id: str
    sessions: list[StoredCombatSession] = field(default_factory=list)
    last_updated: datetime = field(default_factory=_utcnow)


def generate_session_id() -> str:
    """Return a new id of the form combat_<epoch-millis>_<token>.

    The token is the base-36 sequence number followed by 8 random hex chars,
    so two calls in one process can never collide.
    """
    with _sequence_lock:
        sequence = next(_session_sequence)
    return f"combat_{int(time.time() * 1000)}_{_base36(sequence)}{secrets.token_hex(4)}"


def _base36(value: int) -> str:
    digits = "0123456789abcdefghijklmnopqrstuvwxyz"
    out = ""
    while True:
        value, rem = divmod(value, 36)
        out = digits[rem] + out
        if value == 0:
            return out


class CombatLogStorage:
    def __init__(
        self,
        max_sessions_per_player: int | None = None,
        max_logs_per_session: int | None = None,
    ) -> None:
        self.max_sessions_per_player = (
            max_sessions_per_player
            if max_sessions_per_player is not None
            else settings.combat_max_sessions_per_player
        )
        self.max_logs_per_session = (
            max_logs_per_session
            if max_logs_per_session is not None
            else settings.combat_max_logs_per_session
        )
        if self.max_sessions_per_player <= 0:
            raise ValueError("max_sessions_per_player must be positive")
        if self.max_logs_per_session <= 0:
            raise ValueError("max_logs_per_session must be positive")

        self._player_data: dict[str, PlayerCombatData] = {}
        self._lock = threading.RLock()

    def store_combat_logs(
        self,
        player_id: str,
        logs: list[CombatLogEntry],
        timestamp: datetime | None = None,
    ) -> str:
        """Prepend a new session for player_id and return its id.

        timestamp is stored as aware UTC; a naive value is read as UTC.
        """
        session_id = generate_session_id()
        if len(logs) > self.max_logs_per_session:
            logger.info(
                "Truncating combat session %s for player %s from %d to %d entries",
                session_id,
                player_id,
                len(logs),
                self.max_logs_per_session,
            )
        session = StoredCombatSession(
            id=session_id,
            timestamp=_as_utc(timestamp) if timestamp is not None else _utcnow(),
            logs=list(logs[: self.max_logs_per_session]),
        )

        with self._lock:
            player_data = self._player_data.get(player_id)
            if player_data is None:
                player_data = PlayerCombatData(player_id=player_id)
                self._player_data[player_id] = player_data

            player_data.sessions.insert(0, session)
            player_data.last_updated = _utcnow()

            if len(player_data.sessions) > self.max_sessions_per_player:
                dropped = len(player_data.sessions) - self.max_sessions_per_player
                del player_data.sessions[self.max_sessions_per_player:]
                logger.debug("Dropped %d oldest sessions for player %s", dropped, player_id)

        return session_id

    def get_player_logs(self, player_id: str, limit: int = 10) -> list[StoredCombatSession]:
        """Up to `limit` most recent sessions, newest first."""
        if limit <= 0:
            return []
        with self._lock:
            player_data = self._player_data.get(player_id)
            if player_data is None:
                return []
            return player_data.sessions[:limit]

    def get_combat_logs(self, player_id: str, session_id: str) -> list[CombatLogEntry] | None:
        """Log entries of one session, or None if the player or session is unknown."""
        with self._lock:
            player_data = self._player_data.get(player_id)
            if player_data is None:
                return None
            for session in player_data.sessions:
                if session.id == session_id:
                    return list(session.logs)
            return None

    def get_all_player_sessions(self, player_id: str) -> list[StoredCombatSession]:
        with self._lock:
            player_data = self._player_data.get(player_id)
            return list(player_data.sessions) if player_data else []

    def get_player_record(self, player_id: str) -> PlayerCombatData | None:
        """Snapshot of the player's record, including when it was last written."""
        with self._lock:
            player_data = self._player_data.get(player_id)
            if player_data is None:
                return None
            return dataclasses.replace(player_data, sessions=list(player_data.sessions))

    def clear_player_logs(self, player_id: str) -> None:
        with self._lock:
            self._player_data.pop(player_id, None)

    def cleanup_old_logs(
        self,
        max_age_days: float | None = None,
        now: datetime | None = None,
    ) -> None:
        """Drop sessions not newer than now - max_age_days.

        max_age_days defaults to settings.combat_log_retention_days. A naive
        `now` is read as UTC, like stored timestamps. Players left with no
        sessions are removed entirely.
        """
        if max_age_days is None:
            max_age_days = settings.combat_log_retention_days
        cutoff = (_as_utc(now) if now is not None else _utcnow()) - timedelta(days=max_age_days)
        evicted = 0
        with self._lock:
            for player_id in list(self._player_data):
                player_data = self._player_data[player_id]
                kept = [s for s in player_data.sessions if s.timestamp > cutoff]
                evicted += len(player_data.sessions) - len(kept)
                player_data.sessions = kept
                if not kept:
                    del self._player_data[player_id]
        if evicted:
            logger.info("Evicted %d combat sessions older than %s", evicted, cutoff.isoformat())

    def get_storage_stats(self) -> dict[str, int]:
        with self._lock:
            total_sessions = 0
            total_logs = 0
            for player_data in self._player_data.values():
                total_sessions += len(player_data.sessions)
                total_logs += sum(len(s.logs) for s in player_data.sessions)
            return {
                "total_players": len(self._player_data),
                "total_sessions": total_sessions,
                "total_logs": total_logs,
            }
