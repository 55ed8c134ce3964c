"""In-memory registry of sessions waiting for a free-text follow-up."""

import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, Optional

from helpdesk.logging_config import get_logger
from helpdesk.services.state_machine import (
    InvalidTransitionError,
    PendingFlow,
    SessionFlowState,
    awaiting_state_for,
    complete_flow,
    start_flow,
)

logger = get_logger("session_state")

DEFAULT_TTL_SECONDS = 1800.0
DEFAULT_MAX_ENTRIES = 10000


@dataclass
class _Entry:
    state: SessionFlowState
    expires_at: float


class SessionStateTracker:
    """Per-session flow state with lazy expiry and an LRU bound.

    Sessions that are not tracked are idle. Only awaiting states are stored,
    so an abandoned flow costs one entry until it expires or is evicted.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl_seconds = ttl_seconds
        self._max_entries = max_entries
        self._clock = clock
        self._entries: "OrderedDict[str, _Entry]" = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _live_entry(self, session_id: str) -> Optional[_Entry]:
        entry = self._entries.get(session_id)
        if entry is None:
            return None
        if entry.expires_at <= self._clock():
            del self._entries[session_id]
            logger.info("Pending flow expired", extra={"context": {"session_id": session_id, "state": entry.state.value}})
            return None
        return entry

    def get_state(self, session_id: Optional[str]) -> SessionFlowState:
        if not session_id:
            return SessionFlowState.IDLE
        with self._lock:
            entry = self._live_entry(session_id)
            return entry.state if entry else SessionFlowState.IDLE

    def is_pending(self, flow: PendingFlow, session_id: Optional[str]) -> bool:
        return self.get_state(session_id) == awaiting_state_for(flow)

    def mark_pending(self, flow: PendingFlow, session_id: Optional[str]) -> SessionFlowState:
        if not session_id:
            logger.warning("Cannot mark pending flow without a session id", extra={"context": {"flow": flow.value}})
            return SessionFlowState.IDLE

        with self._lock:
            entry = self._live_entry(session_id)
            current = entry.state if entry else SessionFlowState.IDLE
            try:
                new_state = start_flow(current, flow)
            except InvalidTransitionError as exc:
                logger.warning(
                    "Replacing pending flow",
                    extra={"context": {"session_id": session_id, "error": str(exc)}},
                )
                new_state = awaiting_state_for(flow)

            self._entries[session_id] = _Entry(state=new_state, expires_at=self._clock() + self._ttl_seconds)
            self._entries.move_to_end(session_id)
            self._enforce_bound()
            return new_state

    def clear_pending(self, flow: PendingFlow, session_id: Optional[str]) -> SessionFlowState:
        if not session_id:
            return SessionFlowState.IDLE

        with self._lock:
            entry = self._live_entry(session_id)
            if entry is None:
                return SessionFlowState.IDLE
            if entry.state != awaiting_state_for(flow):
                return entry.state
            new_state = complete_flow(entry.state)
            del self._entries[session_id]
            return new_state

    def sweep(self) -> int:
        """Drop every expired entry; returns how many were removed."""
        now = self._clock()
        with self._lock:
            expired = [session_id for session_id, entry in self._entries.items() if entry.expires_at <= now]
            for session_id in expired:
                del self._entries[session_id]
        if expired:
            logger.info("Swept expired pending flows", extra={"context": {"removed": len(expired)}})
        return len(expired)

    def _enforce_bound(self) -> None:
        if self._max_entries <= 0:
            return
        while len(self._entries) > self._max_entries:
            session_id, entry = self._entries.popitem(last=False)
            logger.warning(
                "Evicted pending flow (capacity)",
                extra={"context": {"session_id": session_id, "state": entry.state.value}},
            )
