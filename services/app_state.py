"""
Application State Management

Centralized state for the market data service: the open cataloging
sessions, the shared orchestrator and request statistics. Held in a
dataclass so it can be dependency-injected into routes and tests.
"""

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any, Dict, Optional

from pipeline.session import CatalogSession
from services.exceptions import SessionNotFoundError

if TYPE_CHECKING:
    from pipeline.orchestrator import AnalysisOrchestrator

logger = logging.getLogger(__name__)


def _fresh_stats() -> Dict[str, Any]:
    return {
        "total_requests": 0,
        "sessions_opened": 0,
        "sessions_closed": 0,
        "analyses": 0,
        "stale_results": 0,
        "resolution_failures": 0,
        "session_start": datetime.now().isoformat(),
    }


@dataclass
class AppState:
    """
    Centralized application state.

    Sessions are keyed by session id. The orchestrator is shared; all
    per-item state lives in the sessions.
    """

    orchestrator: Optional["AnalysisOrchestrator"] = None
    debug_mode: bool = False
    full_control_default: Optional[bool] = None

    sessions: Dict[str, CatalogSession] = field(default_factory=dict)
    _sessions_lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    MAX_SESSIONS: int = field(default=500, repr=False)

    stats: Dict[str, Any] = field(default_factory=_fresh_stats)

    def increment_stat(self, key: str, amount: int = 1) -> None:
        """Safely increment a statistics counter."""
        if key in self.stats:
            self.stats[key] += amount

    def get_session_duration(self) -> float:
        """Get service uptime in seconds."""
        start = datetime.fromisoformat(self.stats["session_start"])
        return (datetime.now() - start).total_seconds()

    # ============================================================
    # Session registry
    # ============================================================

    def open_session(self, full_control: Optional[bool] = None) -> CatalogSession:
        if full_control is None:
            full_control = self.full_control_default
        session = CatalogSession(full_control=full_control)
        with self._sessions_lock:
            self.sessions[session.session_id] = session
            # Insertion order - oldest sessions are first
            while len(self.sessions) > self.MAX_SESSIONS:
                oldest_id = next(iter(self.sessions))
                self.sessions.pop(oldest_id).close()
                logger.debug(f"[CLEANUP] Evicted session {oldest_id}")
        self.increment_stat("sessions_opened")
        logger.info(f"[SESSION] Opened {session.session_id}")
        return session

    def get_session(self, session_id: str) -> CatalogSession:
        with self._sessions_lock:
            session = self.sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    def close_session(self, session_id: str) -> None:
        with self._sessions_lock:
            session = self.sessions.pop(session_id, None)
        if session is None:
            raise SessionNotFoundError(session_id)
        session.close()
        self.increment_stat("sessions_closed")
        logger.info(f"[SESSION] Closed {session_id}")

    def get_memory_stats(self) -> Dict[str, Any]:
        """Get memory usage statistics for monitoring."""
        return {
            "open_sessions": len(self.sessions),
            "cached_snapshots": len(self.orchestrator.cache) if self.orchestrator else 0,
            "session_duration_seconds": self.get_session_duration(),
        }


# ============================================================
# FastAPI Dependency Injection Helpers
# ============================================================

def get_app_state_from_request(request) -> "AppState":
    """
    Get AppState from request.

    Usage in routes:
        from services.app_state import get_app_state_from_request

        @router.get("/endpoint")
        async def endpoint(request: Request):
            app_state = get_app_state_from_request(request)
            app_state.increment_stat("total_requests")
    """
    return request.app.state.app_state
