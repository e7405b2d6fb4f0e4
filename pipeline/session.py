"""
Cataloging Session

One session per item being catalogued: its QueryState, the item attributes
it was seeded from, and a monotonic request token. Every analysis takes a
token; a result whose token is no longer the latest was superseded (newer
analysis, or the query changed underneath it) and is discarded.
"""

import logging
import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from pipeline.models import MarketSnapshot, QueryChange
from pipeline.query_state import QueryState, QueryStateListener

logger = logging.getLogger(__name__)

MAX_HISTORY = 20


def _to_float(value) -> Optional[float]:
    if value in (None, ""):
        return None
    try:
        return float(str(value).replace(" ", "").replace(",", "."))
    except (TypeError, ValueError):
        return None


@dataclass
class ItemAttributes:
    """What the cataloger has entered for the item"""
    object_type: str = ""
    title: str = ""
    description: str = ""
    artist: Optional[str] = None
    valuation: Optional[float] = field(default=None, compare=False)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ItemAttributes":
        return cls(
            object_type=str(data.get("objectType") or data.get("object_type") or "").strip(),
            title=str(data.get("title") or "").strip(),
            description=str(data.get("description") or "").strip(),
            artist=(str(data.get("artist")).strip() or None) if data.get("artist") else None,
            valuation=_to_float(data.get("valuation", data.get("currentValuation"))),
        )

    @property
    def is_empty(self) -> bool:
        return not (self.object_type or self.title or self.description or self.artist)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "objectType": self.object_type,
            "title": self.title,
            "description": self.description,
            "artist": self.artist,
            "valuation": self.valuation,
        }


class CatalogSession(QueryStateListener):
    """Query state plus request-token bookkeeping for one item"""

    def __init__(self, session_id: str = None, full_control: Optional[bool] = None):
        self.session_id = session_id or uuid.uuid4().hex[:12]
        self.state = QueryState.new(full_control=full_control)
        self.item: Optional[ItemAttributes] = None
        self.synthesis = None
        self.last_snapshot: Optional[MarketSnapshot] = None
        self.created_at = datetime.now()
        self.history: List[QueryChange] = []
        self._token = 0
        self._token_lock = threading.Lock()
        self.state.add_listener(self)

    # ------------------------------------------------------------
    # Request tokens
    # ------------------------------------------------------------

    def next_token(self) -> int:
        with self._token_lock:
            self._token += 1
            return self._token

    def is_current(self, token: int) -> bool:
        with self._token_lock:
            return token == self._token

    @property
    def current_token(self) -> int:
        with self._token_lock:
            return self._token

    # ------------------------------------------------------------
    # QueryStateListener
    # ------------------------------------------------------------

    def on_query_change(self, change: QueryChange) -> None:
        self.history.append(change)
        del self.history[:-MAX_HISTORY]
        if change.changed:
            # Any analysis still running against the old query is now stale
            self.next_token()
            self.last_snapshot = None

    def close(self):
        self.state.remove_listener(self)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sessionId": self.session_id,
            "createdAt": self.created_at.isoformat(),
            "item": self.item.to_dict() if self.item else None,
            "synthesis": self.synthesis.to_dict() if self.synthesis else None,
            "query": self.state.to_dict(),
            "token": self.current_token,
            "history": [c.to_dict() for c in self.history[-5:]],
        }
