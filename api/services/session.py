from __future__ import annotations

import logging
from dataclasses import dataclass
from threading import Lock
from typing import Callable, Dict, List, Optional

from engine.results import SearchResults
from engine.selection import SelectionManager
from parcel_history import WfsQuery, fetch_features, today_iso

LOG = logging.getLogger(__name__)


@dataclass(frozen=True)
class LookupPopup:
    """Transient result of a map click; never part of the selection."""

    identifier: str
    x: float
    y: float


class ViewerSession:
    def __init__(self, fetch: Optional[Callable[[WfsQuery], List[Dict[str, object]]]] = None) -> None:
        self.fetch = fetch or fetch_features
        self.results = SearchResults(self.fetch)
        self.selection = SelectionManager(self.fetch)
        self.as_of: Optional[str] = today_iso()
        self.popup: Optional[LookupPopup] = None
        self._lock = Lock()

    def show_popup(self, identifier: str, x: float, y: float) -> LookupPopup:
        with self._lock:
            self.popup = LookupPopup(identifier=identifier, x=x, y=y)
            return self.popup

    def close_popup(self) -> None:
        with self._lock:
            self.popup = None


# one viewer state per process
SESSION = ViewerSession()


def get_session() -> ViewerSession:
    return SESSION


def reset_session(fetch: Optional[Callable[[WfsQuery], List[Dict[str, object]]]] = None) -> ViewerSession:
    global SESSION
    SESSION = ViewerSession(fetch)
    LOG.debug("Viewer session reset")
    return SESSION
