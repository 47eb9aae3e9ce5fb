"""The "current results" slot of the version listing.

Each search takes a generation number; a response is applied only while its
generation is still the newest, so a slow earlier search can never overwrite
the rows of a later one.
"""
from __future__ import annotations

import logging
from datetime import date
from threading import Lock
from typing import Callable, Dict, List, Optional, Union

from parcel_history import (
    ParcelHistoryError,
    VersionRecord,
    WfsQuery,
    fetch_features,
    list_versions,
    require_identifier,
    resolve_as_of,
)

LOG = logging.getLogger(__name__)


class SearchResults:
    def __init__(self, fetch: Optional[Callable[[WfsQuery], List[Dict[str, object]]]] = None) -> None:
        self._fetch = fetch or fetch_features
        self._lock = Lock()
        self._generation = 0
        self.rows: List[VersionRecord] = []
        self.loading = False
        self.error: Optional[str] = None
        self.identifier: Optional[str] = None
        self.as_of: Optional[str] = None

    def begin(self) -> int:
        with self._lock:
            self._generation += 1
            self.rows = []
            self.error = None
            self.loading = True
            return self._generation

    def publish(
        self,
        generation: int,
        rows: List[VersionRecord],
        *,
        identifier: Optional[str] = None,
        as_of: Optional[str] = None,
    ) -> bool:
        with self._lock:
            if generation != self._generation:
                LOG.debug("Dropping stale results of search %d (latest %d)", generation, self._generation)
                return False
            self.rows = list(rows)
            self.identifier = identifier
            self.as_of = as_of
            self.loading = False
            return True

    def fail(self, generation: int, message: str) -> bool:
        with self._lock:
            if generation != self._generation:
                LOG.debug("Dropping stale failure of search %d: %s", generation, message)
                return False
            self.rows = []
            self.error = message
            self.loading = False
            return True

    def search(self, identifier: str, as_of: Union[str, date, None] = None) -> List[VersionRecord]:
        generation = self.begin()
        try:
            identifier = require_identifier(identifier)
            resolved = resolve_as_of(as_of)
            rows = list_versions(identifier, resolved, fetch=self._fetch)
        except ParcelHistoryError as exc:
            self.fail(generation, str(exc))
            raise
        self.publish(generation, rows, identifier=identifier, as_of=resolved)
        return rows

    def rerun(self, as_of: Union[str, date, None] = None) -> Optional[List[VersionRecord]]:
        """Repeat the last successful search with a new as-of date."""
        if not self.identifier:
            return None
        return self.search(self.identifier, as_of)

    def to_dict(self) -> Dict[str, object]:
        return {
            "identifier": self.identifier,
            "as_of": self.as_of,
            "loading": self.loading,
            "error": self.error,
            "count": len(self.rows),
            "rows": [
                {
                    "key": row.key.token,
                    "identifier": row.identifier,
                    "valid_from": row.valid_from,
                    "valid_to": row.valid_to,
                    "acquisition_method": row.acquisition_method,
                }
                for row in self.rows
            ],
        }
