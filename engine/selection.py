"""Bounded, colored selection of parcel versions.

Selecting a version fetches its full geometry and the detail rows of its
identifier, then commits both in one step. Colors are a projection of the
selection order: the first selected key is always green, the second blue.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from threading import Lock
from typing import Callable, Dict, List, Optional, Tuple

from engine.overlay import GeometryOverlayStore
from parcel_history import (
    BBox,
    CapacityError,
    EmptyResultError,
    SelectionKey,
    VersionRecord,
    WfsQuery,
    build_all_properties_query,
    build_geometry_query,
    features_to_geometries,
    fetch_features,
    sort_by_valid_from,
    to_version_record,
    unary_bounds,
)

LOG = logging.getLogger(__name__)

PALETTE: Tuple[str, ...] = ("#22c55e", "#3b82f6")  # green, blue
MAX_SELECTED = len(PALETTE)
DETAIL_HIDDEN_COLUMNS = ("id", "kirje_muudetud")

# top, right, bottom, left; the bottom leaves room for the detail drawer
FIT_PADDING = (40, 40, 200, 40)
FIT_MAX_ZOOM = 17
FIT_DURATION_MS = 350

Fetch = Callable[[WfsQuery], List[Dict[str, object]]]


@dataclass(frozen=True)
class ViewFit:
    extent: BBox
    padding: Tuple[int, int, int, int] = FIT_PADDING
    max_zoom: int = FIT_MAX_ZOOM
    duration_ms: int = FIT_DURATION_MS

    def to_dict(self) -> Dict[str, object]:
        return {
            "extent": list(self.extent),
            "padding": list(self.padding),
            "max_zoom": self.max_zoom,
            "duration_ms": self.duration_ms,
        }


@dataclass
class DetailDrawer:
    """All historical rows of the most recently added identifier."""

    identifier: Optional[str] = None
    rows: List[VersionRecord] = field(default_factory=list)
    open: bool = False

    @property
    def columns(self) -> List[str]:
        if not self.rows:
            return []
        return [col for col in self.rows[0].attributes if col not in DETAIL_HIDDEN_COLUMNS]

    def to_dict(self) -> Dict[str, object]:
        columns = self.columns
        return {
            "identifier": self.identifier,
            "open": self.open,
            "columns": columns,
            "rows": [{col: row.attributes.get(col) for col in columns} for row in self.rows],
        }


@dataclass(frozen=True)
class ToggleResult:
    action: str  # "added" or "removed"
    key: SelectionKey
    color: Optional[str] = None
    fit: Optional[ViewFit] = None


class SelectionManager:
    """Selected keys, overlay geometries and the detail drawer of one viewer.

    ``_toggle_lock`` serializes toggles and clears across their network
    fetches. ``_state_lock`` guards keys, store and drawer and is held only
    for commits and reads, so readers never wait on the WFS.
    """

    def __init__(self, fetch: Optional[Fetch] = None, store: Optional[GeometryOverlayStore] = None) -> None:
        self._fetch: Fetch = fetch or fetch_features
        self.store = store if store is not None else GeometryOverlayStore()
        self.drawer = DetailDrawer()
        self._keys: List[SelectionKey] = []
        self._toggle_lock = Lock()
        self._state_lock = Lock()

    def keys(self) -> List[SelectionKey]:
        with self._state_lock:
            return list(self._keys)

    def colors(self) -> Dict[SelectionKey, str]:
        with self._state_lock:
            return _palette_for(self._keys)

    def toggle(self, record: VersionRecord) -> ToggleResult:
        """Remove ``record`` when selected, otherwise fetch and add it.

        Raises CapacityError when two versions are already selected, and
        EmptyResultError or TransportError when the fetch fails. The selection
        is left untouched on every error.
        """
        key = record.key
        with self._toggle_lock:
            if key in self.keys():
                return self._remove(record)
            if len(self.keys()) >= MAX_SELECTED:
                raise CapacityError(
                    f"At most {MAX_SELECTED} versions can be compared at once. Remove one to add another.",
                    {"selected": [k.token for k in self.keys()]},
                )
            return self._add(record)

    def _add(self, record: VersionRecord) -> ToggleResult:
        key = record.key
        features = self._fetch(build_geometry_query(record.identifier, record.valid_from, record.valid_to))
        geometries = features_to_geometries(features)
        if not geometries:
            raise EmptyResultError("No geometry found for this version.", {"key": key.token})

        detail_features = self._fetch(build_all_properties_query(record.identifier))
        rows = sort_by_valid_from(to_version_record(f) for f in detail_features)

        with self._state_lock:
            self._keys.append(key)
            colors = _palette_for(self._keys)
            self.store.add(key, geometries, colors[key], properties=features[0].get("properties") or {})
            self.store.recolor(colors)
            self.drawer = DetailDrawer(identifier=record.identifier, rows=rows, open=True)
            count = len(self._keys)
        LOG.info("Selected %s as %s (%d selected)", key.token, colors[key], count)
        return ToggleResult(action="added", key=key, color=colors[key], fit=ViewFit(unary_bounds(geometries)))

    def _remove(self, record: VersionRecord) -> ToggleResult:
        key = record.key
        with self._state_lock:
            self._keys.remove(key)
            self.store.remove(key)
            self.store.recolor(_palette_for(self._keys))
            still_shown = any(k.identifier == record.identifier for k in self._keys)
            if self.drawer.identifier == record.identifier and not still_shown:
                self.drawer = DetailDrawer()
            count = len(self._keys)
        LOG.info("Deselected %s (%d selected)", key.token, count)
        return ToggleResult(action="removed", key=key)

    def clear(self) -> None:
        with self._toggle_lock, self._state_lock:
            self._keys.clear()
            self.store.clear()
            self.drawer = DetailDrawer()
        LOG.debug("Selection cleared")

    def fit_all(self) -> Optional[ViewFit]:
        with self._state_lock:
            extent = self.store.union_extent()
        if extent is None:
            return None
        return ViewFit(extent)

    def set_drawer_open(self, open_: bool) -> Dict[str, object]:
        with self._state_lock:
            self.drawer.open = bool(open_)
            return self.drawer.to_dict()

    def feature_collection(self) -> Dict[str, object]:
        with self._state_lock:
            return self.store.to_feature_collection()

    def snapshot(self) -> Dict[str, object]:
        with self._state_lock:
            keys = list(self._keys)
            drawer = self.drawer.to_dict()
        colors = _palette_for(keys)
        return {
            "selected": [
                {
                    "key": key.token,
                    "identifier": key.identifier,
                    "valid_from": key.valid_from,
                    "valid_to": key.valid_to,
                    "color": colors[key],
                }
                for key in keys
            ],
            "drawer": drawer,
        }


def _palette_for(keys: List[SelectionKey]) -> Dict[SelectionKey, str]:
    return {key: PALETTE[index] for index, key in enumerate(keys)}
