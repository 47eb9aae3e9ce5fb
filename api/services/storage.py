"""Viewport persistence.

Stores the last map center/zoom as JSON under a fixed key. A missing or
corrupt file is never fatal; the default Estonia-wide view is returned.
"""
from __future__ import annotations

import json
import logging
import os
import re
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from parcel_history import EE_NAV_EXTENT

LOG = logging.getLogger(__name__)

STORAGE_ROOT = Path(os.getenv("VIEW_STORAGE_ROOT", "storage"))
STORAGE_KEY = "mapView3301"
DEFAULT_CENTER = [538000.0, 6500000.0]
DEFAULT_ZOOM = 6.0


def _path_for(key: str) -> Path:
    safe = re.sub(r"[^A-Za-z0-9_-]+", "_", key)
    return STORAGE_ROOT / f"{safe}.json"


def default_view() -> Dict[str, object]:
    return {"center": list(DEFAULT_CENTER), "zoom": DEFAULT_ZOOM}


def clamp_center(center: Sequence[float]) -> List[float]:
    """Pull a center back inside the navigable L-EST97 extent."""
    minx, miny, maxx, maxy = EE_NAV_EXTENT
    x, y = (float(c) for c in center)
    return [min(max(x, minx), maxx), min(max(y, miny), maxy)]


def load_view(key: str = STORAGE_KEY) -> Dict[str, object]:
    path = _path_for(key)
    if not path.exists():
        return default_view()
    try:
        payload = json.loads(path.read_text())
        center = [float(v) for v in payload["center"]]
        zoom = float(payload["zoom"])
    except (OSError, ValueError, KeyError, TypeError) as exc:
        LOG.warning("Ignoring unreadable saved view %s: %s", path, exc)
        return default_view()
    if len(center) != 2:
        LOG.warning("Ignoring saved view %s with malformed center", path)
        return default_view()
    return {"center": clamp_center(center), "zoom": zoom}


def save_view(center: Optional[Sequence[float]], zoom: Optional[float], key: str = STORAGE_KEY) -> Optional[Path]:
    if not center or len(center) != 2 or not isinstance(zoom, (int, float)):
        return None
    path = _path_for(key)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps({"center": clamp_center(center), "zoom": float(zoom)}))
    return path
