"""Geometry overlay store for selected parcel versions."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence

from shapely.geometry import mapping
from shapely.geometry.base import BaseGeometry

from parcel_history import BBox, SelectionKey, unary_bounds

LOG = logging.getLogger(__name__)


@dataclass
class GeometryRecord:
    key: SelectionKey
    geometries: List[BaseGeometry]
    color: str
    properties: Dict[str, object] = field(default_factory=dict)

    @property
    def bounds(self) -> BBox:
        return unary_bounds(self.geometries)


class GeometryOverlayStore:
    """Holds fetched geometries keyed by selection key.

    The color on each record is a rendering cache; the selection manager
    refreshes it whenever the selection order changes.
    """

    def __init__(self) -> None:
        self._records: Dict[SelectionKey, GeometryRecord] = {}

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, key: object) -> bool:
        return key in self._records

    def add(
        self,
        key: SelectionKey,
        geometries: Sequence[BaseGeometry],
        color: str,
        properties: Optional[Mapping[str, object]] = None,
    ) -> GeometryRecord:
        if not geometries:
            raise ValueError(f"No geometry to store for {key.token}")
        record = GeometryRecord(key=key, geometries=list(geometries), color=color, properties=dict(properties or {}))
        self._records[key] = record
        LOG.debug("Stored %d geometries for %s", len(record.geometries), key.token)
        return record

    def remove(self, key: SelectionKey) -> Optional[GeometryRecord]:
        return self._records.pop(key, None)

    def clear(self) -> None:
        self._records.clear()

    def get(self, key: SelectionKey) -> Optional[GeometryRecord]:
        return self._records.get(key)

    def records(self) -> List[GeometryRecord]:
        return list(self._records.values())

    def recolor(self, colors: Mapping[SelectionKey, str]) -> None:
        for key, record in self._records.items():
            color = colors.get(key)
            if color:
                record.color = color

    def union_extent(self) -> Optional[BBox]:
        """Smallest box covering every stored geometry's bounds, or None when empty."""
        geoms = [g for record in self._records.values() for g in record.geometries]
        if not geoms:
            return None
        return unary_bounds(geoms)

    def to_feature_collection(self) -> Dict[str, object]:
        features: List[Dict[str, object]] = []
        for record in self._records.values():
            for index, geom in enumerate(record.geometries):
                features.append(
                    {
                        "type": "Feature",
                        "id": f"{record.key.token}#{index}",
                        "geometry": mapping(geom),
                        "properties": {
                            "key": record.key.token,
                            "color": record.color,
                            "identifier": record.key.identifier,
                            "valid_from": record.key.valid_from,
                            "valid_to": record.key.valid_to,
                        },
                    }
                )
        return {"type": "FeatureCollection", "features": features}
