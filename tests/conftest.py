import re
from typing import Callable, Dict, List, Optional

import pytest

from parcel_history import TransportError, WfsQuery

IDENTIFIER = "79501:027:0011"


def make_feature(
    identifier: str,
    valid_from: Optional[str],
    valid_to: Optional[str],
    box=(540000.0, 6500000.0, 540100.0, 6500100.0),
    **extra,
) -> Dict[str, object]:
    minx, miny, maxx, maxy = box
    ring = [[minx, miny], [maxx, miny], [maxx, maxy], [minx, maxy], [minx, miny]]
    props = {
        "id": 1,
        "tunnus": identifier,
        "kehtiv_alates": valid_from,
        "kehtiv_kuni": valid_to,
        "omviis": extra.pop("omviis", "Ostu-müük"),
        "kirje_muudetud": "2024-01-01",
        "pindala": extra.pop("pindala", 1200.0),
    }
    props.update(extra)
    return {
        "type": "Feature",
        "id": f"ky_versioonid.{identifier}.{valid_from}",
        "geometry": {"type": "Polygon", "coordinates": [ring]},
        "properties": props,
    }


class FakeFeatureService:
    """In-memory stand-in for the WFS endpoint, dispatching on the CQL filter."""

    def __init__(self, features: List[Dict[str, object]]):
        self.features = list(features)
        self.point_features: List[Dict[str, object]] = []
        self.calls: List[WfsQuery] = []
        self.fail_when: Optional[Callable[[WfsQuery], bool]] = None

    def __call__(self, query: WfsQuery) -> List[Dict[str, object]]:
        self.calls.append(query)
        if self.fail_when is not None and self.fail_when(query):
            raise TransportError("WFS error 503", {"status": 503})
        cql = query.cql_filter
        if cql.startswith("INTERSECTS"):
            return list(self.point_features)
        match = re.match(r"tunnus = '((?:[^']|'')*)'", cql)
        identifier = match.group(1).replace("''", "'") if match else None
        rows = [f for f in self.features if f["properties"]["tunnus"] == identifier]
        if "kehtiv_alates = '" in cql:
            rows = [f for f in rows if self._matches_interval(f, cql)]
        if query.param("propertyName"):
            keep = query.param("propertyName").split(",")
            rows = [
                {"type": "Feature", "properties": {k: f["properties"].get(k) for k in keep}}
                for f in rows
            ]
        return rows

    @staticmethod
    def _matches_interval(feature: Dict[str, object], cql: str) -> bool:
        props = feature["properties"]
        if f"kehtiv_alates = '{props['kehtiv_alates']}'" not in cql:
            return False
        if props["kehtiv_kuni"] is None:
            return "kehtiv_kuni IS NULL" in cql
        return f"kehtiv_kuni = '{props['kehtiv_kuni']}'" in cql

    def calls_of(self, kind: str) -> List[WfsQuery]:
        if kind == "geometry":
            return [q for q in self.calls if "kehtiv_alates = '" in q.cql_filter]
        if kind == "details":
            return [q for q in self.calls if q.param("propertyName") is None and "kehtiv_alates = '" not in q.cql_filter]
        raise ValueError(kind)


@pytest.fixture
def history_features():
    return [
        make_feature(IDENTIFIER, "2012-03-01", "2018-05-10", box=(540000.0, 6500000.0, 540100.0, 6500100.0)),
        make_feature(IDENTIFIER, "2018-05-10", "2021-06-01", box=(540050.0, 6500020.0, 540180.0, 6500090.0)),
        make_feature(IDENTIFIER, "2021-06-01", None, box=(539980.0, 6499950.0, 540120.0, 6500200.0)),
        make_feature("79501:027:0012", "2015-01-01", None, box=(540200.0, 6500000.0, 540300.0, 6500100.0)),
    ]


@pytest.fixture
def service(history_features):
    return FakeFeatureService(history_features)
