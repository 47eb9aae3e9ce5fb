#!/usr/bin/env python3
"""Query the version history of Estonian cadastral parcels and render comparisons.

Workflow:
    1. Validate a parcel identifier (``NNNNN:NNN:NNNN``) and an optional as-of date.
    2. List every validity interval of the parcel from the Maa-amet
       ``kataster:ky_versioonid`` WFS layer (attributes only, no geometry).
    3. Select up to two versions; their full geometries are fetched on demand and
       overlaid in green and blue.
    4. Render the comparison as a PNG, optionally over the gray Maa-amet basemap.

All coordinates are EPSG:3301 (L-EST97 Lambert Conformal Conic) metres.

You need network access and the following Python packages installed:
    pip install requests shapely matplotlib numpy pillow
"""

from __future__ import annotations

import argparse
import json
import logging
import math
import os
import re
from dataclasses import dataclass, field
from datetime import date
from io import BytesIO
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union
from urllib.parse import urlencode

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
import numpy as np
import requests
from PIL import Image
from matplotlib.axes import Axes
from matplotlib.figure import Figure
from shapely.geometry import MultiPolygon, Polygon, shape
from shapely.geometry.base import BaseGeometry

LOG = logging.getLogger(__name__)

WFS_URL = os.getenv("PARCEL_WFS_URL", "https://gsavalik.envir.ee/geoserver/kataster/wfs?")
WFS_TYPENAME = os.getenv("PARCEL_WFS_TYPENAME", "kataster:ky_versioonid")
WMS_URL = os.getenv("PARCEL_WMS_URL", "https://gsavalik.envir.ee/geoserver/kataster/wms?")
WMS_LAYERS = WFS_TYPENAME
BASEMAP_WMS_URL = os.getenv("PARCEL_BASEMAP_WMS_URL", "https://kaart.maaamet.ee/wms/hallkaart?")
BASEMAP_LAYERS = "kaart_ht"
WMS_VERSION = "1.1.1"
HTTP_TIMEOUT = float(os.getenv("PARCEL_HTTP_TIMEOUT", "20"))

SRID = 3301
SRS_NAME = f"EPSG:{SRID}"
GEOMETRY_COLUMN = "geom"
LIST_LIMIT = 200

IDENTIFIER_FIELD = "tunnus"
VALID_FROM_FIELD = "kehtiv_alates"
VALID_TO_FIELD = "kehtiv_kuni"
ACQUISITION_FIELD = "omviis"
LIST_FIELDS = (IDENTIFIER_FIELD, VALID_FROM_FIELD, VALID_TO_FIELD, ACQUISITION_FIELD)
POINT_FIELDS = (IDENTIFIER_FIELD, VALID_FROM_FIELD, VALID_TO_FIELD)
SORT_NEWEST_FIRST = f"{VALID_FROM_FIELD} D"

IDENTIFIER_PATTERN = re.compile(r"\d{5}:\d{3}:\d{4}", re.ASCII)
DATE_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}", re.ASCII)
EXAMPLE_IDENTIFIER = "79501:027:0011"

# Part of L-EST97 the map may be panned over.
EE_NAV_EXTENT = (300000.0, 6300000.0, 800000.0, 6700000.0)

HTTP_SESSION = requests.Session()
BASE_HEADERS = {
    "Accept": "application/json",
    "User-Agent": "parcel-history/1.0",
}

BBox = Tuple[float, float, float, float]


class ParcelHistoryError(RuntimeError):
    """Base error carrying a user-visible message and optional context."""

    def __init__(self, message: str, context: Optional[Dict[str, object]] = None):
        super().__init__(message)
        self.context = context or {}


class ValidationError(ParcelHistoryError):
    """Raised when an identifier or date does not match the expected format."""


class TransportError(ParcelHistoryError):
    """Raised for network failures, non-success HTTP status or unreadable payloads."""


class EmptyResultError(ParcelHistoryError):
    """Raised when a geometry query for a version yields no features."""


class CapacityError(ParcelHistoryError):
    """Raised when a third simultaneous selection is attempted."""


@dataclass(frozen=True)
class SelectionKey:
    """Join key between a results row, its overlay geometry and its legend color."""

    identifier: str
    valid_from: Optional[str]
    valid_to: Optional[str]

    @property
    def token(self) -> str:
        return "|".join(
            [self.identifier, _token_part(self.valid_from), _token_part(self.valid_to)]
        )

    @property
    def is_active(self) -> bool:
        return self.valid_to is None


def _token_part(value: Optional[str]) -> str:
    return "null" if value is None else value


@dataclass
class VersionRecord:
    """One row of the version listing; ``attributes`` holds every returned field."""

    identifier: str
    valid_from: Optional[str]
    valid_to: Optional[str]
    acquisition_method: Optional[str] = None
    attributes: Dict[str, object] = field(default_factory=dict)

    @property
    def key(self) -> SelectionKey:
        return SelectionKey(self.identifier, self.valid_from, self.valid_to)

    @property
    def is_active(self) -> bool:
        return self.valid_to is None


@dataclass(frozen=True)
class WfsQuery:
    """A fully formed GetFeature request: base URL plus ordered parameters."""

    base_url: str
    params: Tuple[Tuple[str, str], ...]

    @property
    def url(self) -> str:
        return f"{self.base_url.rstrip('?')}?{urlencode(self.params)}"

    @property
    def cql_filter(self) -> str:
        return self.param("CQL_FILTER") or ""

    def param(self, name: str) -> Optional[str]:
        for key, value in self.params:
            if key == name:
                return value
        return None

    def as_dict(self) -> Dict[str, str]:
        return dict(self.params)


# ---------------------------------------------------------------------------
# Identifier and date validation
# ---------------------------------------------------------------------------


def validate_identifier(value: Optional[str]) -> bool:
    """Return True when ``value`` is a full ``NNNNN:NNN:NNNN`` parcel identifier."""
    if not isinstance(value, str):
        return False
    return IDENTIFIER_PATTERN.fullmatch(value.strip()) is not None


def require_identifier(value: Optional[str]) -> str:
    if not validate_identifier(value):
        raise ValidationError(
            f"Enter a full parcel identifier such as {EXAMPLE_IDENTIFIER} (5+3+4 digits).",
            {"identifier": value},
        )
    return value.strip()


def resolve_as_of(value: Union[str, date, None]) -> Optional[str]:
    """Normalize an as-of date; blank means no temporal constraint."""
    if value is None:
        return None
    if isinstance(value, date):
        return value.strftime("%Y-%m-%d")
    cleaned = str(value).strip()
    if not cleaned:
        return None
    message = "As-of date must be an ISO calendar date (YYYY-MM-DD)."
    if DATE_PATTERN.fullmatch(cleaned) is None:
        raise ValidationError(message, {"as_of": value})
    try:
        parsed = date.fromisoformat(cleaned)
    except ValueError as exc:
        raise ValidationError(message, {"as_of": value}) from exc
    return parsed.isoformat()


def today_iso() -> str:
    """Local calendar date; the as-of filter starts here until cleared."""
    return date.today().isoformat()


# ---------------------------------------------------------------------------
# Temporal filter
# ---------------------------------------------------------------------------


def escape_literal(value: Optional[str]) -> str:
    return (value or "").replace("'", "''")


def temporal_predicate(as_of: Union[str, date, None]) -> Optional[str]:
    """Validity predicate for ``as_of``; None when there is no date constraint."""
    resolved = resolve_as_of(as_of)
    if resolved is None:
        return None
    return (
        f"{VALID_FROM_FIELD} <= '{resolved}' AND "
        f"({VALID_TO_FIELD} IS NULL OR {VALID_TO_FIELD} > '{resolved}')"
    )


def _date_ordinal(value: object) -> Optional[int]:
    if value is None:
        return None
    try:
        return date.fromisoformat(str(value)[:10]).toordinal()
    except ValueError:
        LOG.debug("Unparseable date value %r", value)
        return None


def _ordinal_or_floor(value: object) -> int:
    ordinal = _date_ordinal(value)
    return -1 if ordinal is None else ordinal


def sort_versions(records: Iterable[VersionRecord]) -> List[VersionRecord]:
    """Active version first, then newest ``valid_to``; ties by newest ``valid_from``."""
    return sorted(
        records,
        key=lambda r: (
            r.is_active,
            0 if r.is_active else _ordinal_or_floor(r.valid_to),
            _ordinal_or_floor(r.valid_from),
        ),
        reverse=True,
    )


def sort_by_valid_from(records: Iterable[VersionRecord]) -> List[VersionRecord]:
    return sorted(records, key=lambda r: _ordinal_or_floor(r.valid_from), reverse=True)


def format_date(value: Optional[str]) -> str:
    if not value:
        return ""
    return value[:10]


# ---------------------------------------------------------------------------
# Query builders
# ---------------------------------------------------------------------------


def _base_params() -> List[Tuple[str, str]]:
    return [
        ("service", "WFS"),
        ("version", "1.1.0"),
        ("request", "GetFeature"),
        ("typeName", WFS_TYPENAME),
        ("outputFormat", "application/json"),
        ("srsName", SRS_NAME),
    ]


def _identifier_clause(identifier: str) -> str:
    return f"{IDENTIFIER_FIELD} = '{escape_literal(identifier)}'"


def build_attribute_query(identifier: str, as_of: Union[str, date, None] = None) -> WfsQuery:
    """List every version of ``identifier`` without geometry, newest first."""
    params = _base_params()
    params.append(("propertyName", ",".join(LIST_FIELDS)))
    clauses = [_identifier_clause(identifier)]
    predicate = temporal_predicate(as_of)
    if predicate:
        clauses.append(predicate)
    params.append(("CQL_FILTER", " AND ".join(clauses)))
    params.append(("sortBy", SORT_NEWEST_FIRST))
    params.append(("maxFeatures", str(LIST_LIMIT)))
    return WfsQuery(WFS_URL, tuple(params))


def build_geometry_query(
    identifier: str,
    valid_from: Optional[str],
    valid_to: Optional[str],
) -> WfsQuery:
    """Full geometry and attributes for the exact validity interval."""
    clauses = [
        _identifier_clause(identifier),
        f"{VALID_FROM_FIELD} = '{escape_literal(valid_from)}'",
    ]
    if valid_to:
        clauses.append(f"{VALID_TO_FIELD} = '{escape_literal(valid_to)}'")
    else:
        clauses.append(f"{VALID_TO_FIELD} IS NULL")
    params = _base_params()
    params.append(("CQL_FILTER", " AND ".join(clauses)))
    return WfsQuery(WFS_URL, tuple(params))


def build_all_properties_query(identifier: str) -> WfsQuery:
    params = _base_params()
    params.append(("CQL_FILTER", _identifier_clause(identifier)))
    params.append(("sortBy", SORT_NEWEST_FIRST))
    params.append(("maxFeatures", str(LIST_LIMIT)))
    return WfsQuery(WFS_URL, tuple(params))


def build_point_query(x: float, y: float, as_of: Union[str, date, None] = None) -> WfsQuery:
    """The most recent parcel version whose geometry contains ``(x, y)``."""
    try:
        x, y = float(x), float(y)
    except (TypeError, ValueError) as exc:
        raise ValidationError("Point coordinates must be numbers.", {"x": x, "y": y}) from exc
    if not (math.isfinite(x) and math.isfinite(y)):
        raise ValidationError("Point coordinates must be finite.", {"x": x, "y": y})
    clauses = [f"INTERSECTS({GEOMETRY_COLUMN},SRID={SRID};POINT({x!r} {y!r}))"]
    predicate = temporal_predicate(as_of)
    if predicate:
        clauses.append(predicate)
    params = _base_params()
    params.append(("propertyName", ",".join(POINT_FIELDS)))
    params.append(("CQL_FILTER", " AND ".join(clauses)))
    params.append(("sortBy", SORT_NEWEST_FIRST))
    params.append(("maxFeatures", "1"))
    return WfsQuery(WFS_URL, tuple(params))


def build_wms_params(as_of: Union[str, date, None] = None) -> Dict[str, object]:
    """GetMap parameters for the cadastral boundary layer, filtered to ``as_of``."""
    params: Dict[str, object] = {
        "LAYERS": WMS_LAYERS,
        "FORMAT": "image/png",
        "TRANSPARENT": True,
        "VERSION": WMS_VERSION,
        "SRS": SRS_NAME,
        "TILED": True,
    }
    predicate = temporal_predicate(as_of)
    if predicate:
        params["CQL_FILTER"] = predicate
    return params


# ---------------------------------------------------------------------------
# Transport
# ---------------------------------------------------------------------------


def fetch_features(
    query: WfsQuery,
    *,
    session: Optional[requests.Session] = None,
    timeout: float = HTTP_TIMEOUT,
) -> List[Dict[str, object]]:
    """Execute ``query`` and return the GeoJSON features of the response."""
    http = session or HTTP_SESSION
    LOG.debug("WFS request %s params=%s", query.base_url, query.as_dict())
    try:
        response = http.get(
            query.base_url, params=query.as_dict(), headers=BASE_HEADERS, timeout=timeout
        )
        response.raise_for_status()
        payload = response.json()
    except requests.HTTPError as exc:
        status = exc.response.status_code if exc.response is not None else None
        raise TransportError(f"WFS error {status}", {"status": status}) from exc
    except requests.RequestException as exc:
        raise TransportError(f"WFS request failed: {exc}", {"url": query.base_url}) from exc
    except ValueError as exc:
        raise TransportError("WFS returned a non-JSON response.", {"url": query.base_url}) from exc
    if not isinstance(payload, dict):
        raise TransportError("WFS returned an unexpected payload.", {"type": type(payload).__name__})
    features = payload.get("features") or []
    return [feature for feature in features if isinstance(feature, dict)]


def to_version_record(feature: Mapping[str, object]) -> VersionRecord:
    props = dict(feature.get("properties") or {})
    return VersionRecord(
        identifier=str(props.get(IDENTIFIER_FIELD) or ""),
        valid_from=_optional_str(props.get(VALID_FROM_FIELD)),
        valid_to=_optional_str(props.get(VALID_TO_FIELD)),
        acquisition_method=_optional_str(props.get(ACQUISITION_FIELD)),
        attributes=props,
    )


def _optional_str(value: object) -> Optional[str]:
    if value is None:
        return None
    return str(value)


def feature_geometry(feature: Mapping[str, object]) -> Optional[BaseGeometry]:
    """Convert a GeoJSON feature geometry to shapely, repairing invalid rings."""
    geom_json = feature.get("geometry")
    if not geom_json:
        return None
    try:
        geom = shape(geom_json)
    except (ValueError, TypeError, AttributeError) as exc:
        LOG.warning("Skipping feature with unreadable geometry: %s", exc)
        return None
    if geom.is_empty:
        return None
    if not geom.is_valid and isinstance(geom, (Polygon, MultiPolygon)) and geom.area > 0:
        geom = geom.buffer(0)
    return geom


def features_to_geometries(features: Iterable[Mapping[str, object]]) -> List[BaseGeometry]:
    geometries: List[BaseGeometry] = []
    for feature in features:
        geom = feature_geometry(feature)
        if geom is not None:
            geometries.append(geom)
    return geometries


def unary_bounds(geoms: Sequence[BaseGeometry], pad: float = 0.0) -> BBox:
    minx = min(g.bounds[0] for g in geoms)
    miny = min(g.bounds[1] for g in geoms)
    maxx = max(g.bounds[2] for g in geoms)
    maxy = max(g.bounds[3] for g in geoms)
    return minx - pad, miny - pad, maxx + pad, maxy + pad


def expand_bounds(bounds: BBox, pad: float) -> BBox:
    minx, miny, maxx, maxy = bounds
    return minx - pad, miny - pad, maxx + pad, maxy + pad


# ---------------------------------------------------------------------------
# Listing and identification
# ---------------------------------------------------------------------------


def list_versions(identifier: str, as_of: Union[str, date, None] = None, *, fetch=None) -> List[VersionRecord]:
    identifier = require_identifier(identifier)
    query = build_attribute_query(identifier, as_of)
    records = [to_version_record(f) for f in (fetch or fetch_features)(query)]
    LOG.info("Found %d versions of %s (as of %s)", len(records), identifier, resolve_as_of(as_of) or "any date")
    return sort_versions(records)


def identify(x: float, y: float, as_of: Union[str, date, None] = None, *, fetch=None) -> Optional[str]:
    """Return the identifier of the parcel under ``(x, y)``, or None.

    Misses are common (clicks outside any parcel), so transport and service
    failures are reported the same way as an empty result.
    """
    try:
        features = (fetch or fetch_features)(build_point_query(x, y, as_of))
    except ParcelHistoryError as exc:
        LOG.debug("Point identification at %s,%s failed: %s", x, y, exc)
        return None
    if not features:
        return None
    identifier = to_version_record(features[0]).identifier
    return identifier or None


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def fetch_wms_basemap(
    bounds: BBox,
    as_of: Union[str, date, None] = None,
    *,
    width: int = 1024,
    include_cadastre: bool = True,
) -> Tuple[np.ndarray, BBox]:
    """Download one GetMap image of the gray basemap (and cadastre) covering ``bounds``."""
    minx, miny, maxx, maxy = bounds
    span_x = max(maxx - minx, 1.0)
    span_y = max(maxy - miny, 1.0)
    height = max(int(round(width * span_y / span_x)), 1)
    common = {
        "SERVICE": "WMS",
        "REQUEST": "GetMap",
        "VERSION": WMS_VERSION,
        "SRS": SRS_NAME,
        "BBOX": f"{minx},{miny},{maxx},{maxy}",
        "WIDTH": width,
        "HEIGHT": height,
        "STYLES": "",
    }
    layers = [
        (BASEMAP_WMS_URL, {"LAYERS": BASEMAP_LAYERS, "FORMAT": "image/png", "TRANSPARENT": "false"}),
    ]
    if include_cadastre:
        cadastre = {k: v for k, v in build_wms_params(as_of).items() if k not in ("TILED", "VERSION", "SRS")}
        cadastre["TRANSPARENT"] = "true"
        layers.append((WMS_URL, cadastre))

    mosaic: Optional[Image.Image] = None
    for url, extra in layers:
        params = dict(common)
        params.update(extra)
        try:
            response = HTTP_SESSION.get(
                url, params=params, headers={"User-Agent": BASE_HEADERS["User-Agent"]}, timeout=HTTP_TIMEOUT
            )
            response.raise_for_status()
        except requests.RequestException as exc:
            raise TransportError(f"WMS request failed: {exc}", {"url": url}) from exc
        img = Image.open(BytesIO(response.content)).convert("RGBA")
        if mosaic is None:
            mosaic = img
        else:
            mosaic = Image.alpha_composite(mosaic, img.resize(mosaic.size))
    if mosaic is None:
        raise TransportError("Failed to download basemap for the requested bounds.")
    return np.array(mosaic), (minx, maxx, miny, maxy)


def _iter_polygons(geom: BaseGeometry) -> Iterable[Polygon]:
    if isinstance(geom, Polygon):
        yield geom
    elif hasattr(geom, "geoms"):
        for part in geom.geoms:
            yield from _iter_polygons(part)


def legend_label(key: SelectionKey) -> str:
    until = "active" if key.valid_to is None else format_date(key.valid_to)
    return f"{key.identifier} [{format_date(key.valid_from)} → {until}]"


def render_selection(
    records: Sequence[object],
    output_path: Path,
    *,
    bounds: Optional[BBox] = None,
    basemap: Optional[Tuple[np.ndarray, BBox]] = None,
    pad: float = 20.0,
) -> None:
    """Draw overlay records (``key``, ``geometries``, ``color``) into a PNG."""
    if not records:
        raise ValueError("Nothing selected to render.")
    fig: Figure
    ax: Axes
    fig, ax = plt.subplots(figsize=(8, 8))
    if bounds is None:
        all_geoms = [g for record in records for g in record.geometries]
        minx, miny, maxx, maxy = unary_bounds(all_geoms, pad=pad)
    else:
        minx, miny, maxx, maxy = bounds

    if basemap is not None:
        basemap_image, basemap_extent = basemap
        ax.imshow(basemap_image, extent=basemap_extent, origin="upper", interpolation="bilinear")

    ax.set_xlim(minx, maxx)
    ax.set_ylim(miny, maxy)
    ax.set_aspect("equal")
    identifiers = sorted({record.key.identifier for record in records})
    ax.set_title(f"Parcel versions: {', '.join(identifiers)}")

    for record in records:
        label = legend_label(record.key)
        for geom in record.geometries:
            for polygon in _iter_polygons(geom):
                x, y = polygon.exterior.xy
                ax.fill(x, y, color=record.color, alpha=0.2, label=label)
                ax.plot(x, y, color=record.color, linewidth=2.0)
                label = None

    ax.tick_params(left=False, bottom=False, labelleft=False, labelbottom=False)
    ax.set_xlabel("L-EST97 X (m)")
    ax.set_ylabel("L-EST97 Y (m)")
    ax.legend(loc="upper right")
    fig.tight_layout()
    fig.savefig(output_path, dpi=200)
    plt.close(fig)
    LOG.info("Comparison map saved to %s", output_path)


# ---------------------------------------------------------------------------
# Command line
# ---------------------------------------------------------------------------


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Inspect and compare cadastral parcel versions.")
    parser.add_argument("identifier", nargs="?", help=f"Parcel identifier, e.g. {EXAMPLE_IDENTIFIER}.")
    parser.add_argument(
        "--as-of",
        default=today_iso(),
        help="Only list versions valid on this date (YYYY-MM-DD, default: today). Pass '' to list every version.",
    )
    parser.add_argument(
        "--select",
        type=int,
        nargs="+",
        default=[],
        metavar="N",
        help="1-based row numbers of the listing to overlay (at most two).",
    )
    parser.add_argument(
        "--identify",
        type=float,
        nargs=2,
        metavar=("X", "Y"),
        help="Resolve the parcel under an EPSG:3301 coordinate instead of listing.",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=Path("parcel_versions.png"),
        help="Output PNG for the selected versions (default: %(default)s).",
    )
    parser.add_argument("--basemap", action="store_true", help="Draw the Maa-amet gray basemap underneath.")
    parser.add_argument("--debug", action="store_true", help="Enable verbose HTTP logging.")
    return parser.parse_args(argv)


def setup_logging(debug: bool) -> None:
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s [%(levelname)s] %(message)s")


def print_versions(records: Sequence[VersionRecord]) -> None:
    print(f"{'#':>3}  {'Identifier':<16} {'Valid from':<11} {'Valid to':<11} Acquisition")
    for index, record in enumerate(records, start=1):
        until = format_date(record.valid_to) or "active"
        print(
            f"{index:>3}  {record.identifier:<16} {format_date(record.valid_from):<11} "
            f"{until:<11} {record.acquisition_method or ''}"
        )


def main(argv: Optional[Sequence[str]] = None) -> int:
    from engine.selection import SelectionManager  # avoid circular dependency at import time

    args = parse_args(argv)
    setup_logging(args.debug)

    try:
        as_of = resolve_as_of(args.as_of)
        if args.identify:
            x, y = args.identify
            found = identify(x, y, as_of)
            print(found or "No parcel at this location.")
            return 0 if found else 1

        records = list_versions(args.identifier or "", as_of)
        if not records:
            print("No versions found.")
            return 1
        print(f"{len(records)} versions")
        print_versions(records)
        if not args.select:
            return 0

        manager = SelectionManager()
        for row in args.select:
            if not 1 <= row <= len(records):
                raise ValidationError(f"Row {row} is outside the listing (1-{len(records)}).")
            result = manager.toggle(records[row - 1])
            LOG.info("%s %s (%s)", result.action.capitalize(), result.key.token, result.color)
    except ParcelHistoryError as exc:
        LOG.error("%s", exc)
        return 2

    if not manager.keys():
        print("Nothing selected.")
        return 1

    drawer = manager.drawer
    if drawer.rows:
        print(f"\nVersion details for {drawer.identifier}:")
        columns = drawer.columns
        for detail in drawer.rows:
            print(json.dumps({col: detail.attributes.get(col) for col in columns}, default=str, ensure_ascii=False))

    overlay = manager.store.records()
    plot_bounds = expand_bounds(manager.store.union_extent(), 20.0)
    basemap = None
    if args.basemap:
        try:
            basemap = fetch_wms_basemap(plot_bounds, as_of)
        except TransportError as exc:
            LOG.warning("Unable to render basemap: %s", exc)
    render_selection(overlay, args.output, bounds=plot_bounds, basemap=basemap)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
