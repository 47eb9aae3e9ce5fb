from __future__ import annotations

from typing import Optional

from fastapi import APIRouter

from api import models
from api.errors import to_http_exception
from api.services.session import get_session
from parcel_history import ParcelHistoryError, build_wms_params, resolve_as_of

router = APIRouter()


@router.get("", response_model=models.VersionListing)
def search_versions(identifier: str, as_of: Optional[str] = None) -> models.VersionListing:
    """List every validity interval of a parcel, active version first.

    Without ``as_of`` the session's current as-of date applies; pass an empty
    value to list versions of every date.
    """
    session = get_session()
    try:
        resolved = session.as_of if as_of is None else resolve_as_of(as_of)
        session.results.search(identifier, resolved)
    except ParcelHistoryError as exc:
        raise to_http_exception(exc) from exc
    return models.VersionListing(**session.results.to_dict())


@router.get("/current", response_model=models.VersionListing)
async def current_versions() -> models.VersionListing:
    return models.VersionListing(**get_session().results.to_dict())


@router.put("/as-of", response_model=models.VersionListing)
def change_as_of(as_of: Optional[str] = None) -> models.VersionListing:
    """Change the as-of date and repeat the last search under it."""
    session = get_session()
    try:
        session.as_of = resolve_as_of(as_of)
        session.results.rerun(session.as_of)
    except ParcelHistoryError as exc:
        raise to_http_exception(exc) from exc
    return models.VersionListing(**session.results.to_dict())


@router.get("/wms-params")
async def wms_params(as_of: Optional[str] = None) -> dict[str, object]:
    """Parameters for the cadastral boundary WMS layer under the as-of date."""
    session = get_session()
    try:
        return build_wms_params(session.as_of if as_of is None else as_of)
    except ParcelHistoryError as exc:
        raise to_http_exception(exc) from exc
