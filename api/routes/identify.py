from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException

from api import models
from api.errors import to_http_exception
from api.services.session import get_session
from parcel_history import ParcelHistoryError, identify, resolve_as_of

LOG = logging.getLogger(__name__)
router = APIRouter()


@router.get("", response_model=models.IdentifyResponse)
def identify_point(x: float, y: float, as_of: Optional[str] = None) -> models.IdentifyResponse:
    """Resolve an EPSG:3301 map coordinate to the parcel identifier under it."""
    session = get_session()
    session.close_popup()
    try:
        resolved = session.as_of if as_of is None else resolve_as_of(as_of)
    except ParcelHistoryError as exc:
        raise to_http_exception(exc) from exc
    found = identify(x, y, resolved, fetch=session.fetch)
    if found:
        session.show_popup(found, x, y)
    else:
        LOG.debug("No parcel at %s,%s", x, y)
    return models.IdentifyResponse(identifier=found, x=x, y=y, as_of=resolved)


@router.get("/popup")
async def read_popup() -> dict[str, Optional[object]]:
    popup = get_session().popup
    if popup is None:
        return {"identifier": None, "x": None, "y": None}
    return {"identifier": popup.identifier, "x": popup.x, "y": popup.y}


@router.post("/popup/search", response_model=models.VersionListing)
def search_popup_identifier() -> models.VersionListing:
    """List the versions of the parcel shown in the popup, then close it."""
    session = get_session()
    popup = session.popup
    if popup is None:
        raise HTTPException(status_code=404, detail="No parcel popup is open.")
    try:
        session.results.search(popup.identifier, session.as_of)
    except ParcelHistoryError as exc:
        raise to_http_exception(exc) from exc
    finally:
        session.close_popup()
    return models.VersionListing(**session.results.to_dict())


@router.delete("")
async def close_popup() -> dict[str, bool]:
    get_session().close_popup()
    return {"closed": True}
