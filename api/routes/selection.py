from __future__ import annotations

from fastapi import APIRouter, HTTPException

from api import models
from api.errors import to_http_exception
from api.services.session import get_session
from parcel_history import ParcelHistoryError, validate_identifier

router = APIRouter()


@router.get("")
async def read_selection() -> dict[str, object]:
    return get_session().selection.snapshot()


@router.post("/toggle", response_model=models.ToggleResponse)
def toggle_version(row: models.VersionRow) -> models.ToggleResponse:
    """Add a version to the comparison, or remove it when already selected."""
    if not validate_identifier(row.identifier):
        raise HTTPException(status_code=422, detail="Invalid parcel identifier.")
    selection = get_session().selection
    try:
        result = selection.toggle(row.to_record())
    except ParcelHistoryError as exc:
        raise to_http_exception(exc) from exc
    return models.ToggleResponse(
        action=result.action,
        key=result.key.token,
        color=result.color,
        fit=result.fit.to_dict() if result.fit else None,
        selection=selection.snapshot(),
    )


@router.post("/clear")
def clear_selection() -> dict[str, object]:
    selection = get_session().selection
    selection.clear()
    return selection.snapshot()


@router.get("/geo")
async def read_selection_geo() -> dict[str, object]:
    """GeoJSON of the selected geometries, each feature carrying its key and color."""
    return get_session().selection.feature_collection()


@router.get("/fit")
async def fit_selection() -> dict[str, object]:
    fit = get_session().selection.fit_all()
    if fit is None:
        raise HTTPException(status_code=404, detail="Nothing selected.")
    return fit.to_dict()


@router.post("/drawer")
async def set_drawer(payload: models.DrawerRequest) -> dict[str, object]:
    return get_session().selection.set_drawer_open(payload.open)
