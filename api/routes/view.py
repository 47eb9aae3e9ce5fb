from __future__ import annotations

from fastapi import APIRouter

from api import models
from api.services import storage

router = APIRouter()


@router.get("", response_model=models.Viewport)
async def read_view() -> models.Viewport:
    return models.Viewport(**storage.load_view())


@router.put("", response_model=models.Viewport)
async def save_view(payload: models.Viewport) -> models.Viewport:
    storage.save_view(payload.center, payload.zoom)
    return models.Viewport(center=storage.clamp_center(payload.center), zoom=payload.zoom)
