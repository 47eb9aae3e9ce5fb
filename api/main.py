import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.routes import identify, selection, versions, view
from api.services.session import get_session
from parcel_history import SRS_NAME, WFS_TYPENAME, WFS_URL, setup_logging

LOG = logging.getLogger(__name__)

setup_logging(os.getenv("PARCEL_API_DEBUG", "").lower() in ("1", "true", "yes"))

LOCAL_ORIGINS = ("http://localhost:5173", "http://localhost:3000", "http://localhost:8000")


def allowed_origins() -> list[str]:
    raw = os.getenv("CORS_ALLOWED_ORIGINS")
    if raw is None:
        return list(LOCAL_ORIGINS)
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


app = FastAPI(title="Parcel History API", version="0.1.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins(),
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["*"],
)


@app.get("/")
async def root() -> dict[str, object]:
    return {
        "service": "parcel-history",
        "docs": "/docs",
        "endpoints": ["/versions", "/selection", "/identify", "/view"],
    }


@app.get("/health")
async def health() -> dict[str, object]:
    session = get_session()
    return {
        "status": "ok",
        "feature_service": {"url": WFS_URL, "type_name": WFS_TYPENAME, "srs": SRS_NAME},
        "as_of": session.as_of,
        "selected": len(session.selection.keys()),
    }


app.include_router(versions.router, prefix="/versions", tags=["versions"])
app.include_router(selection.router, prefix="/selection", tags=["selection"])
app.include_router(identify.router, prefix="/identify", tags=["identify"])
app.include_router(view.router, prefix="/view", tags=["view"])
LOG.debug("Parcel History API ready, feature service %s", WFS_URL)
