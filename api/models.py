from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from parcel_history import VersionRecord


class VersionRow(BaseModel):
    identifier: str = Field(..., description="Parcel identifier (tunnus), e.g. 79501:027:0011")
    valid_from: Optional[str] = Field(default=None, description="Start of validity (kehtiv_alates)")
    valid_to: Optional[str] = Field(default=None, description="End of validity; null while active (kehtiv_kuni)")
    acquisition_method: Optional[str] = Field(default=None, description="Acquisition method (omviis)")
    attributes: Dict[str, Any] = Field(default_factory=dict)

    def to_record(self) -> VersionRecord:
        return VersionRecord(
            identifier=self.identifier.strip(),
            valid_from=self.valid_from,
            valid_to=self.valid_to,
            acquisition_method=self.acquisition_method,
            attributes=dict(self.attributes),
        )


class VersionListing(BaseModel):
    identifier: Optional[str] = None
    as_of: Optional[str] = None
    loading: bool = False
    error: Optional[str] = None
    count: int = 0
    rows: List[Dict[str, Any]] = Field(default_factory=list)


class ViewFitModel(BaseModel):
    extent: List[float]
    padding: List[int]
    max_zoom: int
    duration_ms: int


class ToggleResponse(BaseModel):
    action: str
    key: str
    color: Optional[str] = None
    fit: Optional[ViewFitModel] = None
    selection: Dict[str, Any] = Field(default_factory=dict)


class DrawerRequest(BaseModel):
    open: bool


class IdentifyResponse(BaseModel):
    identifier: Optional[str] = None
    x: float
    y: float
    as_of: Optional[str] = None


class Viewport(BaseModel):
    center: List[float] = Field(..., min_length=2, max_length=2)
    zoom: float
