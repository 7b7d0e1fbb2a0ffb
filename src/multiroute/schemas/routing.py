"""Routing request/response schemas."""

from __future__ import annotations

from typing import List, Literal, Optional, Tuple

from pydantic import BaseModel, Field

RestrictionName = Literal["ferries", "dirt", "tolls", "highways"]
ServiceName = Literal["platform", "google", "tomtom", "all"]


class WaypointModel(BaseModel):
    order: int = Field(..., ge=1, description="1-based visiting order of the waypoint.")
    latitude: float = Field(..., ge=-90.0, le=90.0)
    longitude: float = Field(..., ge=-180.0, le=180.0)
    altitude: float = 0.0
    address: Optional[str] = None


class TimeRequirementModel(BaseModel):
    type: Literal["departure", "arrival"] = "departure"
    epoch_time: int = Field(..., ge=0, description="Seconds since the Unix epoch.")


class RouteFindRequest(BaseModel):
    waypoints: List[WaypointModel] = Field(..., min_length=2)
    avoid: List[RestrictionName] = Field(default_factory=list, description="Road features to avoid.")
    time_requirement: Optional[TimeRequirementModel] = None
    services: Optional[List[ServiceName]] = Field(
        default=None,
        description="Providers to query. Defaults to the configured selection.",
    )


class BoundingBoxModel(BaseModel):
    north: float
    west: float
    south: float
    east: float
    wraps_antimeridian: bool


class RouteModel(BaseModel):
    provider: str
    headline: str
    details: str
    duration_secs: int
    distance_meters: int
    path: List[Tuple[float, float]]
    bounds: Optional[BoundingBoxModel] = None


class ProviderFailureModel(BaseModel):
    provider: str
    error_type: str
    message: str


class RouteFindResponse(BaseModel):
    routes: List[RouteModel]
    viewport: Optional[BoundingBoxModel] = None
    succeeded: List[str] = Field(default_factory=list, description="Providers that answered without error.")
    failures: List[ProviderFailureModel] = Field(default_factory=list)
    notification: Optional[str] = None
