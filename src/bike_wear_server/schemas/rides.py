"""Ride schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from bike_wear_server.models.ride import RideSource
from bike_wear_server.services.rides import AggregationResult, ImportResult, RideInput


class RideCreate(BaseModel):
    """A finished ride summary."""

    bike_id: str | None = Field(default=None, description="Bike ridden (null = no wear applied)")
    distance_km: float = Field(ge=0)
    duration_ms: int = Field(ge=0)
    avg_speed_kmh: float = Field(default=0.0, ge=0)
    max_speed_kmh: float = Field(default=0.0, ge=0)
    elev_gain_m: float = Field(default=0.0, ge=0)
    elev_loss_m: float = Field(default=0.0, ge=0)
    started_at: datetime
    ended_at: datetime
    source: RideSource = RideSource.APP

    def to_input(self) -> RideInput:
        return RideInput(**self.model_dump())


class RideImportRequest(BaseModel):
    rides: list[RideCreate] = Field(min_length=1)


class RideResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    bike_id: str | None
    distance_km: float
    duration_ms: int
    avg_speed_kmh: float
    max_speed_kmh: float
    elev_gain_m: float
    elev_loss_m: float
    started_at: datetime
    ended_at: datetime
    source: str
    aggregated_at: datetime | None


class AlertSummary(BaseModel):
    count: int
    names: list[str]
    title: str
    body: str


class AggregationResponse(BaseModel):
    status: str
    ride_id: str
    bike_id: str | None
    failed_step: str | None
    errors: dict[str, str]
    components_updated: int
    alert: AlertSummary | None

    @classmethod
    def from_result(cls, result: AggregationResult) -> "AggregationResponse":
        alert = None
        if result.alert:
            alert = AlertSummary(
                count=result.alert.count,
                names=result.alert.names,
                title=result.alert.title,
                body=result.alert.body,
            )
        return cls(
            status=result.status.value,
            ride_id=result.ride_id,
            bike_id=result.bike_id,
            failed_step=result.failed_step.value if result.failed_step else None,
            errors=result.errors,
            components_updated=result.components_updated,
            alert=alert,
        )


class ImportResponse(BaseModel):
    imported: int
    duplicates: int
    aggregated: int
    skipped: int
    partial: int
    results: list[AggregationResponse]

    @classmethod
    def from_result(cls, result: ImportResult) -> "ImportResponse":
        return cls(
            imported=result.imported,
            duplicates=result.duplicates,
            aggregated=result.aggregated,
            skipped=result.skipped,
            partial=result.partial,
            results=[AggregationResponse.from_result(r) for r in result.results],
        )


class LiveStartRequest(BaseModel):
    bike_id: str


class LiveSampleRequest(BaseModel):
    distance_km: float = Field(ge=0, description="Distance since the previous sample")
    speed_kmh: float
    altitude_m: float | None = None


class LiveRideResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    bike_id: str
    started_at: datetime
    distance_km: float
    current_speed_kmh: float
    avg_speed_kmh: float
    max_speed_kmh: float
    elev_gain_m: float
    elev_loss_m: float
    sample_count: int
    is_paused: bool
