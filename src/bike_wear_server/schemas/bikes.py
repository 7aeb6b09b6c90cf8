"""Bike schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class BikeCreate(BaseModel):
    """New bike. Default components are seeded unless seed_defaults is false."""

    name: str = Field(min_length=1, max_length=255, description="Display name")
    make: str | None = Field(default=None, max_length=255)
    model: str | None = Field(default=None, max_length=255)
    year: int | None = Field(default=None, ge=1800, le=2100)
    description: str | None = None
    seed_defaults: bool = Field(default=True, description="Create the default parts list")


class BikeUpdate(BaseModel):
    """Display fields to change; omitted fields are kept."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    make: str | None = Field(default=None, max_length=255)
    model: str | None = Field(default=None, max_length=255)
    year: int | None = Field(default=None, ge=1800, le=2100)
    description: str | None = None


class BikeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    make: str | None
    model: str | None
    year: int | None
    description: str | None
    total_distance_km: float
    total_time_seconds: int
    avg_speed_kmh: float
    max_speed_kmh: float
    total_elev_gain_m: float
    total_elev_loss_m: float
    last_ride_at: datetime | None
    chain_replacement_count: int
    drivetrain_advisory: bool = Field(
        description="Chain replaced 3+ times since the cassette/freewheel/chainrings"
    )


class BikeOverviewResponse(BaseModel):
    bike: BikeResponse
    health: int = Field(description="Health of the most worn component")
    needs_attention: bool
    component_count: int


class SeedResponse(BaseModel):
    bike_id: str
    created: int = Field(description="Number of components created")
