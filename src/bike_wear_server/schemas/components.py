"""Component, interval and context schemas."""

from datetime import date, datetime, timedelta

from pydantic import BaseModel, ConfigDict, Field, model_validator

from bike_wear_server.catalog.taxonomy import Position, category_for
from bike_wear_server.formatting import format_type_for_display, parse_interval_time
from bike_wear_server.models.component import Component
from bike_wear_server.models.service_interval import IntervalType, ServiceInterval
from bike_wear_server.services.wear import (
    component_health_percent,
    describe_interval,
    interval_health_percent,
)


class ComponentCreate(BaseModel):
    """New component; lifespan defaults from the type when omitted."""

    type: str = Field(min_length=1, max_length=64, description="Type key, e.g. chain")
    name: str = Field(min_length=1, max_length=255)
    bike_id: str | None = Field(default=None, description="Install on this bike (garage if null)")
    lifespan_km: float | None = Field(default=None, ge=0)
    position: Position = Position.NONE
    initial_distance_km: float = Field(default=0.0, ge=0, description="Distance already ridden")
    initial_time_seconds: int = Field(default=0, ge=0, description="Time already ridden")
    alert_threshold_percent: int | None = Field(default=None, ge=1, le=100)
    make_model: str | None = Field(default=None, max_length=255)
    notes: str | None = None


class ComponentUpdate(BaseModel):
    """Manual edit; distance and time are clamped at 0."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    make_model: str | None = Field(default=None, max_length=255)
    notes: str | None = None
    lifespan_km: float | None = Field(default=None, ge=0)
    distance_used_km: float | None = None
    total_time_seconds: int | None = None
    position: Position | None = None
    reset_speed_stats: bool = Field(default=False, description="Zero avg/max speed")


class InstallRequest(BaseModel):
    bike_id: str


class SnoozeRequest(BaseModel):
    """Snooze by distance and/or time. Empty body snoozes for 500 km."""

    km: float | None = Field(default=None, gt=0)
    until: datetime | None = None
    days: int | None = Field(default=None, gt=0)

    @property
    def duration(self) -> timedelta | None:
        return timedelta(days=self.days) if self.days else None


class AlertConfigRequest(BaseModel):
    enabled: bool | None = None
    threshold_percent: int | None = Field(default=None, ge=1, le=100)


class ComponentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    bike_id: str | None
    type: str
    type_display: str
    category: str
    name: str
    make_model: str | None
    notes: str | None
    position: str
    lifespan_km: float
    distance_used_km: float
    total_time_seconds: int
    avg_speed_kmh: float
    max_speed_kmh: float
    max_speed_bike_id: str | None
    installed_at: datetime
    alert_threshold_percent: int
    alert_snooze_until_km: float | None
    alert_snooze_until_time: datetime | None
    alerts_enabled: bool
    health: int

    @classmethod
    def from_component(cls, component: Component) -> "ComponentResponse":
        return cls(
            id=component.id,
            bike_id=component.bike_id,
            type=component.type,
            type_display=format_type_for_display(component.type),
            category=category_for(component.type).value,
            name=component.name,
            make_model=component.make_model,
            notes=component.notes,
            position=component.position,
            lifespan_km=component.lifespan_km,
            distance_used_km=component.distance_used_km,
            total_time_seconds=component.total_time_seconds,
            avg_speed_kmh=component.avg_speed_kmh,
            max_speed_kmh=component.max_speed_kmh,
            max_speed_bike_id=component.max_speed_bike_id,
            installed_at=component.installed_at,
            alert_threshold_percent=component.alert_threshold_percent,
            alert_snooze_until_km=component.alert_snooze_until_km,
            alert_snooze_until_time=component.alert_snooze_until_time,
            alerts_enabled=component.alerts_enabled,
            health=component_health_percent(component),
        )


class IntervalCreate(BaseModel):
    """Custom interval. Time may be given in seconds or as text ("2 weeks")."""

    name: str = Field(min_length=1, max_length=255)
    type: IntervalType = IntervalType.REPLACE
    interval_km: float = Field(default=0.0, ge=0, description="0 = ignore distance")
    interval_time_seconds: int | None = Field(default=None, gt=0)
    interval_time: str | None = Field(default=None, description='e.g. "2 weeks", "50 hours"')

    @model_validator(mode="after")
    def resolve_interval(self) -> "IntervalCreate":
        if self.interval_time is not None and self.interval_time_seconds is None:
            seconds = parse_interval_time(self.interval_time)
            if seconds is None or seconds <= 0:
                raise ValueError(f"Cannot parse interval time: {self.interval_time!r}")
            self.interval_time_seconds = seconds
        if self.interval_km <= 0 and self.interval_time_seconds is None:
            raise ValueError("Set a distance interval, a time interval, or both")
        return self


class IntervalUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    type: IntervalType | None = None
    interval_km: float | None = Field(default=None, ge=0)
    interval_time_seconds: int | None = Field(default=None, gt=0)
    clear_interval_time: bool = False

    @model_validator(mode="after")
    def keep_one_clock(self) -> "IntervalUpdate":
        if self.interval_km == 0 and self.clear_interval_time:
            raise ValueError("Set a distance interval, a time interval, or both")
        return self


class IntervalResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    component_id: str
    name: str
    type: str
    interval_km: float
    tracked_km: float
    interval_time_seconds: int | None
    tracked_time_seconds: int | None
    health: int
    description: str

    @classmethod
    def from_interval(cls, interval: ServiceInterval) -> "IntervalResponse":
        return cls(
            id=interval.id,
            component_id=interval.component_id,
            name=interval.name,
            type=interval.type,
            interval_km=interval.interval_km,
            tracked_km=interval.tracked_km,
            interval_time_seconds=interval.interval_time_seconds,
            tracked_time_seconds=interval.tracked_time_seconds,
            health=interval_health_percent(interval),
            description=describe_interval(interval),
        )


class ResetIntervalsRequest(BaseModel):
    types: list[IntervalType] = Field(min_length=1)


class SwapResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    component_id: str
    bike_id: str
    installed_at: datetime
    uninstalled_at: datetime | None


class ContextRequest(BaseModel):
    """Component context. Validation messages come from the service."""

    notes: str
    install_date: date | None = None
    purchase_link: str | None = None
    serial_number: str | None = None
    last_service_notes: str | None = None
    purchase_price: str | None = None
    purchase_date: date | None = None


class ContextResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    component_id: str
    notes: str
    install_date: date | None
    purchase_link: str | None
    serial_number: str | None
    last_service_notes: str | None
    purchase_price: str | None
    purchase_date: date | None
