"""Due list, bulk action, preferences and summary schemas."""

from pydantic import BaseModel, Field

from bike_wear_server.schemas.components import ComponentResponse, IntervalResponse
from bike_wear_server.services.due_list import BulkResult, DueItem


class DueItemResponse(BaseModel):
    component: ComponentResponse
    bike_name: str | None
    min_health: int
    next_due_text: str
    intervals: list[IntervalResponse]

    @classmethod
    def from_item(cls, item: DueItem) -> "DueItemResponse":
        return cls(
            component=ComponentResponse.from_component(item.component),
            bike_name=item.bike_name,
            min_health=item.min_health,
            next_due_text=item.next_due_text,
            intervals=[IntervalResponse.from_interval(i) for i in item.intervals],
        )


class BulkRequest(BaseModel):
    component_ids: list[str] = Field(min_length=1)


class BulkResponse(BaseModel):
    succeeded: list[str]
    failed: dict[str, str]

    @classmethod
    def from_result(cls, result: BulkResult) -> "BulkResponse":
        return cls(succeeded=result.succeeded, failed=result.failed)


class PreferencesResponse(BaseModel):
    close_to_service_threshold: int
    default_alert_threshold_percent: int


class PreferencesUpdate(BaseModel):
    """Values outside 1..100 are clamped."""

    close_to_service_threshold: int | None = None
    default_alert_threshold_percent: int | None = None


class HealthSummaryResponse(BaseModel):
    summary: str
