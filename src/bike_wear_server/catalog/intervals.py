"""Default service schedules per component type."""

from dataclasses import dataclass

from bike_wear_server.catalog.taxonomy import ComponentType as T
from bike_wear_server.models.service_interval import IntervalType

# Interval time constants, in seconds
HOUR = 3600
DAY = 24 * HOUR

TWO_WEEKS = 14 * DAY
ONE_MONTH = 30 * DAY
THREE_MONTHS = 90 * DAY
SIX_MONTHS = 180 * DAY
TWELVE_MONTHS = 365 * DAY
EIGHTEEN_MONTHS = 18 * 30 * DAY
TWENTY_FOUR_MONTHS = 24 * 30 * DAY
THREE_YEARS = 3 * 365 * DAY
FIFTY_HOURS = 50 * HOUR
TWO_HUNDRED_HOURS = 200 * HOUR

# Name of the single interval given to types with no schedule
FALLBACK_INTERVAL_NAME = "Max life"


@dataclass(frozen=True)
class IntervalSpec:
    """A default maintenance schedule entry."""

    type: T
    name: str
    interval_km: float
    interval_time_seconds: int | None = None
    interval_type: IntervalType = IntervalType.REPLACE
    notes: str | None = None


_INSPECT = IntervalType.INSPECTION
_GREASE = IntervalType.GREASE
_REPLACE = IntervalType.REPLACE
_ON_FAILURE = IntervalType.ON_FAILURE

INTERVAL_SPECS: tuple[IntervalSpec, ...] = (
    # Drivetrain
    IntervalSpec(T.CHAIN, "Inspect / Clean / Lube", 250.0, TWO_WEEKS, _INSPECT),
    IntervalSpec(T.CHAIN, "Replace", 3_500.0, None, _REPLACE),
    IntervalSpec(T.CASSETTE, "Clean", 500.0, ONE_MONTH, _INSPECT),
    IntervalSpec(T.CASSETTE, "Replace", 10_000.0, None, _REPLACE, "recommended every 4th chain"),
    IntervalSpec(T.FREEWHEEL, "Replace", 10_000.0, None, _REPLACE, "recommended every 4th chain"),
    IntervalSpec(T.CHAINRING, "Replace", 20_000.0, None, _REPLACE, "recommended every 4th chain"),
    IntervalSpec(T.BOTTOM_BRACKET, "Inspect / Clean", 2_000.0, SIX_MONTHS, _INSPECT),
    IntervalSpec(T.BOTTOM_BRACKET, "Replace", 15_000.0, None, _REPLACE),
    IntervalSpec(T.CRANKS, "Inspect (Torque check)", 5_000.0, TWELVE_MONTHS, _INSPECT),
    IntervalSpec(T.PEDALS, "Service (Grease)", 5_000.0, TWELVE_MONTHS, _GREASE),
    IntervalSpec(T.FRONT_DERAILLEUR, "Inspect / Clean", 500.0, ONE_MONTH, _INSPECT),
    IntervalSpec(T.REAR_DERAILLEUR, "Inspect / Clean (Pulleys)", 500.0, ONE_MONTH, _INSPECT),
    # Wheels & tires
    IntervalSpec(T.TIRE, "Replace", 4_500.0, TWENTY_FOUR_MONTHS, _REPLACE),
    IntervalSpec(T.TUBE, "Replace", 0.0, None, _ON_FAILURE, "replace on puncture"),
    IntervalSpec(T.TUBELESS_SEALANT, "Top-up", 0.0, THREE_MONTHS, _INSPECT),
    IntervalSpec(T.FRONT_WHEEL, "True / Tension", 2_000.0, SIX_MONTHS, _INSPECT),
    IntervalSpec(T.REAR_WHEEL, "True / Tension", 2_000.0, SIX_MONTHS, _INSPECT),
    IntervalSpec(T.HUB, "Service (Bearings)", 10_000.0, TWELVE_MONTHS, _GREASE),
    IntervalSpec(T.SPOKES, "Inspect (Tension)", 2_000.0, SIX_MONTHS, _INSPECT),
    IntervalSpec(T.RIM, "Inspect (Wear/Cracks)", 5_000.0, TWELVE_MONTHS, _INSPECT),
    # Brakes
    IntervalSpec(T.BRAKE_PADS, "Inspect", 500.0, ONE_MONTH, _INSPECT),
    IntervalSpec(T.BRAKE_PADS, "Replace", 2_000.0, None, _REPLACE),
    IntervalSpec(T.BRAKE_ROTOR, "Inspect (Thickness/True)", 1_000.0, THREE_MONTHS, _INSPECT),
    IntervalSpec(T.BRAKE_ROTOR, "Replace", 15_000.0, None, _REPLACE),
    IntervalSpec(T.BRAKE_CALIPER, "Clean / Piston Lube", 5_000.0, TWELVE_MONTHS, _GREASE),
    IntervalSpec(T.BRAKE_FLUID, "Bleed / Flush", 5_000.0, TWELVE_MONTHS, _INSPECT),
    IntervalSpec(T.BRAKE_CABLES, "Replace Housing/Wire", 6_000.0, EIGHTEEN_MONTHS, _REPLACE),
    # Cockpit
    IntervalSpec(T.HANDLEBARS, "Inspect (Fatigue/Cracks)", 5_000.0, TWELVE_MONTHS, _INSPECT),
    IntervalSpec(T.STEM, "Inspect (Torque)", 2_000.0, SIX_MONTHS, _INSPECT),
    IntervalSpec(T.HEADSET, "Inspect (Play)", 1_000.0, THREE_MONTHS, _INSPECT),
    IntervalSpec(T.HEADSET_BEARINGS, "Service (Grease)", 5_000.0, TWELVE_MONTHS, _GREASE),
    IntervalSpec(T.HEADSET_BEARINGS, "Replace", 15_000.0, None, _REPLACE),
    IntervalSpec(T.GRIPS, "Replace", 5_000.0, TWELVE_MONTHS, _REPLACE),
    IntervalSpec(T.SHIFT_LEVERS, "Flush / Lube", 10_000.0, TWENTY_FOUR_MONTHS, _GREASE),
    # Frame & seating
    IntervalSpec(T.FRAME, "Inspect (Cracks/Damage)", 1_000.0, THREE_MONTHS, _INSPECT),
    IntervalSpec(T.FORK, "Lower Leg Service", 1_000.0, FIFTY_HOURS, _GREASE),
    IntervalSpec(T.FORK, "Full Rebuild", 4_000.0, TWO_HUNDRED_HOURS, _REPLACE),
    IntervalSpec(T.REAR_SHOCK, "Air Can Service", 1_000.0, FIFTY_HOURS, _GREASE),
    IntervalSpec(T.REAR_SHOCK, "Full Rebuild", 4_000.0, TWO_HUNDRED_HOURS, _REPLACE),
    IntervalSpec(T.SUSPENSION_PIVOTS, "Replace Bearings", 10_000.0, TWENTY_FOUR_MONTHS, _REPLACE),
    IntervalSpec(T.SADDLE, "Inspect (Rails)", 5_000.0, TWELVE_MONTHS, _INSPECT),
    IntervalSpec(T.SEAT_POST, "Clean / Re-grease", 2_000.0, SIX_MONTHS, _GREASE),
    IntervalSpec(T.DROPPER_POST, "Service (Collar/Lube)", 1_000.0, FIFTY_HOURS, _GREASE),
    IntervalSpec(T.DROPPER_POST, "Full Rebuild", 4_000.0, TWO_HUNDRED_HOURS, _REPLACE),
    # Cables & power
    IntervalSpec(T.SHIFT_CABLES, "Replace Housing/Wire", 6_000.0, EIGHTEEN_MONTHS, _REPLACE),
    IntervalSpec(T.CABLE_SEAT_DROPPER, "Replace Housing/Wire", 8_000.0, TWENTY_FOUR_MONTHS, _REPLACE),
    IntervalSpec(T.CABLE_FRONT_DERAILLEUR, "Replace Housing/Wire", 6_000.0, EIGHTEEN_MONTHS, _REPLACE),
    IntervalSpec(T.CABLE_REAR_DERAILLEUR, "Replace Housing/Wire", 6_000.0, EIGHTEEN_MONTHS, _REPLACE),
    IntervalSpec(T.CABLE_FRONT_BRAKE, "Replace Housing/Wire", 6_000.0, EIGHTEEN_MONTHS, _REPLACE),
    IntervalSpec(T.CABLE_REAR_BRAKE, "Replace Housing/Wire", 6_000.0, EIGHTEEN_MONTHS, _REPLACE),
    IntervalSpec(T.BATTERY, "Inspect / Charge Check", 500.0, ONE_MONTH, _INSPECT),
    IntervalSpec(T.BATTERY, "Replace", 0.0, THREE_YEARS, _REPLACE, "approx 500 charge cycles"),
)

_SPECS_BY_TYPE: dict[T, list[IntervalSpec]] = {}
for _spec in INTERVAL_SPECS:
    _SPECS_BY_TYPE.setdefault(_spec.type, []).append(_spec)


def interval_specs_for(raw_type: str, include_on_failure: bool = False) -> list[IntervalSpec]:
    """Default schedule for a component type key.

    On-failure entries are informational and left out unless asked for.
    """
    specs = _SPECS_BY_TYPE.get(T.parse(raw_type), [])
    if include_on_failure:
        return list(specs)
    return [spec for spec in specs if spec.interval_type is not IntervalType.ON_FAILURE]


def replace_interval_km(raw_type: str) -> float | None:
    """Distance of the primary replace interval, used as a default lifespan."""
    for spec in interval_specs_for(raw_type):
        if spec.interval_type is IntervalType.REPLACE and spec.interval_km > 0:
            return spec.interval_km
    return None
