"""Default parts seeded onto every new bike, and types offered when adding parts."""

from dataclasses import dataclass

from bike_wear_server.catalog.taxonomy import ComponentType as T
from bike_wear_server.catalog.taxonomy import Position


@dataclass(frozen=True)
class SeedComponent:
    """One default part created for a new bike."""

    type: T
    name: str
    position: Position
    lifespan_km: float


@dataclass(frozen=True)
class SuggestedType:
    """A component type offered when adding a part by hand."""

    type: T
    display_name: str
    lifespan_km: float


_NONE = Position.NONE
_FRONT = Position.FRONT
_REAR = Position.REAR

# Basic bike: tubes, mechanical brakes, no tubeless or suspension.
# Order: cockpit, frame, drivetrain, wheels, brakes, cables.
SEED_COMPONENTS: tuple[SeedComponent, ...] = (
    # Cockpit
    SeedComponent(T.HANDLEBARS, "Default handlebars", _NONE, 50_000.0),
    SeedComponent(T.STEM, "Default stem", _NONE, 50_000.0),
    SeedComponent(T.HEADSET, "Default headset", _NONE, 15_000.0),
    SeedComponent(T.HEADSET_BEARINGS, "Default headset_bearings", _NONE, 15_000.0),
    SeedComponent(T.BRAKE_LEVERS, "Default brake_levers (front)", _FRONT, 50_000.0),
    SeedComponent(T.BRAKE_LEVERS, "Default brake_levers (rear)", _REAR, 50_000.0),
    SeedComponent(T.SHIFT_LEVERS, "Default shift_levers (front)", _FRONT, 40_000.0),
    SeedComponent(T.SHIFT_LEVERS, "Default shift_levers (rear)", _REAR, 40_000.0),
    SeedComponent(T.BAR_ENDS, "Default bar_ends", _NONE, 50_000.0),
    SeedComponent(T.GRIPS, "Default grips", _NONE, 5_000.0),
    # Frame (includes fork)
    SeedComponent(T.FRAME, "Default frame", _NONE, 100_000.0),
    SeedComponent(T.FORK, "Default fork", _NONE, 40_000.0),
    SeedComponent(T.SEAT_POST, "Default seat post", _NONE, 30_000.0),
    SeedComponent(T.SADDLE, "Default saddle", _NONE, 25_000.0),
    # Drivetrain
    SeedComponent(T.CRANKS, "Default cranks", _NONE, 40_000.0),
    SeedComponent(T.CHAINRING, "Default chainring", _NONE, 20_000.0),
    SeedComponent(T.CHAIN, "Default chain", _NONE, 3_500.0),
    SeedComponent(T.FRONT_DERAILLEUR, "Default front derailleur", _FRONT, 25_000.0),
    SeedComponent(T.REAR_DERAILLEUR, "Default rear derailleur", _REAR, 25_000.0),
    SeedComponent(T.BOTTOM_BRACKET, "Default bottom bracket", _NONE, 15_000.0),
    SeedComponent(T.PEDALS, "Default pedals", _NONE, 25_000.0),
    SeedComponent(T.CASSETTE, "Default cassette", _NONE, 10_000.0),
    # Wheels: front
    SeedComponent(T.HUB, "Default hub (front)", _FRONT, 50_000.0),
    SeedComponent(T.SPOKES, "Default spokes (front)", _FRONT, 30_000.0),
    SeedComponent(T.TIRE, "Default tire (front)", _FRONT, 4_500.0),
    SeedComponent(T.TUBE, "Default tube (front)", _FRONT, 5_000.0),
    SeedComponent(T.RIM, "Default rim (front)", _FRONT, 40_000.0),
    # Wheels: rear
    SeedComponent(T.HUB, "Default hub (rear)", _REAR, 50_000.0),
    SeedComponent(T.SPOKES, "Default spokes (rear)", _REAR, 30_000.0),
    SeedComponent(T.TIRE, "Default tire (rear)", _REAR, 4_500.0),
    SeedComponent(T.TUBE, "Default tube (rear)", _REAR, 5_000.0),
    SeedComponent(T.RIM, "Default rim (rear)", _REAR, 40_000.0),
    # Brakes
    SeedComponent(T.BRAKE_CALIPER, "Default brake caliper (front)", _FRONT, 50_000.0),
    SeedComponent(T.BRAKE_PADS, "Default brake pads (front)", _FRONT, 2_000.0),
    SeedComponent(T.BRAKE_ROTOR, "Default brake rotor (front)", _FRONT, 15_000.0),
    SeedComponent(T.BRAKE_CALIPER, "Default brake caliper (rear)", _REAR, 50_000.0),
    SeedComponent(T.BRAKE_PADS, "Default brake pads (rear)", _REAR, 2_000.0),
    SeedComponent(T.BRAKE_ROTOR, "Default brake rotor (rear)", _REAR, 15_000.0),
    # Cables
    SeedComponent(T.CABLE_FRONT_DERAILLEUR, "Default cable front derailleur", _NONE, 6_000.0),
    SeedComponent(T.CABLE_REAR_DERAILLEUR, "Default cable rear derailleur", _NONE, 6_000.0),
    SeedComponent(T.CABLE_FRONT_BRAKE, "Default cable front brake", _NONE, 6_000.0),
    SeedComponent(T.CABLE_REAR_BRAKE, "Default cable rear brake", _NONE, 6_000.0),
    SeedComponent(T.CABLE_SEAT_DROPPER, "Default cable seat dropper", _NONE, 8_000.0),
)

SUGGESTED_TYPES: tuple[SuggestedType, ...] = (
    # Drivetrain
    SuggestedType(T.CHAIN, "Chain", 3_500.0),
    SuggestedType(T.CASSETTE, "Cassette", 10_000.0),
    SuggestedType(T.FREEWHEEL, "Freewheel", 10_000.0),
    SuggestedType(T.CHAINRING, "Chainring(s)", 20_000.0),
    SuggestedType(T.BOTTOM_BRACKET, "Bottom Bracket", 15_000.0),
    SuggestedType(T.CRANKS, "Cranks", 40_000.0),
    SuggestedType(T.PEDALS, "Pedals", 25_000.0),
    SuggestedType(T.FRONT_DERAILLEUR, "Front Derailleur", 25_000.0),
    SuggestedType(T.REAR_DERAILLEUR, "Rear Derailleur", 25_000.0),
    # Wheels & tires
    SuggestedType(T.TIRE, "Tire", 4_500.0),
    SuggestedType(T.FRONT_WHEEL, "Front Wheel", 20_000.0),
    SuggestedType(T.REAR_WHEEL, "Rear Wheel", 20_000.0),
    SuggestedType(T.TUBELESS_SEALANT, "Tubeless Sealant", 0.0),
    # Brakes
    SuggestedType(T.FRONT_BRAKE, "Front Brake", 5_000.0),
    SuggestedType(T.REAR_BRAKE, "Rear Brake", 5_000.0),
    SuggestedType(T.BRAKE_PADS, "Brake Pads", 2_000.0),
    SuggestedType(T.BRAKE_ROTOR, "Brake Rotor", 15_000.0),
    SuggestedType(T.BRAKE_CABLES, "Brake Cables / Housing", 6_000.0),
    SuggestedType(T.BRAKE_FLUID, "Brake Fluid", 12_000.0),
    # Cockpit
    SuggestedType(T.HANDLEBARS, "Handlebars", 50_000.0),
    SuggestedType(T.STEM, "Stem", 50_000.0),
    SuggestedType(T.HEADSET, "Headset", 15_000.0),
    SuggestedType(T.HEADSET_BEARINGS, "Headset Bearings", 15_000.0),
    SuggestedType(T.BRAKE_LEVERS, "Brake Levers", 50_000.0),
    SuggestedType(T.SHIFT_LEVERS, "Shift Levers", 40_000.0),
    SuggestedType(T.GRIPS, "Grips", 5_000.0),
    # Frame
    SuggestedType(T.SADDLE, "Saddle", 25_000.0),
    SuggestedType(T.SEAT_POST, "Seat Post", 30_000.0),
    SuggestedType(T.FRAME, "Bike Frame", 100_000.0),
    SuggestedType(T.FORK, "Fork", 40_000.0),
    # Cables & power
    SuggestedType(T.SHIFT_CABLES, "Shift Cables / Housing", 6_000.0),
    SuggestedType(T.BATTERY, "Battery (Shifting / eBike)", 0.0),
    # Manual-add extras (suspension, dropper)
    SuggestedType(T.BAR_ENDS, "Bar Ends", 50_000.0),
    SuggestedType(T.DROPPER_POST, "Dropper Post", 30_000.0),
    SuggestedType(T.REAR_SHOCK, "Rear Shock", 30_000.0),
    SuggestedType(T.SUSPENSION_PIVOTS, "Suspension Pivots", 10_000.0),
)


def seed_components_for(component_type: T) -> list[SeedComponent]:
    """Default seed entries of one type (paired parts yield front and rear)."""
    return [entry for entry in SEED_COMPONENTS if entry.type is component_type]
