"""Component type taxonomy.

Rows keep the raw type string so unknown types survive a round trip and still
format for display; code that needs to branch on the type parses it into
ComponentType, where anything unrecognized becomes OTHER.
"""

from enum import Enum


class Position(str, Enum):
    """Mounting position for paired parts."""

    NONE = "none"
    FRONT = "front"
    REAR = "rear"


class ComponentCategory(str, Enum):
    """Component groups, declared in display order (bike anatomy)."""

    COCKPIT = "cockpit"
    FRAME = "frame"
    DRIVETRAIN = "drivetrain"
    WHEELS = "wheels"
    BRAKES = "brakes"
    CABLES = "cables"
    POWER = "power"
    OTHER = "other"

    @property
    def display_order(self) -> int:
        return list(ComponentCategory).index(self)


class ComponentType(str, Enum):
    """Known component type keys."""

    # Cockpit
    HANDLEBARS = "handlebars"
    STEM = "stem"
    HEADSET = "headset"
    HEADSET_BEARINGS = "headset_bearings"
    BRAKE_LEVERS = "brake_levers"
    SHIFT_LEVERS = "shift_levers"
    BAR_ENDS = "bar_ends"
    GRIPS = "grips"

    # Frame
    FRAME = "frame"
    FORK = "fork"
    SEAT_POST = "seat_post"
    SADDLE = "saddle"
    DROPPER_POST = "dropper_post"
    REAR_SHOCK = "rear_shock"
    SUSPENSION_PIVOTS = "suspension_pivots"

    # Drivetrain
    CHAINRING = "chainring"
    FRONT_DERAILLEUR = "front_derailleur"
    REAR_DERAILLEUR = "rear_derailleur"
    DERAILLEUR = "derailleur"
    BOTTOM_BRACKET = "bottom_bracket"
    CRANKS = "cranks"
    CRANKSET = "crankset"
    PEDALS = "pedals"
    CHAIN = "chain"
    CASSETTE = "cassette"
    FREEWHEEL = "freewheel"

    # Wheels
    FRONT_WHEEL = "front_wheel"
    REAR_WHEEL = "rear_wheel"
    TIRE = "tire"
    TIRES = "tires"
    HUB = "hub"
    SPOKES = "spokes"
    TUBE = "tube"
    RIM = "rim"
    TUBELESS_SEALANT = "tubeless_sealant"

    # Brakes
    FRONT_BRAKE = "front_brake"
    REAR_BRAKE = "rear_brake"
    BRAKE_CALIPER = "brake_caliper"
    BRAKE_PADS = "brake_pads"
    BRAKE_ROTOR = "brake_rotor"

    # Cables / fluid
    BRAKE_CABLES = "brake_cables"
    BRAKE_FLUID = "brake_fluid"
    SHIFT_CABLES = "shift_cables"
    CABLES = "cables"
    CABLE_FRONT_DERAILLEUR = "cable_front_derailleur"
    CABLE_REAR_DERAILLEUR = "cable_rear_derailleur"
    CABLE_FRONT_BRAKE = "cable_front_brake"
    CABLE_REAR_BRAKE = "cable_rear_brake"
    CABLE_SEAT_DROPPER = "cable_seat_dropper"

    # Power
    BATTERY = "battery"

    OTHER = "other"

    @classmethod
    def parse(cls, raw: str) -> "ComponentType":
        """Parse a stored type key, falling back to OTHER for unknown values."""
        try:
            return cls(raw.strip().lower())
        except ValueError:
            return cls.OTHER

    @property
    def category(self) -> ComponentCategory:
        return _CATEGORY_BY_TYPE.get(self, ComponentCategory.OTHER)


_GROUPS: dict[ComponentCategory, tuple[ComponentType, ...]] = {
    ComponentCategory.COCKPIT: (
        ComponentType.HANDLEBARS,
        ComponentType.STEM,
        ComponentType.HEADSET,
        ComponentType.HEADSET_BEARINGS,
        ComponentType.BRAKE_LEVERS,
        ComponentType.SHIFT_LEVERS,
        ComponentType.BAR_ENDS,
        ComponentType.GRIPS,
    ),
    ComponentCategory.FRAME: (
        ComponentType.FRAME,
        ComponentType.FORK,
        ComponentType.SEAT_POST,
        ComponentType.SADDLE,
        ComponentType.DROPPER_POST,
        ComponentType.REAR_SHOCK,
        ComponentType.SUSPENSION_PIVOTS,
    ),
    ComponentCategory.DRIVETRAIN: (
        ComponentType.CHAINRING,
        ComponentType.FRONT_DERAILLEUR,
        ComponentType.REAR_DERAILLEUR,
        ComponentType.DERAILLEUR,
        ComponentType.BOTTOM_BRACKET,
        ComponentType.CRANKS,
        ComponentType.CRANKSET,
        ComponentType.PEDALS,
        ComponentType.CHAIN,
        ComponentType.CASSETTE,
        ComponentType.FREEWHEEL,
    ),
    ComponentCategory.WHEELS: (
        ComponentType.FRONT_WHEEL,
        ComponentType.REAR_WHEEL,
        ComponentType.TIRE,
        ComponentType.TIRES,
        ComponentType.HUB,
        ComponentType.SPOKES,
        ComponentType.TUBE,
        ComponentType.RIM,
        ComponentType.TUBELESS_SEALANT,
    ),
    ComponentCategory.BRAKES: (
        ComponentType.FRONT_BRAKE,
        ComponentType.REAR_BRAKE,
        ComponentType.BRAKE_CALIPER,
        ComponentType.BRAKE_PADS,
        ComponentType.BRAKE_ROTOR,
    ),
    ComponentCategory.CABLES: (
        ComponentType.BRAKE_CABLES,
        ComponentType.BRAKE_FLUID,
        ComponentType.SHIFT_CABLES,
        ComponentType.CABLES,
        ComponentType.CABLE_FRONT_DERAILLEUR,
        ComponentType.CABLE_REAR_DERAILLEUR,
        ComponentType.CABLE_FRONT_BRAKE,
        ComponentType.CABLE_REAR_BRAKE,
        ComponentType.CABLE_SEAT_DROPPER,
    ),
    ComponentCategory.POWER: (ComponentType.BATTERY,),
}

_CATEGORY_BY_TYPE: dict[ComponentType, ComponentCategory] = {
    component_type: category for category, types in _GROUPS.items() for component_type in types
}

# Categories every new bike is seeded with
DEFAULT_BIKE_CATEGORIES = (
    ComponentCategory.COCKPIT,
    ComponentCategory.FRAME,
    ComponentCategory.DRIVETRAIN,
    ComponentCategory.WHEELS,
    ComponentCategory.BRAKES,
    ComponentCategory.CABLES,
)

# Replacing one of these resets the bike's chain replacement count
DRIVETRAIN_WEAR_RESET_TYPES = frozenset(
    {ComponentType.CASSETTE, ComponentType.FREEWHEEL, ComponentType.CHAINRING}
)


def category_for(raw_type: str) -> ComponentCategory:
    """Category for a stored type key."""
    return ComponentType.parse(raw_type).category
