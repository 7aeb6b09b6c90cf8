"""Static catalogs: component taxonomy, default parts and service schedules."""

from bike_wear_server.catalog.intervals import IntervalSpec, interval_specs_for, replace_interval_km
from bike_wear_server.catalog.seed import SEED_COMPONENTS, SUGGESTED_TYPES, SeedComponent, SuggestedType
from bike_wear_server.catalog.taxonomy import ComponentCategory, ComponentType, Position

__all__ = [
    "ComponentCategory",
    "ComponentType",
    "IntervalSpec",
    "Position",
    "SEED_COMPONENTS",
    "SUGGESTED_TYPES",
    "SeedComponent",
    "SuggestedType",
    "interval_specs_for",
    "replace_interval_km",
]
