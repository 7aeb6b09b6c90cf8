"""Database models."""

from bike_wear_server.models.base import Base
from bike_wear_server.models.bike import Bike
from bike_wear_server.models.component import Component
from bike_wear_server.models.component_context import ComponentContext
from bike_wear_server.models.component_swap import ComponentSwap
from bike_wear_server.models.preferences import AppPreferences
from bike_wear_server.models.ride import Ride, RideSource
from bike_wear_server.models.service_interval import IntervalType, ServiceInterval

__all__ = [
    "Base",
    "AppPreferences",
    "Bike",
    "Component",
    "ComponentContext",
    "ComponentSwap",
    "IntervalType",
    "Ride",
    "RideSource",
    "ServiceInterval",
]
