"""Tests for the component taxonomy and default catalogs."""

from bike_wear_server.catalog.intervals import (
    FALLBACK_INTERVAL_NAME,
    interval_specs_for,
    replace_interval_km,
)
from bike_wear_server.catalog.seed import SEED_COMPONENTS, seed_components_for
from bike_wear_server.catalog.taxonomy import (
    ComponentCategory,
    ComponentType,
    Position,
    category_for,
)
from bike_wear_server.models.service_interval import IntervalType


def test_unknown_type_parses_to_other():
    assert ComponentType.parse("chain") is ComponentType.CHAIN
    assert ComponentType.parse("  Chain ") is ComponentType.CHAIN
    assert ComponentType.parse("flux_capacitor") is ComponentType.OTHER
    assert category_for("flux_capacitor") is ComponentCategory.OTHER


def test_categories():
    assert category_for("chain") is ComponentCategory.DRIVETRAIN
    assert category_for("brake_pads") is ComponentCategory.BRAKES
    assert category_for("handlebars") is ComponentCategory.COCKPIT
    assert ComponentCategory.COCKPIT.display_order < ComponentCategory.OTHER.display_order


def test_default_parts_catalog():
    assert len(SEED_COMPONENTS) == 43
    pairs = [(entry.type, entry.position) for entry in SEED_COMPONENTS]
    assert len(pairs) == len(set(pairs))


def test_paired_parts_have_front_and_rear():
    tires = seed_components_for(ComponentType.TIRE)
    assert {t.position for t in tires} == {Position.FRONT, Position.REAR}


def test_on_failure_specs_excluded_by_default():
    assert interval_specs_for("tube") == []
    tube_specs = interval_specs_for("tube", include_on_failure=True)
    assert [s.interval_type for s in tube_specs] == [IntervalType.ON_FAILURE]


def test_chain_schedule():
    specs = interval_specs_for("chain")
    assert [(s.name, s.interval_km) for s in specs] == [
        ("Inspect / Clean / Lube", 250.0),
        ("Replace", 3500.0),
    ]
    assert replace_interval_km("chain") == 3500.0


def test_types_without_schedule():
    assert interval_specs_for("bar_ends") == []
    assert replace_interval_km("bar_ends") is None
    assert FALLBACK_INTERVAL_NAME == "Max life"
