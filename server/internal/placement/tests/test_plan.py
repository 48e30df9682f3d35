"""
Tests for parsing and applying zoning plans.
"""

import sys
from pathlib import Path

# Add server directory to path
server_dir = Path(__file__).parent.parent.parent.parent
sys.path.insert(0, str(server_dir))

import json
import random

import pytest
from internal.placement import plan
from internal.placement.catalog import BuildingCatalog, BuildingFootprint
from internal.placement.parcels import NO_SUMMARY_TEXT, Parcel, ParcelStore
from internal.placement.placement import PlacementEngine


def _entry(parcel_id, function="1", floor_type="1", material="2", energy="30", summary="Homes"):
    return {
        "EmptyID": parcel_id,
        "Function": function,
        "FloorType": floor_type,
        "Material": material,
        "EnergyConsumption": energy,
        "Summary": summary,
    }


def _engine(seed=None, rng=None):
    catalog = BuildingCatalog(
        [
            BuildingFootprint(1, 40.0, 20.0, 1, 1, 2),
            BuildingFootprint(2, 30.0, 20.0, 1, 1, 2),
            BuildingFootprint(3, 72.0, 72.0, 4, 2, 1),
            BuildingFootprint(235, 160.0, 160.0, 2, 3, 1),
            BuildingFootprint(236, 160.0, 160.0, 2, 3, 1),
        ]
    )
    store = ParcelStore(
        [
            Parcel.create(1, 172.0, 72.0, (0.0, 0.0, 0.0), 0.0),
            Parcel.create(2, 100.0, 36.0, (200.0, 0.0, 0.0), 90.0, type_t=1),
            Parcel.create(3, 172.0, 172.0, (400.0, 0.0, 0.0), 180.0, type_s=1),
            Parcel.create(4, 172.0, 72.0, (600.0, 0.0, 0.0), 270.0),
        ]
    )
    return PlacementEngine(catalog, store, rng=rng, seed=seed)


def test_parse_plain_array():
    """Test parsing a bare JSON array"""
    entries = plan.parse_plan(json.dumps([_entry("1"), _entry("2", function="2")]))

    assert [e.parcel_id for e in entries] == [1, 2]
    assert entries[1].function == "2"
    assert entries[0].summary == "Homes"


def test_parse_fenced_and_wrapped():
    """Test markdown fences and surrounding prose are stripped"""
    body = json.dumps([_entry("3")])
    text = f"Here is the plan:\n```json\n{body}\n```\nLet me know if you need changes."

    entries = plan.parse_plan(text)
    assert len(entries) == 1
    assert entries[0].parcel_id == 3


def test_parse_numeric_values():
    """Test numbers are accepted where strings are expected"""
    entries = plan.parse_plan(json.dumps([_entry(7, function=2, floor_type=3, material=1, energy=65)]))

    entry = entries[0]
    assert entry.empty_id == "7"
    assert entry.function == "2"
    assert entry.energy_score == 65


@pytest.mark.parametrize("energy,expected", [("1", 1), ("100", 100), ("0", 0), ("101", 0), ("high", 0), (None, 0)])
def test_energy_score(energy, expected):
    """Test energy consumption is clamped to known values"""
    entry = plan.PlanEntry.model_validate(_entry("1", energy=energy))
    assert entry.energy_score == expected


@pytest.mark.parametrize(
    "text",
    [
        "no plan here",
        "[{\"EmptyID\": \"1\",]",
        json.dumps([{"EmptyID": "1"}]),
        json.dumps({"EmptyID": "1"}),
    ],
)
def test_parse_invalid(text):
    """Test malformed planner output is rejected"""
    with pytest.raises(plan.PlanFormatError):
        plan.parse_plan(text)


def test_apply_plan():
    """Test a plan is applied parcel by parcel"""
    engine = _engine(rng=random.Random(3))
    entries = plan.parse_plan(
        json.dumps(
            [
                _entry("1", summary="Low-rise homes along the avenue"),
                _entry("2"),
                _entry("3", function="2", floor_type="3", material="1", summary="Exhibition hall"),
                _entry("4", function="4", floor_type="2", material="1"),
            ]
        )
    )

    outcome = plan.apply_plan(engine, entries)

    assert set(outcome.placements) == {1, 2, 3, 4}
    assert outcome.skipped == []
    assert outcome.total_placements == sum(len(p) for p in outcome.placements.values())
    assert [p.building_id for p in outcome.placements[3]] in ([235], [236])
    assert all(p.building_id == 3 for p in outcome.placements[4])
    assert any(p.area == "additional" for p in outcome.placements[2])
    assert engine.get_summary(1) == "Low-rise homes along the avenue"
    assert engine.store.get(4).zoning.function == "4"
    assert engine.store.get(4).zoning.energy_consumption == 30


def test_apply_plan_clears_previous_layout():
    """Test applying a plan starts from a clean slate"""
    engine = _engine(rng=random.Random(3))
    special = json.dumps([_entry("3", function="2", floor_type="3", material="1")])

    plan.apply_plan(engine, plan.parse_plan(special))
    engine.set_summary(4, "stale")

    # The special building used last time is available again
    outcome = plan.apply_plan(engine, plan.parse_plan(special))
    assert len(outcome.placements[3]) == 1
    assert engine.get_summary(4) == NO_SUMMARY_TEXT


def test_apply_plan_skips_bad_entries():
    """Test bad entries are skipped without stopping the batch"""
    engine = _engine(rng=random.Random(3))
    entries = plan.parse_plan(
        json.dumps(
            [
                _entry("99"),
                _entry("one"),
                _entry("1", function="residential"),
                _entry("4"),
            ]
        )
    )

    outcome = plan.apply_plan(engine, entries)

    assert outcome.skipped == ["99", "one", "1"]
    assert list(outcome.placements) == [4]
    assert outcome.placements[4]
    assert engine.store.get(1).zoning is None
    assert engine.get_summary(1) == NO_SUMMARY_TEXT


def test_apply_plan_empty():
    """Test an empty plan only clears state"""
    engine = _engine(rng=random.Random(3))
    engine.place_on_parcel(1, 1, 1, 2)

    outcome = plan.apply_plan(engine, [])

    assert outcome.placements == {}
    assert len(engine.store.usage) == 0


def test_apply_plan_seeded_is_reproducible():
    """Test seeded engines produce identical layouts"""
    text = json.dumps([_entry("1"), _entry("2"), _entry("4")])

    first = plan.apply_plan(_engine(seed=12345), plan.parse_plan(text))
    second = plan.apply_plan(_engine(seed=12345), plan.parse_plan(text))

    for parcel_id in (1, 2, 4):
        assert [p.to_dict() for p in first.placements[parcel_id]] == [
            p.to_dict() for p in second.placements[parcel_id]
        ]


def test_apply_plan_repeated_parcel():
    """Test a parcel listed twice reports every building it received"""
    engine = PlacementEngine(
        BuildingCatalog([BuildingFootprint(1, 40.0, 20.0, 1, 1, 2)]),
        ParcelStore([Parcel.create(5, 100.0, 36.0, (0.0, 0.0, 0.0), 0.0)]),
        rng=random.Random(3),
    )
    entries = plan.parse_plan(json.dumps([_entry("5"), _entry("5", summary="Second pass")]))

    outcome = plan.apply_plan(engine, entries)

    assert engine.usage_count(5, 1) == 3
    assert len(outcome.placements[5]) == 3
    assert outcome.total_placements == 3
    assert engine.get_summary(5) == "Second pass"


def test_apply_plan_energy_out_of_range():
    """Test an unusable energy estimate is stored as 0"""
    engine = _engine(rng=random.Random(3))

    plan.apply_plan(engine, plan.parse_plan(json.dumps([_entry("1", energy="250")])))

    assert engine.store.get(1).zoning.energy_consumption == 0
