"""
End-to-end run of a whole-city zoning plan against the shipped catalogs.
"""

import json

from internal.placement import geometry, loaders, plan
from internal.placement.catalog import FUNCTION_CULTURAL
from internal.placement.placement import MAX_SPECIAL_USES_PER_PARCEL
from internal.placement.rows import MAX_USES_PER_PARCEL

CULTURAL_PARCELS = {6, 7, 10}


def _city_plan(engine):
    entries = []
    for parcel in engine.store:
        if parcel.type_s == 1:
            codes = ("2", "3", "1")
        elif parcel.id in CULTURAL_PARCELS:
            codes = ("4", "2", "1")
        elif parcel.id % 2:
            codes = ("1", "2", "2")
        else:
            codes = ("2", "3", "1")
        entries.append(
            {
                "EmptyID": str(parcel.id),
                "Function": codes[0],
                "FloorType": codes[1],
                "Material": codes[2],
                "EnergyConsumption": "50",
                "Summary": f"Plot {parcel.id}",
            }
        )
    return plan.parse_plan(json.dumps(entries))


def _dot(a, b):
    return a[0] * b[0] + a[1] * b[1] + a[2] * b[2]


def test_city_plan_places_every_parcel(shipped_engine):
    outcome = plan.apply_plan(shipped_engine, _city_plan(shipped_engine))

    assert outcome.skipped == []
    assert len(outcome.placements) == len(shipped_engine.store)
    assert outcome.total_placements > len(shipped_engine.store)
    assert shipped_engine.get_summary(12) == "Plot 12"


def test_city_plan_specials_are_unique(shipped_engine):
    outcome = plan.apply_plan(shipped_engine, _city_plan(shipped_engine))

    specials = [p.building_id for pid in (8, 29) for p in outcome.placements[pid]]
    assert len(specials) == 2
    assert len(set(specials)) == 2
    assert set(specials) <= set(shipped_engine.special_ids)
    assert shipped_engine.session.used_special_ids == set(specials)
    for parcel_id in (8, 29):
        for building_id in specials:
            assert shipped_engine.usage_count(parcel_id, building_id) <= MAX_SPECIAL_USES_PER_PARCEL


def test_city_plan_cultural_parcels(shipped_engine):
    outcome = plan.apply_plan(shipped_engine, _city_plan(shipped_engine))

    for parcel_id in CULTURAL_PARCELS:
        placements = outcome.placements[parcel_id]
        assert len(placements) == 1
        footprint = shipped_engine.catalog.get(placements[0].building_id)
        assert footprint.function == FUNCTION_CULTURAL


def test_city_plan_respects_caps_and_rows(shipped_engine):
    outcome = plan.apply_plan(shipped_engine, _city_plan(shipped_engine))

    for (parcel_id, building_id), count in _usage(shipped_engine).items():
        assert count <= MAX_USES_PER_PARCEL, (parcel_id, building_id)

    for parcel_id, placements in outcome.placements.items():
        parcel = shipped_engine.store.get(parcel_id)
        if parcel.type_s == 1 or parcel_id in CULTURAL_PARCELS:
            continue
        direction = geometry.placement_direction(parcel.orientation)
        for placement in placements:
            length = shipped_engine.catalog.get(placement.building_id).length
            relative = [p - o for p, o in zip(placement.position, parcel.position)]
            along = _dot(relative, direction)
            assert along - length / 2.0 >= -1e-6
            assert along + length / 2.0 <= parcel.length + 1e-6


def test_city_plan_is_reproducible(shipped_engine, placement_config):
    first = plan.apply_plan(shipped_engine, _city_plan(shipped_engine))

    other = loaders.build_engine(placement_config)
    second = plan.apply_plan(other, _city_plan(other))

    assert {k: [p.to_dict() for p in v] for k, v in first.placements.items()} == {
        k: [p.to_dict() for p in v] for k, v in second.placements.items()
    }


def _usage(engine):
    counts = {}
    for parcel in engine.store:
        for building_id, count in engine.store.usage.for_parcel(parcel.id).items():
            counts[(parcel.id, building_id)] = count
    return counts
