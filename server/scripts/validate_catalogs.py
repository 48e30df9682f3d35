#!/usr/bin/env python3
"""
Validate buildingprefab.csv, emptyland.csv and the stored presets
"""
import sys
from pathlib import Path

server_dir = Path(__file__).parent.parent
sys.path.insert(0, str(server_dir))

from internal.placement import config, geometry, loaders, plan, presets
from internal.placement.catalog import FUNCTION_CULTURAL, FUNCTION_NAMES, FLOOR_TYPES
from internal.placement.placement import CULTURAL_PARCEL_WIDTH, approximately


def validate_building_catalog(cfg):
    """Validate buildingprefab.csv"""
    print(f"Validating {cfg.building_catalog_path.name}...")
    try:
        catalog = loaders.load_building_catalog(cfg.building_catalog_path)
    except (FileNotFoundError, ValueError) as e:
        print(f"✗ {e}")
        return None
    print(f"✓ {len(catalog)} building footprints loaded")

    invalid_codes = [
        f.id for f in catalog if f.function not in FUNCTION_NAMES or f.floor_type not in FLOOR_TYPES
    ]
    if invalid_codes:
        print(f"✗ Unknown function or floor type codes on buildings: {invalid_codes}")
        return None
    print("✓ All function and floor type codes valid")

    missing_specials = [i for i in cfg.special_ids if i not in catalog]
    if missing_specials:
        print(f"✗ Special buildings missing from catalog: {missing_specials}")
        return None
    print(f"✓ Special buildings {list(cfg.special_ids)} present")

    if not catalog.with_function(FUNCTION_CULTURAL):
        print("✗ No cultural buildings in catalog")
        return None
    print("✓ Cultural buildings present")

    return catalog


def validate_parcels(cfg, catalog):
    """Validate emptyland.csv"""
    print(f"Validating {cfg.parcel_catalog_path.name}...")
    try:
        store = loaders.load_parcels(cfg.parcel_catalog_path)
    except FileNotFoundError as e:
        print(f"✗ {e}")
        return False
    if len(store) == 0:
        print("✗ No parcels loaded")
        return False
    print(f"✓ {len(store)} parcels loaded")

    unsupported = [p.id for p in store if p.orientation is None]
    if unsupported:
        print(f"✗ Parcels with unsupported rotation: {unsupported}")
        return False
    print("✓ All parcel rotations supported")

    bad_flags = [p.id for p in store if p.type_t not in (0, 1) or p.type_s not in (0, 1)]
    if bad_flags:
        print(f"✗ Parcels with T/S flags outside 0/1: {bad_flags}")
        return False
    print("✓ All T/S flags valid")

    narrow = [p.id for p in store if p.width < 36 - 1e-3]
    if narrow:
        print(f"✗ Parcels narrower than one row: {narrow}")
        return False
    print("✓ All parcels at least one row wide")

    cultural_ready = [p.id for p in store if approximately(p.width, CULTURAL_PARCEL_WIDTH)]
    print(f"✓ {len(cultural_ready)} parcels can take cultural buildings")

    if catalog is not None and not validate_special_fit(cfg, catalog, store):
        return False
    return store


def validate_special_fit(cfg, catalog, store):
    """Check every special building fits inside every S=1 parcel"""
    misfits = []
    for parcel in store:
        if parcel.type_s != 1:
            continue
        area = geometry.area_polygon(
            parcel.orientation, parcel.position, parcel.length, parcel.width
        )
        center = geometry.add(parcel.position, geometry.special_offset(parcel.orientation))
        for building_id in cfg.special_ids:
            footprint = catalog.get(building_id)
            outline = geometry.footprint_polygon(
                center, footprint.length, footprint.width, parcel.orientation
            )
            if not area.contains(outline):
                misfits.append((parcel.id, building_id))
    if misfits:
        print(f"✗ Special buildings overhanging their parcels (parcel, building): {misfits}")
        return False
    print("✓ Special buildings fit inside every S=1 parcel")
    return True


def validate_presets(cfg, store):
    """Validate the stored preset layouts"""
    names = presets.list_presets(cfg.preset_dir)
    print(f"Validating {len(names)} presets in {cfg.preset_dir.name}/...")
    ok = True
    for name in names:
        try:
            entries = plan.parse_plan(presets.read_preset(cfg.preset_dir, name))
        except plan.PlanFormatError as e:
            print(f"✗ {name}: {e}")
            ok = False
            continue
        unknown = [e.empty_id for e in entries if e.parcel_id not in store]
        if unknown:
            print(f"✗ {name}: unknown parcels {unknown}")
            ok = False
            continue
        print(f"✓ {name}: {len(entries)} parcels")
    return ok


def main():
    try:
        cfg = config.load_config()
    except ValueError as e:
        print(f"✗ {e}")
        return 1

    print("=" * 60)
    print("Placement Catalog Validation")
    print("=" * 60)
    print()

    catalog = validate_building_catalog(cfg)
    print()
    store = validate_parcels(cfg, catalog)
    results = [catalog is not None, store is not False]
    if store is not False:
        print()
        results.append(validate_presets(cfg, store))

    print()
    print("=" * 60)
    if all(results):
        print("✓ All validations passed!")
        return 0
    else:
        print("✗ Some validations failed")
        return 1


if __name__ == '__main__':
    sys.exit(main())
