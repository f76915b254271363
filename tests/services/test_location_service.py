import pytest
from pydantic import ValidationError

from location_directory.models.location import LocationType
from location_directory.services.exceptions import (
    InvalidHierarchyError,
    LocationAlreadyExistsError,
    LocationNotFoundError,
)
from location_directory.services.location_service import LocationService
from location_directory.services.memory_store import InMemoryLocationStore


# --- Creation ---


async def test_create_province(service):
    province = await service.create_location("Kigali City", "RW", LocationType.PROVINCE)

    assert province.id is not None
    assert province.parent_id is None
    assert province.type == LocationType.PROVINCE


async def test_create_child_links_parent_by_id(kigali):
    district = await kigali.get_location_by_code("KGL")
    province = await kigali.get_location_by_code("RW")

    assert district.parent_id == province.id


async def test_province_cannot_have_a_parent(kigali):
    with pytest.raises(InvalidHierarchyError, match="Province cannot have a parent"):
        await kigali.create_location("East", "EST", LocationType.PROVINCE, "RW")


@pytest.mark.parametrize("parent_code", [None, ""])
async def test_non_province_requires_a_parent(service, parent_code):
    with pytest.raises(InvalidHierarchyError, match="must have a parent"):
        await service.create_location("Gasabo", "KGL", LocationType.DISTRICT, parent_code)


async def test_unknown_parent_code(service):
    with pytest.raises(LocationNotFoundError, match="code: NOPE"):
        await service.create_location("Gasabo", "KGL", LocationType.DISTRICT, "NOPE")


async def test_district_under_sector_is_rejected(kigali):
    with pytest.raises(InvalidHierarchyError):
        await kigali.create_location("Bad", "BAD", LocationType.DISTRICT, "NYR")


async def test_skipping_a_level_is_rejected(kigali):
    with pytest.raises(InvalidHierarchyError, match="province cannot have child of type sector"):
        await kigali.create_location("X", "X", LocationType.SECTOR, "RW")
    assert not await kigali.exists_by_code("X")


async def test_same_level_parenting_is_rejected(kigali):
    with pytest.raises(InvalidHierarchyError):
        await kigali.create_location("Kicukiro", "KCK", LocationType.DISTRICT, "KGL")


async def test_village_cannot_have_children(full_chain):
    with pytest.raises(InvalidHierarchyError):
        await full_chain.create_location("Deeper", "DPR", LocationType.VILLAGE, "AMH")


@pytest.mark.parametrize("location_type", list(LocationType))
async def test_duplicate_code_is_rejected_regardless_of_type(kigali, location_type):
    with pytest.raises(LocationAlreadyExistsError, match="code: NYR"):
        await kigali.create_location("Clash", "NYR", location_type, "RW")


async def test_store_level_duplicate_is_already_exists():
    """A duplicate that slips past the pre-check still fails cleanly."""

    class RacingStore(InMemoryLocationStore):
        async def exists_by_code(self, code):
            return False

    racing = LocationService(RacingStore())
    await racing.create_location("Kigali City", "RW", LocationType.PROVINCE)

    with pytest.raises(LocationAlreadyExistsError):
        await racing.create_location("Kigali again", "RW", LocationType.PROVINCE)


# --- Lookups ---


async def test_get_by_id_and_code(kigali):
    by_code = await kigali.get_location_by_code("KGL")

    assert await kigali.get_location_by_id(by_code.id) == by_code
    assert await kigali.resolve("KGL") == by_code


async def test_lookups_of_missing_locations(kigali):
    with pytest.raises(LocationNotFoundError):
        await kigali.get_location_by_code("MISSING")
    with pytest.raises(LocationNotFoundError):
        await kigali.get_location_by_id("not-an-id")


async def test_children_in_insertion_order(kigali):
    await kigali.create_location("Kimihurura", "KMH", LocationType.SECTOR, "KGL")
    await kigali.create_location("Kacyiru", "KCY", LocationType.SECTOR, "KGL")

    children = await kigali.get_child_locations("KGL")

    assert [child.code for child in children] == ["NYR", "KMH", "KCY"]


async def test_children_of_leaf_is_empty(kigali):
    assert await kigali.get_child_locations("NYR") == []


async def test_listings_by_type(kigali):
    await kigali.create_location("Eastern", "EST", LocationType.PROVINCE)

    provinces = await kigali.get_all_provinces()
    sectors = await kigali.get_locations_by_type(LocationType.SECTOR)

    assert [p.code for p in provinces] == ["RW", "EST"]
    assert [s.code for s in sectors] == ["NYR"]
    assert len(await kigali.get_all_locations()) == 4
    assert await kigali.count_locations_by_type(LocationType.CELL) == 0


async def test_search_is_case_insensitive_substring(kigali):
    await kigali.create_location("Kimironko", "KMR", LocationType.SECTOR, "KGL")

    found = await kigali.search_locations_by_name("KI")

    assert {node.code for node in found} == {"RW", "KMR"}
    assert await kigali.search_locations_by_name("zzz") == []


# --- Ancestors ---


async def test_path_depth_and_province_scenario(kigali):
    assert await kigali.get_ancestor_names("NYR") == ["Kigali City", "Gasabo", "Remera"]
    assert await kigali.get_location_path("NYR") == "Kigali City > Gasabo > Remera"
    assert await kigali.get_location_depth("NYR") == 2
    assert await kigali.get_province_by_location_code("NYR") == "Kigali City"
    assert (await kigali.get_province("NYR")).code == "RW"


async def test_province_path_is_its_own_name(kigali):
    assert await kigali.get_location_path("RW") == "Kigali City"
    assert await kigali.get_location_depth("RW") == 0
    assert (await kigali.get_province("RW")).code == "RW"


async def test_depth_matches_type_level(full_chain):
    for node in await full_chain.get_all_locations():
        depth = await full_chain.get_location_depth(node.code)
        names = await full_chain.get_ancestor_names(node.code)

        assert depth == node.type.level
        assert len(names) == depth + 1
        assert names[-1] == node.name


async def test_corrupt_parent_chain_is_reported(store, full_chain):
    village = await full_chain.get_location_by_code("AMH")
    province = await full_chain.get_location_by_code("RW")
    # Point the root back at the village to form a loop.
    store._nodes[province.id] = province.model_copy(update={"parent_id": village.id})

    with pytest.raises(InvalidHierarchyError, match="exceeds 4 levels"):
        await full_chain.get_location_depth("AMH")


async def test_dangling_parent_reference(store, kigali):
    sector = await kigali.get_location_by_code("NYR")
    store._nodes[sector.id] = sector.model_copy(update={"parent_id": "f" * 24})

    with pytest.raises(LocationNotFoundError):
        await kigali.get_location_path("NYR")


# --- Descendants & trees ---


async def _two_districts_three_sectors(service):
    await service.create_location("Kigali City", "RW", LocationType.PROVINCE)
    for d in range(2):
        district_code = f"D{d}"
        await service.create_location(f"District {d}", district_code, LocationType.DISTRICT, "RW")
        for s in range(3):
            await service.create_location(
                f"Sector {d}.{s}", f"S{d}{s}", LocationType.SECTOR, district_code
            )


async def test_descendants_are_complete_without_duplicates(service):
    await _two_districts_three_sectors(service)

    descendants = await service.get_all_descendants("RW")
    ids = [node.id for node in descendants]

    assert len(descendants) == 8
    assert len(set(ids)) == 8
    assert "RW" not in {node.code for node in descendants}


async def test_descendants_ignore_duplicate_rows():
    class DuplicatingStore(InMemoryLocationStore):
        async def find_by_parent(self, parent):
            children = await super().find_by_parent(parent)
            return children + children

    service = LocationService(DuplicatingStore())
    await _two_districts_three_sectors(service)

    assert len(await service.get_all_descendants("RW")) == 8
    tree = await service.get_location_hierarchy("RW")
    assert tree.child_count == 2
    assert [child.child_count for child in tree.children] == [3, 3]


async def test_descendants_of_leaf(kigali):
    assert await kigali.get_all_descendants("NYR") == []


async def test_location_hierarchy(kigali):
    tree = await kigali.get_location_hierarchy("RW")

    assert tree.code == "RW"
    assert tree.type == LocationType.PROVINCE
    assert tree.child_count == 1
    district = tree.children[0]
    assert district.code == "KGL"
    assert district.children[0].code == "NYR"
    assert district.children[0].children == []
    assert district.children[0].child_count == 0


async def test_complete_hierarchy_has_one_tree_per_province(kigali):
    await kigali.create_location("Eastern", "EST", LocationType.PROVINCE)

    forest = await kigali.get_complete_hierarchy()

    assert [tree.code for tree in forest] == ["RW", "EST"]
    assert forest[1].children == []


# --- Statistics & validation ---


async def test_statistics_scenario(kigali):
    assert await kigali.get_location_statistics() == {
        "province": 1,
        "district": 1,
        "sector": 1,
        "cell": 0,
        "village": 0,
        "total": 3,
    }


async def test_statistics_of_empty_directory(service):
    stats = await service.get_location_statistics()

    assert stats["total"] == 0
    assert set(stats) == {t.value for t in LocationType} | {"total"}


async def test_validate_hierarchy(kigali):
    assert await kigali.validate_hierarchy("KGL", LocationType.SECTOR)
    assert not await kigali.validate_hierarchy("KGL", LocationType.CELL)
    with pytest.raises(LocationNotFoundError):
        await kigali.validate_hierarchy("NOPE", LocationType.DISTRICT)


# --- Update ---


async def test_rename(kigali):
    sector = await kigali.get_location_by_code("NYR")

    renamed = await kigali.update_location(sector.id, "Remera Sector")

    assert renamed.name == "Remera Sector"
    assert renamed.code == "NYR"
    assert (await kigali.get_location_by_code("NYR")).name == "Remera Sector"


async def test_rename_to_blank_name_is_rejected(kigali):
    sector = await kigali.get_location_by_code("NYR")

    with pytest.raises(ValidationError, match="name"):
        await kigali.update_location(sector.id, "")

    assert (await kigali.get_location_by_code("NYR")).name == "Remera"


async def test_update_accepts_unchanged_immutable_fields(kigali):
    sector = await kigali.get_location_by_code("NYR")

    renamed = await kigali.update_location(
        sector.id,
        "Remera Sector",
        code="NYR",
        location_type=LocationType.SECTOR,
        parent_code="KGL",
    )

    assert renamed.name == "Remera Sector"


@pytest.mark.parametrize(
    "changes",
    [
        {"code": "NEW"},
        {"location_type": LocationType.CELL},
        {"parent_code": "RW"},
        {"parent_code": ""},
    ],
)
async def test_update_rejects_changes_to_immutable_fields(kigali, changes):
    sector = await kigali.get_location_by_code("NYR")

    with pytest.raises(InvalidHierarchyError):
        await kigali.update_location(sector.id, "Renamed", **changes)
    assert (await kigali.get_location_by_code("NYR")).name == "Remera"


async def test_update_unknown_location(kigali):
    with pytest.raises(LocationNotFoundError):
        await kigali.update_location("0" * 24, "Anything")


# --- Delete ---


async def test_delete_internal_node_is_rejected(kigali):
    district = await kigali.get_location_by_code("KGL")

    with pytest.raises(InvalidHierarchyError, match="1 child location"):
        await kigali.delete_location(district.id)
    assert await kigali.exists_by_code("KGL")


async def test_delete_leaf_then_parent(kigali):
    sector = await kigali.get_location_by_code("NYR")
    district = await kigali.get_location_by_code("KGL")

    await kigali.delete_location(sector.id)
    with pytest.raises(LocationNotFoundError):
        await kigali.get_location_by_id(sector.id)

    # KGL became a leaf and may now go too.
    await kigali.delete_location(district.id)
    assert (await kigali.get_location_statistics())["total"] == 1
