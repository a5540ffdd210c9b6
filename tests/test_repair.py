import numpy as np
import pytest

from level_designer.repair import GridPathRepairer, repair_grid_layout
from level_designer.schema import Catalog, CatalogEntry, GridSpec, LayoutData, LayoutObject


def obj(object_id, x, z, y=0.0):
    return LayoutObject(id=object_id, position=(float(x), float(y), float(z)))


def cells_of(layout, object_id):
    return [(int(o.position[0]), int(o.position[2])) for o in layout.objects if o.id == object_id]


def adjacent(a, b):
    return abs(a[0] - b[0]) + abs(a[1] - b[1]) == 1


@pytest.fixture
def grid():
    return GridSpec(width=10, height=10, cell_size=1.0)


@pytest.fixture
def repairer(grid, td_catalog):
    return GridPathRepairer(grid, td_catalog)


@pytest.mark.parametrize("width, height, cell, expected", [
    (10, 10, (4, 4), (0, 4)),
    (10, 10, (5, 4), (9, 4)),
    (10, 8, (3, 1), (3, 0)),
    (10, 8, (2, 6), (2, 7)),
    (10, 10, (15, -3), (9, 0)),
    (10, 10, (0, 0), (0, 0)),
])
def test_clamp_to_edge(width, height, cell, expected):
    repairer = GridPathRepairer(GridSpec(width=width, height=height, cell_size=1.0))
    assert repairer.clamp_to_edge(cell) == expected


def test_clamp_to_edge_always_lands_on_edge(grid):
    repairer = GridPathRepairer(grid)
    for x in range(-2, 12):
        for z in range(-2, 12):
            assert grid.is_edge(repairer.clamp_to_edge((x, z)))


def test_find_path_is_shortest_and_connected(repairer):
    path = repairer.find_path((9, 5), (5, 0))
    assert path[0] == (9, 5) and path[-1] == (5, 0)
    assert len(path) == 10
    assert all(adjacent(a, b) for a, b in zip(path, path[1:]))


def test_find_path_unreachable_falls_back_to_endpoints():
    repairer = GridPathRepairer(GridSpec(width=3, height=3, cell_size=1.0))
    blocked = frozenset({(1, 0), (1, 1), (1, 2)})
    assert repairer.find_path((0, 0), (2, 2), blocked) == [(0, 0), (2, 2)]


def test_is_straight():
    assert GridPathRepairer.is_straight([(0, 5), (1, 5), (2, 5)])
    assert GridPathRepairer.is_straight([(3, 0), (3, 1)])
    assert not GridPathRepairer.is_straight([(0, 0), (1, 0), (1, 1)])
    assert not GridPathRepairer.is_straight([(0, 0)])


def test_straight_route_is_bent_through_waypoints(repairer):
    layout = LayoutData("td", "", [obj("Spawner", 0, 5), obj("Base", 9, 5)])
    repairer.repair(layout)

    path = repairer.path
    assert path[0] == (0, 5) and path[-1] == (9, 5)
    assert not GridPathRepairer.is_straight(path)
    assert (3, 3) in path and (6, 6) in path
    assert len(set(path)) == len(path)
    assert all(adjacent(a, b) for a, b in zip(path, path[1:]))
    assert sorted(cells_of(layout, "PathTile")) == sorted(path[1:-1])


def test_curved_path_follows_travel_direction(repairer):
    path = repairer.curved_path((9, 5), (0, 5))
    assert path[0] == (9, 5) and path[-1] == (0, 5)
    assert path.index((6, 3)) < path.index((3, 6))
    assert all(adjacent(a, b) for a, b in zip(path, path[1:]))


def test_repair_builds_connected_path(repairer):
    layout = LayoutData("td", "", [
        obj("Spawner", 5, 5),
        obj("Base", 5, 2),
        obj("PathTile", 4, 4),
        obj("PathTile", 7, 1),
    ])
    repairer.repair(layout)

    assert cells_of(layout, "Spawner") == [(9, 5)]
    assert cells_of(layout, "Base") == [(5, 0)]

    tiles = cells_of(layout, "PathTile")
    assert len(tiles) == 8
    chain = [(9, 5)] + tiles + [(5, 0)]
    assert all(adjacent(a, b) for a, b in zip(chain, chain[1:]))


def test_slots_are_moved_next_to_the_path(repairer):
    layout = LayoutData("td", "", [
        obj("Spawner", 0, 5),
        obj("Base", 9, 5),
        obj("TowerSlot", 3, 5),
        obj("TowerSlot", 0, 0),
        obj("TowerSlot", 8, 9),
    ])
    repairer.repair(layout)

    slots = cells_of(layout, "TowerSlot")
    path_cells = set(repairer.path)
    interior = set(repairer.path[1:-1])

    assert len(slots) == 2
    assert len(set(slots)) == len(slots)
    for cell in slots:
        assert cell not in path_cells
        assert any(adjacent(cell, p) for p in interior)


def test_decorations_keep_the_farthest_from_path(repairer):
    layout = LayoutData("td", "", [
        obj("Spawner", 0, 5),
        obj("Base", 9, 5),
        obj("Rock", 0, 0),
        obj("Rock", 4, 4),
        obj("Rock", 9, 0),
        obj("Rock", 5, 4),
        obj("Rock", 0, 9),
        obj("Tree", 4, 5),
        obj("Tree", 9, 9),
    ])
    repairer.repair(layout)

    assert cells_of(layout, "Rock") == [(0, 0), (9, 0), (0, 9)]
    assert cells_of(layout, "Tree") == [(9, 9)]


def test_dedupes_same_id_on_same_cell(repairer):
    layout = LayoutData("td", "", [
        obj("Spawner", 0, 5),
        obj("Base", 9, 5),
        obj("Rock", 0, 0),
        obj("rock", 0.2, 0.1),
    ])
    repairer.repair(layout)
    assert len([o for o in layout.objects if o.id.lower() == "rock"]) == 1


def test_repair_is_idempotent(grid, td_catalog):
    layout = LayoutData("td", "", [
        obj("Spawner", 3, 4),
        obj("Base", 6, 6),
        obj("TowerSlot", 4, 4),
        obj("TowerSlot", 2, 7),
        obj("Tree", 1, 1),
    ])
    once = repair_grid_layout(layout, grid, td_catalog).to_dict()
    twice = repair_grid_layout(layout, grid, td_catalog).to_dict()
    assert once == twice


def test_unknown_ids_survive_repair(repairer):
    layout = LayoutData("td", "", [
        obj("Spawner", 0, 5),
        obj("Base", 9, 5),
        obj("MysteryBox", 2, 2),
    ])
    repairer.repair(layout)
    assert cells_of(layout, "MysteryBox") == [(2, 2)]


def test_without_spawner_slots_use_existing_path_tiles(repairer):
    layout = LayoutData("td", "", [
        obj("PathTile", 2, 2),
        obj("PathTile", 2, 3),
        obj("TowerSlot", 2, 2),
    ])
    repairer.repair(layout)

    assert repairer.path == []
    assert cells_of(layout, "PathTile") == [(2, 2), (2, 3)]
    assert cells_of(layout, "TowerSlot") == [(3, 2)]


def test_path_tiles_are_not_emitted_without_a_path_id(grid):
    catalog = Catalog([CatalogEntry("Spawner", 1, ["spawner"]), CatalogEntry("Base", 1, ["base"])])
    repairer = GridPathRepairer(grid, catalog)
    layout = LayoutData("td", "", [obj("Spawner", 0, 5), obj("Base", 9, 5)])

    repairer.repair(layout)
    assert [o.id for o in layout.objects] == ["Spawner", "Base"]
    assert len(repairer.path) > 2


def test_empty_layout_is_returned_unchanged(repairer):
    layout = LayoutData("td", "")
    assert repairer.repair(layout) is layout
    assert layout.objects == []


@pytest.fixture
def crowded_catalog():
    return Catalog([
        CatalogEntry("Spawner", 1, ["spawner"]),
        CatalogEntry("Base", 1, ["base"]),
        CatalogEntry("PathTile", None, ["path"]),
        CatalogEntry("TowerSlot", 1, ["towerSlot"]),
        CatalogEntry("BigSlot", None, ["slot"]),
        CatalogEntry("Tree", 1, ["decoration"]),
    ])


def test_capped_slots_free_cells_for_the_rest(crowded_catalog):
    grid = GridSpec(width=6, height=4, cell_size=1.0)
    layout = LayoutData("td", "", [
        obj("Spawner", 2, 0),
        obj("Base", 1, 3),
        obj("TowerSlot", 2, 1),
        obj("TowerSlot", 1, 1),
        obj("BigSlot", 1, 2),
        obj("BigSlot", 2, 2),
        obj("BigSlot", 3, 1),
        obj("BigSlot", 0, 1),
        obj("BigSlot", 5, 0),
    ])
    once = repair_grid_layout(layout, grid, crowded_catalog).to_dict()
    twice = repair_grid_layout(layout, grid, crowded_catalog).to_dict()

    assert once == twice
    assert len([o for o in layout.objects if o.id == "TowerSlot"]) == 1


@pytest.mark.parametrize("seed", range(25))
def test_repair_is_idempotent_on_random_layouts(seed, crowded_catalog):
    rng = np.random.default_rng(seed)
    grid = GridSpec(width=int(rng.integers(5, 11)), height=int(rng.integers(4, 9)), cell_size=1.0)
    ids = ["TowerSlot"] * 3 + ["BigSlot"] * 6 + ["Tree"] * 2 + ["PathTile"] * 2
    objects = [obj("Spawner", *rng.integers(-2, 10, size=2)), obj("Base", *rng.integers(-2, 10, size=2))]
    objects += [obj(object_id, *rng.integers(-2, 10, size=2)) for object_id in ids]

    layout = LayoutData("td", "", objects)
    once = repair_grid_layout(layout, grid, crowded_catalog).to_dict()
    twice = repair_grid_layout(layout, grid, crowded_catalog).to_dict()
    assert once == twice


def test_objects_outside_the_grid_are_clamped(grid, td_catalog):
    layout = LayoutData("td", "", [
        obj("Spawner", 0, 5),
        obj("Base", 9, 5),
        obj("Crate", 25, 3),
        obj("Crate", 40, 3),
        obj("Rock", -7, 2),
    ])
    repair_grid_layout(layout, grid, td_catalog)

    for o in layout.objects:
        assert grid.contains((int(o.position[0]), int(o.position[2])))
    assert cells_of(layout, "Crate") == [(9, 3)]
    assert cells_of(layout, "Rock") == [(0, 2)]


def test_existing_path_tiles_are_clamped_without_spawner(repairer):
    layout = LayoutData("td", "", [obj("PathTile", 12, 3), obj("Tree", 4.6, -1)])
    repairer.repair(layout)

    assert cells_of(layout, "PathTile") == [(9, 3)]
    assert cells_of(layout, "Tree") == [(5, 0)]
