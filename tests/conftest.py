import pytest

from level_designer.schema import Catalog, CatalogEntry, CoordinateSpace, GameTypeProfile, GridSpec


@pytest.fixture
def td_catalog():
    return Catalog([
        CatalogEntry("Spawner", 1, ["spawner"]),
        CatalogEntry("Base", 1, ["base"]),
        CatalogEntry("PathTile", None, ["path"]),
        CatalogEntry("TowerSlot", 2, ["towerSlot"]),
        CatalogEntry("Rock", None, ["prop"]),
        CatalogEntry("Tree", 1, ["decoration"]),
    ])


@pytest.fixture
def td_profile(td_catalog):
    return GameTypeProfile(
        game_type_id="td",
        coordinate_space=CoordinateSpace.GRID,
        catalog=td_catalog,
        grid=GridSpec(width=10, height=10, cell_size=1.0),
    )
