import asyncio
import json
from pathlib import Path

from level_designer.api import FakeClient
from level_designer.config import load_profile
from level_designer.generator import LevelGenerator

ARENA_PROFILE = Path(__file__).parent.parent / "configs" / "arena_profile.yaml"

TD_RESPONSE = """Here is your level:
```json
{
  "schemaVersion": "1.0.0",
  "gameType": "td",
  "theme": "forest",
  "objects": [
    {"id": "Spawner", "position": {"x": 5, "y": 0, "z": 5}},
    {"id": "Base", "position": {"x": 5, "y": 0, "z": 2}},
    {"id": "TowerSlot", "position": {"x": 5, "y": 0, "z": 5}},
    {"id": "TowerSlot", "position": {"x": 1, "y": 0, "z": 1}},
    {"id": "TowerSlot", "position": {"x": 8, "y": 0, "z": 8}},
    {"id": "Tree", "position": {"x": 0, "y": 0, "z": 9}},
    {"id": "Tree", "position": {"x": 2, "y": 0, "z": 2}},
  ]
}
```"""


class FailingClient:
    async def complete(self, system_prompt, user_prompt):
        raise RuntimeError("boom")


def test_world_profile_with_fake_client():
    generator = LevelGenerator(FakeClient(), load_profile(str(ARENA_PROFILE)))
    result = asyncio.run(generator.generate("a small desert arena"))

    assert result.ok, result.validation.message
    assert len(result.layout.objects) == 3
    for o in result.layout.objects:
        assert o.position[0] % 2 == 0 and o.position[2] % 2 == 0


def test_enveloped_response_is_unwrapped():
    generator = LevelGenerator(FakeClient(as_envelope=True), load_profile(str(ARENA_PROFILE)))
    result = asyncio.run(generator.generate("arena"))
    assert result.ok
    assert result.layout.theme == "desert"


def test_grid_response_is_repaired(td_profile):
    generator = LevelGenerator(FakeClient(response=TD_RESPONSE), td_profile)
    result = asyncio.run(generator.generate("a winding map"))

    assert result.ok, result.validation.message
    layout = result.layout
    spawner = next(o for o in layout.objects if o.id == "Spawner")
    assert td_profile.grid.is_edge(td_profile.grid.cell_of(spawner.position))
    assert len([o for o in layout.objects if o.id == "TowerSlot"]) <= 2
    assert len([o for o in layout.objects if o.id == "Tree"]) == 1
    assert any(o.id == "PathTile" for o in layout.objects)


def test_request_failure_is_reported(td_profile):
    result = asyncio.run(LevelGenerator(FailingClient(), td_profile).generate("anything"))
    assert not result.ok
    assert result.layout is None
    assert result.validation.message == "Request failed: boom"


def test_unrecoverable_response(td_profile):
    generator = LevelGenerator(FakeClient(response="Sorry, I can't help with that."), td_profile)
    result = asyncio.run(generator.generate("anything"))
    assert result.layout is None
    assert not result.ok
    assert result.to_dict()["layout"] is None


def test_wrong_game_type_fails_validation(td_profile):
    result = LevelGenerator(FakeClient(), td_profile).process_response(json.dumps({
        "gameType": "arena-3d",
        "objects": [{"id": "Spawner", "position": {"x": 0, "y": 0, "z": 0}}],
    }))
    assert result.layout is not None
    assert result.validation.message == "gameType mismatch: arena-3d vs profile td"


def test_batch_keeps_prompt_order():
    generator = LevelGenerator(FakeClient(), load_profile(str(ARENA_PROFILE)))
    results = asyncio.run(generator.generate_batch(["first", "second", "third"]))
    assert [r.prompt for r in results] == ["first", "second", "third"]
    assert generator.client.get_stats()["calls"] == 3
