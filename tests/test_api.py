import asyncio
import json

from level_designer.api import (
    FakeClient, LayoutClient, build_capabilities, build_system_message, build_user_message, create_client,
)
from level_designer.config import AIConfig
from level_designer.schema import GameTypeProfile


def test_create_client_by_provider():
    assert isinstance(create_client(AIConfig()), FakeClient)

    openai_client = create_client(AIConfig(provider="openai", api_key="sk-test", model="gpt-4o"))
    assert isinstance(openai_client, LayoutClient)
    assert openai_client.model_name == "gpt-4o"

    ollama_client = create_client(AIConfig(provider="ollama", model="llama3"))
    assert isinstance(ollama_client, LayoutClient)
    assert "11434" in str(ollama_client.client.base_url)


def test_fake_client_responses():
    plain = asyncio.run(FakeClient().complete("system", "user"))
    assert json.loads(plain)["gameType"] == "arena-3d"

    client = FakeClient(response='{"objects":[]}', as_envelope=True)
    wrapped = json.loads(asyncio.run(client.complete("system", "user")))
    assert wrapped["choices"][0]["message"]["content"] == '{"objects":[]}'
    assert client.get_stats()["calls"] == 1


def test_capabilities_list_catalog(td_profile):
    caps = build_capabilities(td_profile)
    assert caps["gameType"] == "td"
    assert caps["coordinateSpace"] == "grid"
    assert {"id": "TowerSlot", "maxPerLevel": 2, "tags": ["towerSlot"]} in caps["objects"]


def test_system_message():
    message = build_system_message('{"type": "object"}', hint="Prefer symmetric layouts.")
    assert "Return ONLY a single JSON object" in message
    assert "Prefer symmetric layouts." in message
    assert message.endswith('{"type": "object"}')
    assert build_system_message(None).endswith("{}")


def test_user_message_for_grid_profile(td_profile):
    message = build_user_message("a winding path", td_profile)
    assert "a winding path" in message
    assert '"gameType": "td"' in message
    assert "integer grid cells: x in [0, 9], z in [0, 9]" in message


def test_user_message_for_world_profile():
    message = build_user_message("an arena", GameTypeProfile())
    assert "integer grid cells" not in message
    assert "Respect maxPerLevel" in message
