"""Test saving and restoring quest store state."""

import sys
import os
import json
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import pytest

from questline.model import (
    Quest, Objective, Reward, RewardItem, LevelRequirement, SkillRequirement, UnknownRequirement,
)
from questline.persistence import (
    STATE_VERSION, StateFormatError, deserialize_store_state, serialize_store_state,
)
from questline.store import QuestStore


def build_store():
    store = QuestStore()
    store.add_quest(Quest(
        id="Q1",
        title="Wolf Hunt",
        category="daily",
        objectives=[Objective(id="wolves", type="kill", target="wolf", target_count=3)],
        requirements=[LevelRequirement(level=2), SkillRequirement(skill_id="tracking", level=1),
                      UnknownRequirement(kind="moon_phase")],
        reward=Reward(gold=10, items=[RewardItem(id="pelt", quantity=2)], reputation={"hunters": 5}),
        time_limit=3600,
    ))
    store.add_quest(Quest(id="Q2", title="Later"), available=False)
    store.start("Q1")
    store.update_objective_progress("Q1", "wolves", 2)
    store.track_quest("Q1")
    return store


def test_state_survives_json():
    store = build_store()
    data = json.loads(json.dumps(serialize_store_state(store.state)))
    assert data["_metadata"]["version"] == STATE_VERSION

    restored = QuestStore(state=deserialize_store_state(data))
    quest = restored.get_quest("Q1")
    assert quest.status == "active"
    assert quest.objectives[0].current == 2
    assert quest.requirements == store.state.quests["Q1"].requirements
    assert quest.reward.items[0].quantity == 2
    assert quest.reward.reputation == {"hunters": 5}
    assert restored.state.active_ids == ["Q1"]
    assert restored.state.tracked_id == "Q1"
    assert restored.get_progress("Q1").objective_progress == {"wolves": 2}
    assert restored.get_quest("Q2").status == "locked"
    assert [e.message for e in restored.state.log] == [e.message for e in store.state.log]


def test_restored_store_keeps_working():
    store = build_store()
    restored = QuestStore(state=deserialize_store_state(serialize_store_state(store.state)))
    restored.update_objective_progress("Q1", "wolves", 1)
    assert restored.complete("Q1") == True
    assert restored.state.completed_ids == ["Q1"]


def test_newer_version_is_rejected():
    data = serialize_store_state(build_store().state)
    data["_metadata"]["version"] = STATE_VERSION + 1
    with pytest.raises(StateFormatError):
        deserialize_store_state(data)


def test_malformed_state():
    with pytest.raises(StateFormatError):
        deserialize_store_state({"quests": {"Q1": {"title": "No id"}}})
