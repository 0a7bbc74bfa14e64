"""Test the quest orchestrator against in-memory subsystems."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import asyncio

import pytest

from questline.collaborators import (
    InMemoryFactions, InMemoryInventory, InMemoryPlayer, InMemorySkills, RecordingNotifier,
)
from questline.errors import IllegalTransitionError, QuestNotFoundError, RequirementsNotMetError, SubsystemError
from questline.model import (
    Quest, Objective, Reward, RewardItem, LevelRequirement, ItemRequirement, SkillRequirement,
    FactionRequirement, QuestRequirement, KillEvent, GatherEvent, TalkEvent,
)
from questline.orchestrator import QuestOrchestrator, describe_rewards
from questline.store import QuestStore


class BrokenInventory(InMemoryInventory):
    """Inventory whose writes always fail."""
    def add_item(self, item_id, quantity):
        raise IOError("inventory is full")


class AsyncPlayer(InMemoryPlayer):
    """Player service exposing coroutine methods."""
    async def get_level(self):
        await asyncio.sleep(0)
        return self.level

    async def add_experience(self, amount):
        await asyncio.sleep(0)
        self.experience += amount


def wolf_quest(quest_id="Q1", **kwargs):
    return Quest(
        id=quest_id,
        title="Wolf Hunt",
        objectives=[Objective(id="wolves", type="kill", target="wolf", target_count=3)],
        **kwargs
    )


def make_orchestrator(*quests, player=None, inventory=None):
    store = QuestStore()
    for quest in quests:
        store.add_quest(quest)
    orchestrator = QuestOrchestrator(
        store,
        player=player or InMemoryPlayer(level=3),
        inventory=inventory or InMemoryInventory(),
        skills=InMemorySkills({"alchemy": 2}),
        factions=InMemoryFactions({"guild": 10}),
        notifier=RecordingNotifier(),
    )
    return orchestrator


async def finish(orchestrator, quest_id):
    """Start a wolf quest and kill enough wolves to finish it."""
    await orchestrator.start_quest(quest_id)
    await orchestrator.process_event(KillEvent(target="wolf", amount=3))


# ---------------- start ----------------

@pytest.mark.asyncio
async def test_start_quest_notifies():
    orchestrator = make_orchestrator(wolf_quest())
    outcome = await orchestrator.start_quest("Q1")

    assert outcome.success == True
    assert outcome.requirements.all_met == True
    assert orchestrator.store.state.active_ids == ["Q1"]

    note = orchestrator.notifier.last
    assert note.message == "Started new quest: Wolf Hunt"
    assert note.severity == "success"
    assert note.duration == 3000
    assert note.category == "quests"


@pytest.mark.asyncio
async def test_start_with_unmet_level_requirement():
    quest = wolf_quest("Q2", requirements=[LevelRequirement(level=5)])
    orchestrator = make_orchestrator(quest)
    outcome = await orchestrator.start_quest("Q2")

    assert outcome.success == False
    assert isinstance(outcome.error, RequirementsNotMetError)
    assert outcome.requirements.all_met == False
    assert len(outcome.requirements.requirements) == 1
    assert outcome.requirements.requirements[0].type == "level"
    assert outcome.requirements.requirements[0].met == False
    assert orchestrator.store.state.available_ids == ["Q2"]
    assert orchestrator.store.state.active_ids == []

    note = orchestrator.notifier.last
    assert note.severity == "error"
    assert "Requires level 5" in note.message
    assert orchestrator.store.state.error == outcome.message


@pytest.mark.asyncio
async def test_start_reads_every_subsystem():
    quest = wolf_quest(requirements=[
        LevelRequirement(level=3),
        ItemRequirement(item_id="torch"),
        SkillRequirement(skill_id="alchemy", level=2),
        FactionRequirement(faction_id="guild", reputation=10),
    ])
    orchestrator = make_orchestrator(quest, inventory=InMemoryInventory({"torch": 1}))
    outcome = await orchestrator.start_quest("Q1")
    assert outcome.success == True
    assert [s.met for s in outcome.requirements.requirements] == [True, True, True, True]


@pytest.mark.asyncio
async def test_start_requires_previous_quest():
    second = wolf_quest("Q2", requirements=[QuestRequirement(quest_id="Q1")])
    orchestrator = make_orchestrator(wolf_quest(), second)

    outcome = await orchestrator.start_quest("Q2")
    assert outcome.success == False

    await finish(orchestrator, "Q1")
    await orchestrator.complete_quest("Q1")
    outcome = await orchestrator.start_quest("Q2")
    assert outcome.success == True


@pytest.mark.asyncio
async def test_start_already_active_quest():
    orchestrator = make_orchestrator(wolf_quest())
    await orchestrator.start_quest("Q1")
    outcome = await orchestrator.start_quest("Q1")
    assert outcome.success == False
    assert isinstance(outcome.error, IllegalTransitionError)
    assert orchestrator.store.state.active_ids == ["Q1"]


@pytest.mark.asyncio
async def test_start_unknown_quest_is_not_notified():
    orchestrator = make_orchestrator()
    outcome = await orchestrator.start_quest("ghost")
    assert outcome.success == False
    assert isinstance(outcome.error, QuestNotFoundError)
    assert outcome.message == "Quest with ID ghost not found"
    assert orchestrator.notifier.notifications == []


@pytest.mark.asyncio
async def test_check_requirements_is_read_only():
    quest = wolf_quest(requirements=[LevelRequirement(level=5)])
    orchestrator = make_orchestrator(quest)
    check = await orchestrator.check_requirements("Q1")
    assert check.all_met == False
    assert orchestrator.store.state.available_ids == ["Q1"]
    assert orchestrator.notifier.notifications == []

    with pytest.raises(QuestNotFoundError):
        await orchestrator.check_requirements("ghost")


@pytest.mark.asyncio
async def test_discover_quests_unlocks_when_requirements_met():
    player = InMemoryPlayer(level=3)
    orchestrator = make_orchestrator(player=player)
    orchestrator.store.add_quest(wolf_quest(requirements=[LevelRequirement(level=4)]), available=False)

    assert await orchestrator.discover_quests() == []
    player.level = 4
    assert await orchestrator.discover_quests() == ["Q1"]
    assert orchestrator.store.state.available_ids == ["Q1"]


@pytest.mark.asyncio
async def test_async_collaborators_are_awaited():
    player = AsyncPlayer(level=6)
    quest = wolf_quest(requirements=[LevelRequirement(level=5)], reward=Reward(experience=40))
    orchestrator = make_orchestrator(quest, player=player)

    await finish(orchestrator, "Q1")
    outcome = await orchestrator.complete_quest("Q1")
    assert outcome.success == True
    assert player.experience == 40


# ---------------- events ----------------

@pytest.mark.asyncio
async def test_event_advances_every_matching_quest():
    herbs = Quest(id="H", title="Herbs",
                  objectives=[Objective(id="herb", type="gather", target="herb", target_count=5)])
    more_herbs = Quest(id="H2", title="More Herbs",
                       objectives=[Objective(id="herb", type="gather", target="herb", target_count=2)])
    orchestrator = make_orchestrator(herbs, more_herbs, wolf_quest())
    for quest_id in ("H", "Q1", "H2"):
        await orchestrator.start_quest(quest_id)

    updated = await orchestrator.process_event(GatherEvent(target="herb", amount=2))
    assert updated == ["H", "H2"]
    assert herbs.objectives[0].current == 2
    assert more_herbs.objectives[0].current == 2
    assert more_herbs.objectives[0].completed == True

    # The finished objective no longer matches
    assert await orchestrator.process_event(GatherEvent(target="herb")) == ["H"]


@pytest.mark.asyncio
async def test_unmatched_event_changes_nothing():
    orchestrator = make_orchestrator(wolf_quest())
    await orchestrator.start_quest("Q1")
    log_size = len(orchestrator.store.state.log)
    assert await orchestrator.process_event(TalkEvent(target="wolf")) == []
    assert len(orchestrator.store.state.log) == log_size


@pytest.mark.asyncio
async def test_events_ignore_inactive_quests():
    orchestrator = make_orchestrator(wolf_quest())
    assert await orchestrator.process_event(KillEvent(target="wolf")) == []
    assert orchestrator.store.get_quest("Q1").objectives[0].current == 0


@pytest.mark.asyncio
async def test_concurrent_events_are_serialized():
    orchestrator = make_orchestrator(Quest(
        id="G", title="Big Harvest",
        objectives=[Objective(id="herb", type="gather", target="herb", target_count=50)],
    ))
    await orchestrator.start_quest("G")
    await asyncio.gather(*(orchestrator.process_event(GatherEvent(target="herb")) for _ in range(20)))
    assert orchestrator.store.get_quest("G").objectives[0].current == 20


# ---------------- complete ----------------

@pytest.mark.asyncio
async def test_complete_quest_grants_rewards():
    reward = Reward(
        experience=100, gold=50, essence=5,
        items=[RewardItem(id="potion", quantity=2)],
        reputation={"guild": 15},
    )
    orchestrator = make_orchestrator(wolf_quest(reward=reward))
    await finish(orchestrator, "Q1")

    outcome = await orchestrator.complete_quest("Q1")
    assert outcome.success == True
    assert outcome.reward_failures == []
    assert outcome.rewards is reward

    assert orchestrator.player.experience == 100
    assert orchestrator.player.gold == 50
    assert orchestrator.player.essence == 5
    assert orchestrator.inventory.get_quantity("potion") == 2
    assert orchestrator.factions.get_reputation("guild") == 25
    assert orchestrator.factions.history[-1]["reason"] == "Completed quest: Wolf Hunt"

    note = orchestrator.notifier.last
    assert note.severity == "success"
    assert note.duration == 5000
    assert note.description == "Rewards: 100 XP, 50 Gold, 5 Essence, 1 Item(s)"


@pytest.mark.asyncio
async def test_failing_reward_kind_does_not_block_others():
    reward = Reward(experience=30, items=[RewardItem(id="potion")], reputation={"guild": 5})
    orchestrator = make_orchestrator(wolf_quest(reward=reward), inventory=BrokenInventory())
    await finish(orchestrator, "Q1")

    outcome = await orchestrator.complete_quest("Q1")
    assert outcome.success == True
    assert [failure.kind for failure in outcome.reward_failures] == ["items"]
    assert "inventory is full" in str(outcome.reward_failures[0])

    # Completion stands and the other rewards went through
    assert orchestrator.store.state.completed_ids == ["Q1"]
    assert orchestrator.player.experience == 30
    assert orchestrator.factions.get_reputation("guild") == 15

    note = orchestrator.notifier.last
    assert note.severity == "warning"
    assert note.description == "Some rewards could not be granted: items"


@pytest.mark.asyncio
async def test_missing_subsystem_is_a_reward_failure():
    store = QuestStore()
    store.add_quest(wolf_quest(reward=Reward(gold=10)))
    orchestrator = QuestOrchestrator(store)
    await finish(orchestrator, "Q1")

    outcome = await orchestrator.complete_quest("Q1")
    assert outcome.success == True
    assert [failure.kind for failure in outcome.reward_failures] == ["gold"]


@pytest.mark.asyncio
async def test_complete_with_unfinished_objectives():
    orchestrator = make_orchestrator(wolf_quest(reward=Reward(gold=10)))
    await orchestrator.start_quest("Q1")
    await orchestrator.process_event(KillEvent(target="wolf"))

    outcome = await orchestrator.complete_quest("Q1")
    assert outcome.success == False
    assert outcome.message == "Cannot complete quest: not all objectives are completed"
    assert orchestrator.store.state.active_ids == ["Q1"]
    assert orchestrator.player.gold == 0


@pytest.mark.asyncio
async def test_rewards_are_granted_once():
    orchestrator = make_orchestrator(wolf_quest(reward=Reward(gold=10)))
    await finish(orchestrator, "Q1")
    await orchestrator.complete_quest("Q1")
    outcome = await orchestrator.complete_quest("Q1")
    assert outcome.success == False
    assert orchestrator.player.gold == 10


# ---------------- abandon / fail ----------------

@pytest.mark.asyncio
async def test_abandon_quest():
    orchestrator = make_orchestrator(wolf_quest())
    await orchestrator.start_quest("Q1")
    outcome = await orchestrator.abandon_quest("Q1")

    assert outcome.success == True
    assert orchestrator.store.state.available_ids == ["Q1"]
    assert orchestrator.notifier.last.message == "Abandoned quest: Wolf Hunt"
    assert orchestrator.notifier.last.severity == "info"


@pytest.mark.asyncio
async def test_story_quests_cannot_be_abandoned():
    orchestrator = make_orchestrator(wolf_quest(is_story=True))
    await orchestrator.start_quest("Q1")
    outcome = await orchestrator.abandon_quest("Q1")

    assert outcome.success == False
    assert outcome.message == "Story quests cannot be abandoned"
    assert orchestrator.store.state.active_ids == ["Q1"]


@pytest.mark.asyncio
async def test_fail_quest():
    orchestrator = make_orchestrator(wolf_quest())
    await orchestrator.start_quest("Q1")
    outcome = await orchestrator.fail_quest("Q1")

    assert outcome.success == True
    assert orchestrator.store.state.failed_ids == ["Q1"]
    note = orchestrator.notifier.last
    assert note.severity == "error"
    assert note.description == "Quest conditions were not met"


@pytest.mark.asyncio
async def test_fail_inactive_quest():
    orchestrator = make_orchestrator(wolf_quest())
    outcome = await orchestrator.fail_quest("Q1", "too slow")
    assert outcome.success == False
    assert orchestrator.store.state.failed_ids == []


def test_describe_rewards():
    assert describe_rewards(Reward()) == ""
    assert describe_rewards(Reward(experience=100, gold=50)) == "100 XP, 50 Gold"


class DownSkills:
    """Skill service that cannot be reached."""
    def get_skill_level(self, skill_id):
        raise ConnectionError("skill service down")


class BrokenNotifier:
    def notify(self, message, severity, *, duration, category, description=None):
        raise RuntimeError("toast queue full")


@pytest.mark.asyncio
async def test_unreachable_subsystem_fails_start_closed():
    quest = wolf_quest("S", requirements=[SkillRequirement(skill_id="tracking", level=1)])
    orchestrator = make_orchestrator(quest)
    orchestrator.skills = DownSkills()

    outcome = await orchestrator.start_quest("S")
    assert outcome.success == False
    assert isinstance(outcome.error, SubsystemError)
    assert "skill service down" in outcome.message
    assert orchestrator.store.state.available_ids == ["S"]
    assert orchestrator.store.state.active_ids == []
    assert orchestrator.notifier.last.severity == "error"


@pytest.mark.asyncio
async def test_discovery_skips_quests_it_cannot_check():
    orchestrator = make_orchestrator()
    orchestrator.skills = DownSkills()
    orchestrator.store.add_quest(
        wolf_quest("S", requirements=[SkillRequirement(skill_id="tracking")]), available=False)
    orchestrator.store.add_quest(wolf_quest("L", requirements=[LevelRequirement(level=1)]), available=False)

    assert await orchestrator.discover_quests() == ["L"]
    assert orchestrator.store.get_quest("S").status == "locked"


@pytest.mark.asyncio
async def test_broken_notifier_does_not_hide_outcome():
    orchestrator = make_orchestrator(wolf_quest("C", reward=Reward(gold=10)))
    orchestrator.notifier = BrokenNotifier()

    assert (await orchestrator.start_quest("C")).success == True
    await orchestrator.process_event(KillEvent(target="wolf", amount=3))
    outcome = await orchestrator.complete_quest("C")

    assert outcome.success == True
    assert outcome.reward_failures == []
    assert orchestrator.store.state.completed_ids == ["C"]
    assert orchestrator.player.gold == 10

    # Rejections still come back as outcomes
    outcome = await orchestrator.abandon_quest("C")
    assert outcome.success == False
