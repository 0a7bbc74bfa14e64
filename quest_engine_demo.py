#!/usr/bin/env python3
"""
Demonstration of the quest progression engine.

This demo shows how the engine works with:
- Loading a quest catalog from JSON
- Requirement checks before starting a quest
- Routing game events to objectives
- Turning quests in and granting rewards
- The text commands (quest list, details, journal)
"""

import asyncio
import logging
import os
import sys

# Add the current directory to Python path
sys.path.insert(0, os.path.dirname(__file__))

from questline import QuestOrchestrator, QuestStore, load_into_store
from questline import commands
from questline.collaborators import (
    InMemoryFactions, InMemoryInventory, InMemoryPlayer, InMemorySkills, LoggingNotifier,
)
from questline.model import DeliverEvent, ExploreEvent, GatherEvent, KillEvent, TalkEvent

CATALOG = os.path.join(os.path.dirname(__file__), "data", "quests.json")


def create_demo_orchestrator():
    """Create an orchestrator over the demo catalog."""
    store = QuestStore()
    load_into_store(store, CATALOG)
    return QuestOrchestrator(
        store,
        player=InMemoryPlayer(level=1),
        inventory=InMemoryInventory(),
        skills=InMemorySkills(),
        factions=InMemoryFactions(),
        notifier=LoggingNotifier(),
    )


def show(result):
    for line in result["lines"]:
        print(line)
    for hint in result["hints"]:
        print(f"  > {hint}")
    print()


async def demo_story_line(orchestrator):
    print("=== DEMO: Story Quest ===")
    await orchestrator.start_quest("wolf_hunt")

    for _ in range(3):
        await orchestrator.process_event(KillEvent(target="wolf"))
    show(commands.quest_detail_command(orchestrator.store, "wolf_hunt"))

    await orchestrator.process_event(TalkEvent(target="hunter_brann"))
    outcome = await orchestrator.complete_quest("wolf_hunt")
    print(f"Completed: {outcome.success}, player: {orchestrator.player}")

    # The follow-up is unlocked but needs level 2
    outcome = await orchestrator.start_quest("the_alpha")
    print(f"Start the_alpha: {outcome.success} ({outcome.message})")
    orchestrator.player.level = 2
    outcome = await orchestrator.start_quest("the_alpha")
    print(f"Start the_alpha at level 2: {outcome.success}")

    await orchestrator.process_event(ExploreEvent(location="wolf_den"))
    show(commands.quest_list_command(orchestrator.store))


async def demo_side_quest(orchestrator):
    print("=== DEMO: Side Quest ===")
    outcome = await orchestrator.start_quest("healing_herbs")
    for status in outcome.requirements.requirements:
        print(f"  {'✓' if status.met else '✗'} {status.description}")

    orchestrator.skills.levels["herbalism"] = 1
    await orchestrator.start_quest("healing_herbs")
    await orchestrator.process_event(GatherEvent(target="moonleaf", amount=5))
    await orchestrator.process_event(DeliverEvent(target="moonleaf", location="healers_hut"))
    await orchestrator.complete_quest("healing_herbs")
    print(f"Inventory: {orchestrator.inventory.items}")
    print()


async def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    orchestrator = create_demo_orchestrator()

    await demo_story_line(orchestrator)
    await demo_side_quest(orchestrator)
    show(commands.journal_command(orchestrator.store, limit=10))


if __name__ == "__main__":
    asyncio.run(main())
