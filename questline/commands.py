"""Quest command handlers for a text front-end.

Each handler returns the usual command result dictionary
``{"lines": [...], "hints": [...], "events_triggered": [...]}``.
"""

from typing import Any, Dict, List, Optional

from . import selectors
from .journal import format_entry
from .model import Quest
from .store import QuestStore


def _result(lines: List[str], hints: Optional[List[str]] = None) -> Dict[str, Any]:
    return {"lines": lines, "hints": hints or [], "events_triggered": []}


def _objective_line(objective) -> str:
    mark = "✓" if objective.completed else " "
    label = objective.description or f"{objective.type} {objective.target}"
    return f"  [{mark}] {label} ({objective.current}/{objective.target_count})"


def quest_list_command(store: QuestStore, category: str = None) -> Dict[str, Any]:
    """Handle 'quests' command to list active quests.

    Args:
        store: QuestStore instance
        category: Optional filter by category ("main", "side", "daily", ...)

    Returns:
        Command result dictionary
    """
    quests = selectors.active_quests(store)
    if category:
        quests = [q for q in quests if q.category == category]
        lines = [f"=== Active {category.title()} Quests ==="]
    else:
        lines = ["=== Active Quests ==="]

    if not quests:
        lines.append("No active quests.")
        return _result(lines)

    for quest in quests:
        marker = "★" if quest.id == store.state.tracked_id else " "
        ready = " [READY]" if quest.all_objectives_completed() else ""
        lines.append(f"{marker} {quest.title}{ready}")
        lines.append(f"   Progress: {quest.progress}%")

    return _result(lines)


def quest_detail_command(store: QuestStore, quest_id: str) -> Dict[str, Any]:
    """Handle 'quest <id>' command to show quest details."""
    quest = store.get_quest(quest_id)
    if not quest:
        return _result([f"Quest '{quest_id}' not found."])

    lines = [f"=== {quest.title} ==="]
    if quest.description:
        lines.append(quest.description)
    lines.append(f"Type: {quest.category.title()}  Difficulty: {quest.difficulty.title()}")
    lines.append(f"Status: {quest.status}")
    if quest.giver:
        lines.append(f"Given by: {quest.giver}")
    if quest.location:
        lines.append(f"Location: {quest.location}")

    if quest.objectives:
        lines.append("\nObjectives:")
        lines.extend(_objective_line(objective) for objective in quest.objectives)

    hints = _hints_for(quest)
    return _result(lines, hints)


def _hints_for(quest: Quest) -> List[str]:
    if quest.status != "active":
        return []
    if quest.all_objectives_completed():
        target = quest.giver or "the quest giver"
        return [f"Return to {target} to turn in this quest."]

    hints = []
    for objective in quest.objectives:
        if objective.completed:
            continue
        remaining = objective.target_count - objective.current
        if objective.type == "kill":
            hints.append(f"Defeat: {remaining}x {objective.target}")
        elif objective.type == "gather":
            hints.append(f"Gather: {remaining}x {objective.target}")
        elif objective.type == "explore":
            hints.append(f"Go to: {objective.target}")
        elif objective.type == "talk":
            hints.append(f"Talk to: {objective.target}")
        elif objective.type == "craft":
            hints.append(f"Craft: {remaining}x {objective.target}")
        elif objective.type == "deliver":
            hints.append(f"Deliver {objective.target} to {objective.location}")
    return hints


def quest_track_command(store: QuestStore, quest_id: str) -> Dict[str, Any]:
    """Handle 'track <id>' command to track a quest."""
    if store.track_quest(quest_id):
        quest = store.state.quests[quest_id]
        return _result([f"Now tracking: {quest.title}"])
    return _result([f"Cannot track quest '{quest_id}'."])


def journal_command(store: QuestStore, limit: int = 5) -> Dict[str, Any]:
    """Handle 'journal' command to show recent journal entries.

    Shown entries are marked as read.
    """
    lines = ["=== Quest Journal ==="]
    recent = selectors.recent_log_entries(store, limit)
    if not recent:
        lines.append("The journal is empty.")
        return _result(lines)

    lines.extend(format_entry(entry) for entry in recent)
    store.mark_log_entries_read(entry.id for entry in recent)
    return _result(lines)


QUEST_COMMANDS = {
    "quests": {
        "usage": "quests [main|side|daily|weekly]",
        "desc": "Show active quests. Optionally filter by category.",
        "examples": ["quests", "quests main", "quests daily"]
    },
    "quest": {
        "usage": "quest <id>",
        "desc": "Show the details of a quest.",
        "examples": ["quest wolf_hunt"]
    },
    "track": {
        "usage": "track <id>",
        "desc": "Track an active quest on the HUD.",
        "examples": ["track wolf_hunt"]
    },
    "journal": {
        "usage": "journal",
        "desc": "Show the most recent quest journal entries.",
        "examples": ["journal"]
    }
}
