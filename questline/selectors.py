"""Read accessors over the quest store for the UI layer.

None of these mutate the store, except that looking a single quest up by id
goes through ``QuestStore.get_quest`` and may fail an expired quest.
"""

from typing import Dict, List, Optional

from .journal import get_recent_entries
from .matcher import objective_wants
from .model import Objective, Quest, QuestLogEntry, QuestProgress
from .store import INDEX_NAMES, QuestStore


def _collect(store: QuestStore, ids: List[str]) -> List[Quest]:
    quests = store.state.quests
    return [quests[quest_id] for quest_id in ids if quest_id in quests]


def active_quests(store: QuestStore) -> List[Quest]:
    return _collect(store, store.state.active_ids)


def available_quests(store: QuestStore) -> List[Quest]:
    return _collect(store, store.state.available_ids)


def completed_quests(store: QuestStore) -> List[Quest]:
    return _collect(store, store.state.completed_ids)


def failed_quests(store: QuestStore) -> List[Quest]:
    return _collect(store, store.state.failed_ids)


def quest_by_id(store: QuestStore, quest_id: str) -> Optional[Quest]:
    return store.get_quest(quest_id)


def progress_by_id(store: QuestStore, quest_id: str) -> Optional[QuestProgress]:
    return store.get_progress(quest_id)


def tracked_quest(store: QuestStore) -> Optional[Quest]:
    tracked_id = store.state.tracked_id
    return store.state.quests.get(tracked_id) if tracked_id else None


def selected_quest(store: QuestStore) -> Optional[Quest]:
    selected_id = store.state.selected_id
    return store.state.quests.get(selected_id) if selected_id else None


def quests_by_category(store: QuestStore, category: str) -> List[Quest]:
    return [q for q in store.state.quests.values() if q.category == category]


def quests_by_status(store: QuestStore, status: str) -> List[Quest]:
    """Quests in a lifecycle state, read from the index lists.

    A failed repeatable quest is listed under both "failed" and "available".
    Only "locked" quests, which sit in no list, are found by their status field.
    """
    index_name = f"{status}_ids"
    if index_name in INDEX_NAMES:
        return _collect(store, getattr(store.state, index_name))
    return [q for q in store.state.quests.values() if q.status == status]


def quests_by_location(store: QuestStore, location: str) -> List[Quest]:
    return [q for q in store.state.quests.values() if q.location == location]


def quests_by_npc(store: QuestStore, npc_id: str) -> List[Quest]:
    """Quests handed out by a given NPC."""
    return [q for q in store.state.quests.values() if q.giver == npc_id]


# ---------------- Journal ----------------

def unread_log_entries(store: QuestStore) -> List[QuestLogEntry]:
    return [entry for entry in store.state.log if not entry.read]


def log_entries_for_quest(store: QuestStore, quest_id: str) -> List[QuestLogEntry]:
    return [entry for entry in store.state.log if entry.quest_id == quest_id]


def recent_log_entries(store: QuestStore, count: int = 5) -> List[QuestLogEntry]:
    return get_recent_entries(store.state.log, count)


# ---------------- Objectives ----------------

def completed_objectives(store: QuestStore, quest_id: str) -> List[Objective]:
    quest = store.state.quests.get(quest_id)
    return [o for o in quest.objectives if o.completed] if quest else []


def incomplete_objectives(store: QuestStore, quest_id: str) -> List[Objective]:
    quest = store.state.quests.get(quest_id)
    return [o for o in quest.objectives if not o.completed] if quest else []


def is_quest_completable(store: QuestStore, quest_id: str) -> bool:
    """True when every objective is done and the quest can be turned in."""
    quest = store.state.quests.get(quest_id)
    return bool(quest) and quest.status == "active" and quest.all_objectives_completed()


# ---------------- Statistics ----------------

def _percent(part: int, whole: int) -> float:
    return (part / whole) * 100 if whole else 0.0


def main_story_progress(store: QuestStore) -> float:
    """Percentage of story quests completed."""
    completed = set(store.state.completed_ids)
    story = [q for q in store.state.quests.values() if q.is_story]
    return _percent(sum(1 for q in story if q.id in completed), len(story))


def completion_stats(store: QuestStore) -> Dict[str, Dict[str, float]]:
    """Completed / total / percent for all, main and side quests."""
    completed = set(store.state.completed_ids)
    all_quests = list(store.state.quests.values())

    def bucket(quests: List[Quest]) -> Dict[str, float]:
        done = sum(1 for q in quests if q.id in completed)
        return {"completed": done, "available": len(quests), "percent": _percent(done, len(quests))}

    return {
        "total": bucket(all_quests),
        "main": bucket([q for q in all_quests if q.category == "main"]),
        "side": bucket([q for q in all_quests if q.category == "side"]),
    }


def daily_quest_progress(store: QuestStore) -> Dict[str, float]:
    completed = set(store.state.completed_ids)
    daily = [q for q in store.state.quests.values() if q.category == "daily"]
    done = sum(1 for q in daily if q.id in completed)
    return {"completed": done, "total": len(daily), "percent": _percent(done, len(daily))}


def quest_count_by_location(store: QuestStore) -> Dict[str, Dict[str, int]]:
    """Count of available, active and completed quests per location."""
    counts: Dict[str, Dict[str, int]] = {}
    for quest in store.state.quests.values():
        bucket = counts.setdefault(quest.location or "unknown",
                                   {"available": 0, "active": 0, "completed": 0})
        if quest.status in bucket:
            bucket[quest.status] += 1
    return counts


# ---------------- Relevance queries ----------------

def _any_active_objective_wants(store: QuestStore, kind: str, entity_id: str) -> bool:
    return any(
        objective_wants(objective, kind, entity_id)
        for quest in active_quests(store)
        for objective in quest.objectives
    )


def quest_requires_item(store: QuestStore, item_id: str) -> bool:
    return _any_active_objective_wants(store, "item", item_id)


def quest_requires_enemy(store: QuestStore, enemy_type: str) -> bool:
    return _any_active_objective_wants(store, "enemy", enemy_type)


def quest_requires_location(store: QuestStore, location_id: str) -> bool:
    return _any_active_objective_wants(store, "location", location_id)


def quest_requires_npc(store: QuestStore, npc_id: str) -> bool:
    return _any_active_objective_wants(store, "npc", npc_id)
