"""Finite State Machine for quest lifecycle.

States: locked, available, active, completed, failed.

    locked    -> available            (discovery / unlock)
    available -> active               (start)
    active    -> available            (abandon)
    active    -> completed | failed   (complete / fail)
    failed    -> available            (repeatable quests only)
    completed -> available            (daily / weekly reset only)
    completed | failed -> active      (explicit restart)

This module also holds the pure helpers that keep a quest's derived fields
consistent with its objectives.
"""

from typing import Dict, Optional, Set

from .model import Objective, Quest

TRANSITIONS: Dict[str, Set[str]] = {
    "locked": {"available"},
    "available": {"active"},
    "active": {"available", "completed", "failed"},
    "completed": {"available", "active"},
    "failed": {"available", "active"},
}


def can_transition(current: str, target: str) -> bool:
    return target in TRANSITIONS.get(current, set())


def can_start(quest: Quest) -> bool:
    """A quest may start from anything but active (or still locked)."""
    return can_transition(quest.status, "active")


def can_complete(quest: Quest) -> bool:
    """Check if an active quest has every objective completed."""
    return quest.status == "active" and quest.all_objectives_completed()


def objective_percent(objective: Objective) -> int:
    if objective.target_count <= 0:
        return 100
    return min(100, (100 * objective.current) // objective.target_count)


def set_objective_count(objective: Objective, count: int) -> bool:
    """Write a progress count into an objective, clamped to its target.

    Returns:
        True if this write flipped the objective to completed
    """
    was_completed = objective.completed
    objective.current = max(0, min(objective.target_count, count))
    objective.completed = objective.current >= objective.target_count
    objective.progress = objective_percent(objective)
    return objective.completed and not was_completed


def calculate_progress(quest: Quest) -> int:
    """Quest-level percentage: floor(100 * completed / total)."""
    if not quest.objectives:
        return 0
    completed = sum(1 for objective in quest.objectives if objective.completed)
    return (100 * completed) // len(quest.objectives)


def reset_objectives(quest: Quest) -> None:
    """Zero every objective, used when a quest is (re)started or reset."""
    for objective in quest.objectives:
        set_objective_count(objective, 0)
    quest.progress = calculate_progress(quest)


def is_expired(quest: Quest, now: float) -> bool:
    """Check if an active quest has run past its time limit."""
    if quest.status != "active" or quest.expires_at is None:
        return False
    return now >= quest.expires_at


def compute_expiry(quest: Quest, started_at: float) -> Optional[float]:
    if quest.time_limit is None:
        return None
    return started_at + quest.time_limit
