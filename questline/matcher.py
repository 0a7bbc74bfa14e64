"""Objective matching for normalized game events.

Given one event and one quest, decide which of the quest's objectives the
event advances. Matching is exact equality on type and target (and location
for deliveries); completed objectives are skipped.
"""

from typing import List

from .model import GameEvent, Objective, ObjectiveDelta, Quest


def matches(event: GameEvent, objective: Objective) -> bool:
    """Check whether an event advances a single objective.

    Args:
        event: The normalized game event
        objective: Objective to test

    Returns:
        True if the event counts toward the objective
    """
    if objective.completed or event.type != objective.type:
        return False

    if objective.type == "explore":
        return objective.target == event.location

    if objective.type == "deliver":
        return objective.target == event.target and objective.location == event.location

    if objective.type in ("kill", "gather", "talk", "craft", "wait_time"):
        return objective.target == event.target

    return False


def match(event: GameEvent, quest: Quest) -> List[ObjectiveDelta]:
    """Return the progress deltas an event produces for one quest.

    Args:
        event: The normalized game event
        quest: Quest whose objectives are tested

    Returns:
        One delta per matching, not yet completed objective
    """
    if event.amount <= 0:
        return []
    return [
        ObjectiveDelta(quest_id=quest.id, objective_id=objective.id, amount=event.amount)
        for objective in quest.objectives
        if matches(event, objective)
    ]


def objective_wants(objective: Objective, kind: str, entity_id: str) -> bool:
    """Whether an unfinished objective cares about a given entity.

    ``kind`` is one of "item", "enemy", "location", "npc". Used by the
    relevance queries the UI runs before a kill, gather or visit.
    """
    if objective.completed:
        return False
    if kind == "item":
        return objective.type == "gather" and objective.target == entity_id
    if kind == "enemy":
        return objective.type == "kill" and objective.target == entity_id
    if kind == "location":
        return (
            (objective.type == "explore" and objective.target == entity_id)
            or (objective.type == "deliver" and objective.location == entity_id)
        )
    if kind == "npc":
        return objective.type == "talk" and objective.target == entity_id
    return False
