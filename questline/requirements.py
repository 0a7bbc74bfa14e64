"""Requirement evaluation for quest prerequisites.

Requirements are checked against a read-only ``PlayerSnapshot``. Supported
kinds:
- level: player level at least N
- quest: another quest is completed
- item: at least N of an item in the inventory
- skill: a skill at least at level N
- faction: reputation with a faction at least N

Anything else fails closed.
"""

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Mapping

from .model import (
    Quest,
    Requirement,
    LevelRequirement,
    QuestRequirement,
    ItemRequirement,
    SkillRequirement,
    FactionRequirement,
)


@dataclass(frozen=True)
class PlayerSnapshot:
    """Read-only view of the player/world state that requirements look at."""
    level: int = 1
    completed_quest_ids: FrozenSet[str] = frozenset()
    inventory: Mapping[str, int] = field(default_factory=dict)
    skills: Mapping[str, int] = field(default_factory=dict)
    factions: Mapping[str, int] = field(default_factory=dict)
    quest_titles: Mapping[str, str] = field(default_factory=dict)  # used for descriptions only
    skill_names: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class RequirementStatus:
    type: str
    met: bool
    description: str


@dataclass(frozen=True)
class RequirementsCheck:
    all_met: bool
    requirements: List[RequirementStatus]

    def unmet(self) -> List[RequirementStatus]:
        return [status for status in self.requirements if not status.met]


def check(requirement: Requirement, snapshot: PlayerSnapshot) -> bool:
    """Check if a single requirement is met.

    Args:
        requirement: The requirement to evaluate
        snapshot: Player state to evaluate against

    Returns:
        True if the requirement is satisfied, False otherwise
    """
    if isinstance(requirement, LevelRequirement):
        return snapshot.level >= requirement.level

    elif isinstance(requirement, QuestRequirement):
        return requirement.quest_id in snapshot.completed_quest_ids

    elif isinstance(requirement, ItemRequirement):
        return snapshot.inventory.get(requirement.item_id, 0) >= requirement.quantity

    elif isinstance(requirement, SkillRequirement):
        # A skill the player never learned has no level at all
        if requirement.skill_id not in snapshot.skills:
            return False
        return snapshot.skills[requirement.skill_id] >= requirement.level

    elif isinstance(requirement, FactionRequirement):
        return snapshot.factions.get(requirement.faction_id, 0) >= requirement.reputation

    # Unknown requirement type
    return False


def describe(requirement: Requirement, snapshot: PlayerSnapshot) -> str:
    """Human-readable description of a requirement, met or not."""
    if isinstance(requirement, LevelRequirement):
        return f"Requires level {requirement.level}"
    if isinstance(requirement, QuestRequirement):
        title = snapshot.quest_titles.get(requirement.quest_id, f"quest {requirement.quest_id}")
        return f"Requires completion of {title}"
    if isinstance(requirement, ItemRequirement):
        return f"Requires {requirement.quantity}x {requirement.item_id}"
    if isinstance(requirement, SkillRequirement):
        name = snapshot.skill_names.get(requirement.skill_id, requirement.skill_id)
        return f"Requires {name} level {requirement.level}"
    if isinstance(requirement, FactionRequirement):
        return f"Requires {requirement.reputation} reputation with {requirement.faction_id}"
    kind = getattr(requirement, "kind", None) or getattr(requirement, "type", "unknown")
    return f"Unknown requirement: {kind}"


def evaluate(quest: Quest, snapshot: PlayerSnapshot) -> RequirementsCheck:
    """Evaluate every requirement of a quest.

    Args:
        quest: Quest whose requirements are checked
        snapshot: Player state to evaluate against

    Returns:
        RequirementsCheck with the overall verdict and one status per requirement
    """
    statuses = []
    for requirement in quest.requirements:
        statuses.append(RequirementStatus(
            type=getattr(requirement, "type", "unknown"),
            met=check(requirement, snapshot),
            description=describe(requirement, snapshot),
        ))
    return RequirementsCheck(
        all_met=all(status.met for status in statuses),
        requirements=statuses,
    )


def check_all(requirements: List[Requirement], snapshot: PlayerSnapshot) -> bool:
    """Check if all requirements in a list are met."""
    return all(check(requirement, snapshot) for requirement in requirements)


def snapshot_keys(requirements: List[Requirement]) -> Dict[str, List[str]]:
    """Collect the item, skill and faction ids a requirement list reads.

    Lets a caller build a PlayerSnapshot by querying only what is needed.
    """
    keys: Dict[str, List[str]] = {"items": [], "skills": [], "factions": []}
    for requirement in requirements:
        if isinstance(requirement, ItemRequirement):
            keys["items"].append(requirement.item_id)
        elif isinstance(requirement, SkillRequirement):
            keys["skills"].append(requirement.skill_id)
        elif isinstance(requirement, FactionRequirement):
            keys["factions"].append(requirement.faction_id)
    return keys
