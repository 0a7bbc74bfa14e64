"""Quest engine data models.

This module defines the core data structures for the quest system: Quest,
Objective, Reward, the requirement variants, the normalized game events fed
into the event router, and the progress / log side records kept by the store.

Requirements and events are closed tagged unions: each variant is its own
dataclass discriminated by a fixed ``type`` field and carries only the
fields that kind needs.
"""

from dataclasses import dataclass, field
from typing import List, Dict, Optional, Literal, Union

# Quest states for the FSM. "locked" marks a registered quest that has not
# been discovered yet (it sits in none of the index lists).
QuestStatus = Literal["locked", "available", "active", "completed", "failed"]

QuestCategory = Literal["main", "side", "daily", "weekly", "repeatable", "event"]

QuestDifficulty = Literal["easy", "normal", "hard", "epic"]

ObjectiveType = Literal["kill", "gather", "explore", "talk", "craft", "deliver", "wait_time"]

LogEntryType = Literal["start", "progress", "complete", "fail"]

OBJECTIVE_TYPES = ("kill", "gather", "explore", "talk", "craft", "deliver", "wait_time")
QUEST_CATEGORIES = ("main", "side", "daily", "weekly", "repeatable", "event")


@dataclass
class Objective:
    """A single countable sub-goal within a quest.

    ``target`` names the entity the objective is about (enemy type, item id,
    location id, NPC id); ``target_count`` is how many times it must happen.
    """
    id: str
    type: ObjectiveType
    target: str
    target_count: int = 1
    description: str = ""
    location: Optional[str] = None  # deliver destination
    current: int = 0
    completed: bool = False
    progress: int = 0  # 0-100, derived from current / target_count


@dataclass
class RewardItem:
    id: str
    quantity: int = 1
    name: str = ""


@dataclass
class Reward:
    """Rewards granted when a quest is turned in."""
    experience: int = 0
    gold: int = 0
    essence: int = 0
    items: List[RewardItem] = field(default_factory=list)
    reputation: Dict[str, int] = field(default_factory=dict)  # {"merchants_guild": +10}

    def is_empty(self) -> bool:
        return not (self.experience or self.gold or self.essence or self.items or self.reputation)


# ---------------- Requirements ----------------

@dataclass(frozen=True)
class LevelRequirement:
    level: int
    type: Literal["level"] = field(default="level", init=False)


@dataclass(frozen=True)
class QuestRequirement:
    """Another quest must be in the completed list."""
    quest_id: str
    type: Literal["quest"] = field(default="quest", init=False)


@dataclass(frozen=True)
class ItemRequirement:
    item_id: str
    quantity: int = 1
    type: Literal["item"] = field(default="item", init=False)


@dataclass(frozen=True)
class SkillRequirement:
    skill_id: str
    level: int = 1
    type: Literal["skill"] = field(default="skill", init=False)


@dataclass(frozen=True)
class FactionRequirement:
    faction_id: str
    reputation: int = 0
    type: Literal["faction"] = field(default="faction", init=False)


@dataclass(frozen=True)
class UnknownRequirement:
    """A requirement kind the engine does not understand. Always unmet."""
    kind: str
    type: Literal["unknown"] = field(default="unknown", init=False)


Requirement = Union[
    LevelRequirement,
    QuestRequirement,
    ItemRequirement,
    SkillRequirement,
    FactionRequirement,
    UnknownRequirement,
]


# ---------------- Game events ----------------

@dataclass(frozen=True)
class KillEvent:
    target: str  # enemy type
    amount: int = 1
    type: Literal["kill"] = field(default="kill", init=False)


@dataclass(frozen=True)
class GatherEvent:
    target: str  # item id
    amount: int = 1
    type: Literal["gather"] = field(default="gather", init=False)


@dataclass(frozen=True)
class ExploreEvent:
    location: str
    amount: int = 1
    type: Literal["explore"] = field(default="explore", init=False)


@dataclass(frozen=True)
class TalkEvent:
    target: str  # npc id
    amount: int = 1
    type: Literal["talk"] = field(default="talk", init=False)


@dataclass(frozen=True)
class CraftEvent:
    target: str  # crafted item id
    amount: int = 1
    type: Literal["craft"] = field(default="craft", init=False)


@dataclass(frozen=True)
class DeliverEvent:
    target: str  # delivered item id
    location: str
    amount: int = 1
    type: Literal["deliver"] = field(default="deliver", init=False)


@dataclass(frozen=True)
class WaitEvent:
    target: str  # what is being waited on, e.g. "night_watch"
    amount: int = 1
    type: Literal["wait_time"] = field(default="wait_time", init=False)


GameEvent = Union[KillEvent, GatherEvent, ExploreEvent, TalkEvent, CraftEvent, DeliverEvent, WaitEvent]


@dataclass(frozen=True)
class ObjectiveDelta:
    """Progress to add to one objective of one quest."""
    quest_id: str
    objective_id: str
    amount: int


# ---------------- Quest ----------------

@dataclass
class Quest:
    """A quest definition merged with its live state."""
    id: str
    title: str
    description: str = ""
    giver: Optional[str] = None  # npc id
    location: Optional[str] = None
    category: QuestCategory = "side"
    difficulty: QuestDifficulty = "normal"
    is_story: bool = False
    is_repeatable: bool = False
    objectives: List[Objective] = field(default_factory=list)
    requirements: List[Requirement] = field(default_factory=list)
    reward: Reward = field(default_factory=Reward)
    unlocks: List[str] = field(default_factory=list)
    time_limit: Optional[float] = None  # seconds
    faction_id: Optional[str] = None

    status: QuestStatus = "available"
    started_at: Optional[float] = None
    expires_at: Optional[float] = None
    progress: int = 0
    is_available: bool = True

    @property
    def repeatable(self) -> bool:
        return self.is_repeatable or self.category == "repeatable"

    def get_objective(self, objective_id: str) -> Optional[Objective]:
        """Get an objective by id."""
        for objective in self.objectives:
            if objective.id == objective_id:
                return objective
        return None

    def all_objectives_completed(self) -> bool:
        return all(objective.completed for objective in self.objectives)


@dataclass
class QuestProgress:
    """Raw progress side-table entry for an active (or finished) quest."""
    started_at: float
    completed_at: Optional[float] = None
    objective_progress: Dict[str, int] = field(default_factory=dict)


@dataclass
class QuestLogEntry:
    id: str
    timestamp: float
    quest_id: str
    message: str
    type: LogEntryType
    read: bool = False
