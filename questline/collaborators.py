"""Contracts for the game subsystems the quest engine talks to.

The orchestrator only reads and writes other subsystems through these
interfaces. Methods may be plain or ``async``; the orchestrator awaits
whatever comes back when it is awaitable.

Simple in-memory implementations are provided for the demo and for tests.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol

logger = logging.getLogger(__name__)


class PlayerService(Protocol):
    def get_level(self) -> int: ...

    def add_experience(self, amount: int) -> Any: ...

    def add_gold(self, amount: int) -> Any: ...

    def add_essence(self, amount: int) -> Any: ...


class InventoryService(Protocol):
    def get_quantity(self, item_id: str) -> int: ...

    def add_item(self, item_id: str, quantity: int) -> Any: ...

    def remove_item(self, item_id: str, quantity: int) -> Any: ...


class SkillService(Protocol):
    def get_skill_level(self, skill_id: str) -> Optional[int]:
        """Level of a skill, or None if the player does not have it."""
        ...


class FactionService(Protocol):
    def get_reputation(self, faction_id: str) -> int: ...

    def change_reputation(self, faction_id: str, amount: int, reason: str) -> Any: ...


class Notifier(Protocol):
    def notify(
        self,
        message: str,
        severity: str,
        *,
        duration: int,
        category: str,
        description: Optional[str] = None,
    ) -> Any: ...


# ---------------- In-memory implementations ----------------

@dataclass
class InMemoryPlayer:
    level: int = 1
    experience: int = 0
    gold: int = 0
    essence: int = 0

    def get_level(self) -> int:
        return self.level

    def add_experience(self, amount: int) -> None:
        self.experience += amount

    def add_gold(self, amount: int) -> None:
        self.gold += amount

    def add_essence(self, amount: int) -> None:
        self.essence += amount


@dataclass
class InMemoryInventory:
    items: Dict[str, int] = field(default_factory=dict)  # item_id -> quantity

    def get_quantity(self, item_id: str) -> int:
        return self.items.get(item_id, 0)

    def add_item(self, item_id: str, quantity: int) -> None:
        self.items[item_id] = self.items.get(item_id, 0) + quantity

    def remove_item(self, item_id: str, quantity: int) -> None:
        current = self.items.get(item_id, 0)
        if current < quantity:
            raise ValueError(f"Not enough {item_id}: have {current}, need {quantity}")
        remaining = current - quantity
        if remaining:
            self.items[item_id] = remaining
        else:
            del self.items[item_id]


@dataclass
class InMemorySkills:
    levels: Dict[str, int] = field(default_factory=dict)

    def get_skill_level(self, skill_id: str) -> Optional[int]:
        return self.levels.get(skill_id)


@dataclass
class InMemoryFactions:
    reputation: Dict[str, int] = field(default_factory=dict)
    history: List[Dict[str, Any]] = field(default_factory=list)

    def get_reputation(self, faction_id: str) -> int:
        return self.reputation.get(faction_id, 0)

    def change_reputation(self, faction_id: str, amount: int, reason: str) -> None:
        self.reputation[faction_id] = self.reputation.get(faction_id, 0) + amount
        self.history.append({"faction_id": faction_id, "amount": amount, "reason": reason})


@dataclass
class Notification:
    message: str
    severity: str
    duration: int
    category: str
    description: Optional[str] = None


class RecordingNotifier:
    """Keeps every notification in a list, newest last."""

    def __init__(self):
        self.notifications: List[Notification] = []

    def notify(self, message, severity, *, duration, category, description=None):
        self.notifications.append(Notification(message, severity, duration, category, description))

    @property
    def last(self) -> Optional[Notification]:
        return self.notifications[-1] if self.notifications else None


class LoggingNotifier:
    """Sends notifications to the log; handy for console front-ends."""

    LEVELS = {"error": logging.ERROR, "warning": logging.WARNING}

    def notify(self, message, severity, *, duration, category, description=None):
        level = self.LEVELS.get(severity, logging.INFO)
        text = f"[{category}] {message}"
        if description:
            text += f" ({description})"
        logger.log(level, text)
