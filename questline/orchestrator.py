"""Quest orchestrator: the command layer above the store.

Sequences every cross-cutting quest operation: check requirements against
the other subsystems, commit the transition to the store, then apply side
effects (rewards, notifications). Also routes normalized game events to the
objectives of every active quest.

Commands never raise the engine's own errors; they return a ``QuestOutcome``
describing what happened.
"""

import asyncio
import inspect
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Tuple

from . import config
from .collaborators import FactionService, InventoryService, Notifier, PlayerService, SkillService
from .errors import (
    IllegalTransitionError,
    QuestError,
    QuestNotFoundError,
    RequirementsNotMetError,
    RewardApplicationError,
    SubsystemError,
)
from .fsm import can_complete, can_start
from .matcher import match
from .model import GameEvent, Quest, Reward
from .requirements import PlayerSnapshot, RequirementsCheck, evaluate, snapshot_keys
from .store import QuestStore

logger = logging.getLogger(__name__)


async def _resolve(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


@dataclass
class QuestOutcome:
    """Result of an orchestrator command."""
    quest_id: str
    success: bool
    error: Optional[QuestError] = None
    requirements: Optional[RequirementsCheck] = None
    rewards: Optional[Reward] = None
    reward_failures: List[RewardApplicationError] = field(default_factory=list)

    @property
    def message(self) -> str:
        return str(self.error) if self.error else ""


def describe_rewards(reward: Reward) -> str:
    """Short summary like "100 XP, 50 Gold, 2 Item(s)"."""
    parts = []
    if reward.experience:
        parts.append(f"{reward.experience} XP")
    if reward.gold:
        parts.append(f"{reward.gold} Gold")
    if reward.essence:
        parts.append(f"{reward.essence} Essence")
    if reward.items:
        parts.append(f"{len(reward.items)} Item(s)")
    return ", ".join(parts)


class QuestOrchestrator:
    """Coordinates the quest store with the rest of the game."""

    def __init__(
        self,
        store: QuestStore,
        player: Optional[PlayerService] = None,
        inventory: Optional[InventoryService] = None,
        skills: Optional[SkillService] = None,
        factions: Optional[FactionService] = None,
        notifier: Optional[Notifier] = None,
    ):
        self.store = store
        self.player = player
        self.inventory = inventory
        self.skills = skills
        self.factions = factions
        self.notifier = notifier
        # Serializes commands and events so store writes never interleave
        self._lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # helpers

    def _require(self, quest_id: str) -> Quest:
        quest = self.store.get_quest(quest_id)
        if quest is None:
            raise QuestNotFoundError(quest_id)
        return quest

    async def _notify(self, message: str, severity: str, long: bool = False,
                      description: Optional[str] = None) -> None:
        if self.notifier is None:
            return
        duration = config.get_notify_long_ms() if long else config.get_notify_short_ms()
        try:
            await _resolve(self.notifier.notify(
                message,
                severity,
                duration=duration,
                category=config.get_notification_category(),
                description=description,
            ))
        except Exception:
            logger.exception("Failed to deliver quest notification: %s", message)

    async def _reject(self, quest_id: str, error: QuestError) -> QuestOutcome:
        self.store.state.error = str(error)
        if isinstance(error, QuestNotFoundError):
            logger.warning("%s", error)
        else:
            logger.info("Quest %s: %s", quest_id, error)
            await self._notify(str(error), "error", long=True)
        requirements = error.check if isinstance(error, RequirementsNotMetError) else None
        return QuestOutcome(quest_id=quest_id, success=False, error=error, requirements=requirements)

    async def build_snapshot(self, quest: Quest) -> PlayerSnapshot:
        """Query only the slices of player state a quest's requirements read.

        Raises:
            SubsystemError: If a subsystem query fails
        """
        try:
            return await self._query_snapshot(quest)
        except Exception as exc:
            raise SubsystemError(quest.id, exc) from exc

    async def _query_snapshot(self, quest: Quest) -> PlayerSnapshot:
        keys = snapshot_keys(quest.requirements)

        level = 1
        if self.player is not None:
            level = await _resolve(self.player.get_level())

        inventory = {}
        if self.inventory is not None:
            for item_id in keys["items"]:
                inventory[item_id] = await _resolve(self.inventory.get_quantity(item_id))

        skills = {}
        if self.skills is not None:
            for skill_id in keys["skills"]:
                skill_level = await _resolve(self.skills.get_skill_level(skill_id))
                if skill_level is not None:
                    skills[skill_id] = skill_level

        factions = {}
        if self.factions is not None:
            for faction_id in keys["factions"]:
                factions[faction_id] = await _resolve(self.factions.get_reputation(faction_id))

        state = self.store.state
        return PlayerSnapshot(
            level=level,
            completed_quest_ids=frozenset(state.completed_ids),
            inventory=inventory,
            skills=skills,
            factions=factions,
            quest_titles={quest_id: q.title for quest_id, q in state.quests.items()},
        )

    # ------------------------------------------------------------------
    # queries

    async def check_requirements(self, quest_id: str) -> RequirementsCheck:
        """Evaluate a quest's requirements without changing anything.

        Raises:
            QuestNotFoundError: If the quest is not registered
            SubsystemError: If player state cannot be read
        """
        quest = self._require(quest_id)
        snapshot = await self.build_snapshot(quest)
        return evaluate(quest, snapshot)

    async def discover_quests(self) -> List[str]:
        """Unlock every locked quest whose requirements are now all met."""
        unlocked = []
        async with self._lock:
            locked = [q for q in self.store.state.quests.values() if q.status == "locked"]
            for quest in locked:
                try:
                    check = evaluate(quest, await self.build_snapshot(quest))
                except SubsystemError as error:
                    logger.warning("%s", error)
                    continue
                if check.all_met and self.store.unlock(quest.id):
                    unlocked.append(quest.id)
        return unlocked

    # ------------------------------------------------------------------
    # commands

    async def start_quest(self, quest_id: str) -> QuestOutcome:
        """Start a quest after verifying its requirements.

        Args:
            quest_id: ID of quest to start

        Returns:
            QuestOutcome; on a requirements failure ``requirements`` holds
            the per-requirement breakdown
        """
        async with self._lock:
            try:
                quest = self._require(quest_id)
                if self.store.is_active(quest_id):
                    raise IllegalTransitionError(quest_id, f"Quest {quest.title} is already active")
                if not can_start(quest):
                    raise IllegalTransitionError(quest_id, f"Quest {quest.title} is not available")

                check = await self.check_requirements(quest_id)
                if not check.all_met:
                    raise RequirementsNotMetError(quest_id, check)

                if not self.store.start(quest_id):
                    raise IllegalTransitionError(quest_id, self.store.state.error or "Cannot start quest")
            except QuestError as error:
                return await self._reject(quest_id, error)

            await self._notify(f"Started new quest: {quest.title}", "success")
            return QuestOutcome(quest_id=quest_id, success=True, requirements=check)

    async def complete_quest(self, quest_id: str) -> QuestOutcome:
        """Turn in a quest and grant its rewards.

        Rewards are applied kind by kind; a failing kind is reported in
        ``reward_failures`` and never undoes the completion.
        """
        async with self._lock:
            try:
                quest = self._require(quest_id)
                if not self.store.is_active(quest_id):
                    raise IllegalTransitionError(quest_id, "Cannot complete quest that is not active")
                if not can_complete(quest):
                    raise IllegalTransitionError(
                        quest_id, "Cannot complete quest: not all objectives are completed")
                if not self.store.complete(quest_id):
                    raise IllegalTransitionError(quest_id, self.store.state.error or "Cannot complete quest")
            except QuestError as error:
                return await self._reject(quest_id, error)

            failures = await self._grant_rewards(quest)
            summary = describe_rewards(quest.reward)
            description = f"Rewards: {summary}" if summary else None
            if failures:
                failed_kinds = ", ".join(sorted({failure.kind for failure in failures}))
                await self._notify(
                    f"Completed quest: {quest.title}", "warning", long=True,
                    description=f"Some rewards could not be granted: {failed_kinds}",
                )
            else:
                await self._notify(f"Completed quest: {quest.title}", "success", long=True,
                                   description=description)

            return QuestOutcome(
                quest_id=quest_id,
                success=True,
                rewards=quest.reward,
                reward_failures=failures,
            )

    async def abandon_quest(self, quest_id: str) -> QuestOutcome:
        async with self._lock:
            try:
                quest = self._require(quest_id)
                if quest.is_story:
                    raise IllegalTransitionError(quest_id, "Story quests cannot be abandoned")
                if not self.store.is_active(quest_id):
                    raise IllegalTransitionError(quest_id, "Cannot abandon quest that is not active")
                self.store.abandon(quest_id)
            except QuestError as error:
                return await self._reject(quest_id, error)

            await self._notify(f"Abandoned quest: {quest.title}", "info")
            return QuestOutcome(quest_id=quest_id, success=True)

    async def fail_quest(self, quest_id: str, reason: Optional[str] = None) -> QuestOutcome:
        async with self._lock:
            try:
                quest = self._require(quest_id)
                if not self.store.is_active(quest_id):
                    raise IllegalTransitionError(quest_id, "Cannot fail quest that is not active")
                self.store.fail(quest_id, reason)
            except QuestError as error:
                return await self._reject(quest_id, error)

            await self._notify(f"Failed quest: {quest.title}", "error", long=True,
                               description=reason or "Quest conditions were not met")
            return QuestOutcome(quest_id=quest_id, success=True)

    async def process_event(self, event: GameEvent) -> List[str]:
        """Route one game event to the objectives of every active quest.

        Args:
            event: Normalized game event

        Returns:
            IDs of quests whose progress changed, in active-list order
        """
        updated: List[str] = []
        async with self._lock:
            for quest_id in list(self.store.state.active_ids):
                quest = self.store.get_quest(quest_id)
                if quest is None or not self.store.is_active(quest_id):
                    continue
                for delta in match(event, quest):
                    if self.store.update_objective_progress(quest_id, delta.objective_id, delta.amount):
                        if quest_id not in updated:
                            updated.append(quest_id)
        if updated:
            logger.debug("Event %s advanced quests %s", event.type, updated)
        return updated

    # ------------------------------------------------------------------
    # rewards

    def _reward_effects(self, quest: Quest) -> List[Tuple[str, Callable[[], Any]]]:
        reward = quest.reward
        effects: List[Tuple[str, Callable[[], Any]]] = []
        if reward.experience:
            effects.append(("experience", lambda: self._player().add_experience(reward.experience)))
        if reward.gold:
            effects.append(("gold", lambda: self._player().add_gold(reward.gold)))
        if reward.essence:
            effects.append(("essence", lambda: self._player().add_essence(reward.essence)))
        for item in reward.items:
            effects.append(("items", lambda item=item: self._inventory().add_item(item.id, item.quantity)))
        for faction_id, amount in reward.reputation.items():
            effects.append((
                "reputation",
                lambda faction_id=faction_id, amount=amount: self._factions().change_reputation(
                    faction_id, amount, f"Completed quest: {quest.title}"),
            ))
        return effects

    async def _grant_rewards(self, quest: Quest) -> List[RewardApplicationError]:
        failures = []
        for kind, effect in self._reward_effects(quest):
            try:
                await _resolve(effect())
            except Exception as exc:
                failure = RewardApplicationError(kind, exc)
                logger.error("Quest %s: %s", quest.id, failure)
                failures.append(failure)
        return failures

    def _player(self) -> PlayerService:
        if self.player is None:
            raise RuntimeError("no player subsystem attached")
        return self.player

    def _inventory(self) -> InventoryService:
        if self.inventory is None:
            raise RuntimeError("no inventory subsystem attached")
        return self.inventory

    def _factions(self) -> FactionService:
        if self.factions is None:
            raise RuntimeError("no faction subsystem attached")
        return self.factions
