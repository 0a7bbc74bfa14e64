"""Quest store: the authoritative collection of quest records.

The store owns every quest, the four status index lists, the progress side
table and the quest journal. All mutation goes through the transition
methods below. A transition whose preconditions do not hold is a no-op: it
returns False and leaves a message in ``state.error`` instead of raising.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional

from . import config
from .fsm import (
    calculate_progress,
    can_start,
    compute_expiry,
    is_expired,
    reset_objectives,
    set_objective_count,
)
from .errors import ObjectiveNotFoundError, QuestNotFoundError
from .journal import create_log_entry
from .model import Quest, QuestLogEntry, QuestProgress

logger = logging.getLogger(__name__)

INDEX_NAMES = ("available_ids", "active_ids", "completed_ids", "failed_ids")


@dataclass
class QuestStoreState:
    """Plain-data state of the store; this is what gets persisted."""
    quests: Dict[str, Quest] = field(default_factory=dict)
    available_ids: List[str] = field(default_factory=list)
    active_ids: List[str] = field(default_factory=list)
    completed_ids: List[str] = field(default_factory=list)
    failed_ids: List[str] = field(default_factory=list)
    progress: Dict[str, QuestProgress] = field(default_factory=dict)
    log: List[QuestLogEntry] = field(default_factory=list)
    daily_reset: float = 0.0
    weekly_reset: float = 0.0
    tracked_id: Optional[str] = None
    selected_id: Optional[str] = None
    error: Optional[str] = None


class QuestStore:
    """Owns quest state and enforces the lifecycle transitions."""

    def __init__(
        self,
        state: Optional[QuestStoreState] = None,
        clock: Callable[[], float] = time.time,
        lazy_expiry: Optional[bool] = None,
    ):
        """Initialize the store.

        Args:
            state: Existing state to adopt (e.g. restored from a save)
            clock: Returns the current time in epoch seconds
            lazy_expiry: Fail expired quests on read; defaults to config
        """
        self.clock = clock
        self.lazy_expiry = config.lazy_expiry_enabled() if lazy_expiry is None else lazy_expiry
        self.state = state if state is not None else self._fresh_state()

    def _fresh_state(self) -> QuestStoreState:
        now = self.clock()
        return QuestStoreState(
            daily_reset=now + config.get_daily_reset_seconds(),
            weekly_reset=now + config.get_weekly_reset_seconds(),
        )

    # ------------------------------------------------------------------
    # internal helpers

    def _reject(self, message: str) -> bool:
        self.state.error = message
        logger.warning(message)
        return False

    def _log(self, quest_id: str, message: str, entry_type: str) -> None:
        self.state.log.append(create_log_entry(quest_id, message, entry_type, self.clock()))

    def _remove_from_indices(self, quest_id: str) -> None:
        for name in INDEX_NAMES:
            ids = getattr(self.state, name)
            if quest_id in ids:
                ids.remove(quest_id)

    def _make_available(self, quest: Quest) -> None:
        quest.status = "available"
        quest.is_available = True
        if quest.id not in self.state.available_ids:
            self.state.available_ids.append(quest.id)

    def _clear_tracking(self, quest_id: str) -> None:
        if self.state.tracked_id == quest_id:
            self.state.tracked_id = None

    def _lookup(self, quest_id: str) -> Optional[Quest]:
        """Fetch a quest, failing it first if its time limit has passed."""
        quest = self.state.quests.get(quest_id)
        if quest is not None and self.lazy_expiry and is_expired(quest, self.clock()):
            self.fail(quest_id, "Time limit expired")
        return quest

    # ------------------------------------------------------------------
    # reads

    def get_quest(self, quest_id: str) -> Optional[Quest]:
        """Get quest by ID.

        Args:
            quest_id: Quest ID to look up

        Returns:
            Quest object or None if not found
        """
        return self._lookup(quest_id)

    def get_progress(self, quest_id: str) -> Optional[QuestProgress]:
        return self.state.progress.get(quest_id)

    def index_of(self, quest_id: str) -> Optional[str]:
        """Name of the index list holding a quest id, or None."""
        for name in INDEX_NAMES:
            if quest_id in getattr(self.state, name):
                return name
        return None

    def is_active(self, quest_id: str) -> bool:
        return quest_id in self.state.active_ids

    def index_violations(self) -> List[str]:
        """Quest ids found in more than one index list.

        A repeatable quest that failed is allowed to sit in both the failed
        and the available lists until it is started again.
        """
        problems = []
        for quest_id, quest in self.state.quests.items():
            found = [name for name in INDEX_NAMES if quest_id in getattr(self.state, name)]
            if found == ["available_ids", "failed_ids"] and quest.repeatable:
                continue
            if len(found) > 1:
                problems.append(f"{quest_id} in {', '.join(found)}")
        return problems

    # ------------------------------------------------------------------
    # registration

    def add_quest(self, quest: Quest, available: bool = True) -> bool:
        """Register a quest definition.

        Args:
            quest: Quest to register
            available: False registers it as locked (not yet discovered)

        Returns:
            True if the quest was registered
        """
        if quest.id in self.state.quests:
            return self._reject(f"Quest with ID {quest.id} already registered")

        self.state.quests[quest.id] = quest
        reset_objectives(quest)
        quest.started_at = None
        quest.expires_at = None
        if available:
            self._make_available(quest)
        else:
            quest.status = "locked"
            quest.is_available = False
        logger.debug("Registered quest %s (%s)", quest.id, quest.status)
        return True

    def initialize(self, quests: Iterable[Quest]) -> int:
        """Register a catalog of quests, returning how many were added."""
        return sum(1 for quest in quests if self.add_quest(quest))

    def unlock(self, quest_id: str) -> bool:
        """Make a locked (or unlisted) quest available."""
        quest = self.state.quests.get(quest_id)
        if quest is None:
            return self._reject(str(QuestNotFoundError(quest_id)))
        if quest.status not in ("locked", "available") or self.index_of(quest_id) is not None:
            return False
        self._make_available(quest)
        logger.info("Unlocked quest %s", quest_id)
        return True

    # ------------------------------------------------------------------
    # lifecycle transitions

    def start(self, quest_id: str) -> bool:
        """Start (or restart) a quest.

        Args:
            quest_id: ID of quest to start

        Returns:
            True if quest was started successfully
        """
        quest = self.state.quests.get(quest_id)
        if quest is None:
            return self._reject(str(QuestNotFoundError(quest_id)))
        if quest_id in self.state.active_ids:
            return self._reject(f"Quest {quest_id} is already active")
        if not can_start(quest):
            return self._reject(f"Quest {quest_id} cannot be started while {quest.status}")

        now = self.clock()
        self._remove_from_indices(quest_id)
        self.state.active_ids.append(quest_id)

        quest.status = "active"
        quest.started_at = now
        quest.expires_at = compute_expiry(quest, now)
        reset_objectives(quest)

        self.state.progress[quest_id] = QuestProgress(
            started_at=now,
            objective_progress={objective.id: 0 for objective in quest.objectives},
        )
        self._log(quest_id, f"Started quest: {quest.title}", "start")
        logger.info("Quest %s started", quest_id)
        return True

    def update_objective_progress(self, quest_id: str, objective_id: str, delta: int) -> bool:
        """Add progress to one objective of an active quest.

        Args:
            quest_id: ID of the quest
            objective_id: ID of the objective within the quest
            delta: Amount of progress to add

        Returns:
            True if the objective's progress changed
        """
        quest = self._lookup(quest_id)
        if quest is None:
            return self._reject(str(QuestNotFoundError(quest_id)))
        if quest_id not in self.state.active_ids:
            return self._reject("Cannot update progress of quest that is not active")

        objective = quest.get_objective(objective_id)
        if objective is None:
            return self._reject(str(ObjectiveNotFoundError(quest_id, objective_id)))
        if objective.completed or delta <= 0:
            return False

        progress = self.state.progress.get(quest_id)
        if progress is None:
            progress = QuestProgress(started_at=quest.started_at or self.clock())
            self.state.progress[quest_id] = progress

        current = progress.objective_progress.get(objective_id, 0)
        flipped = set_objective_count(objective, current + delta)
        progress.objective_progress[objective_id] = objective.current
        logger.debug("Quest %s objective %s at %d/%d", quest_id, objective_id,
                     objective.current, objective.target_count)

        if flipped:
            label = objective.description or objective.id
            self._log(quest_id, f"Objective completed: {label}", "progress")

        quest.progress = calculate_progress(quest)
        return True

    def complete(self, quest_id: str) -> bool:
        """Turn in an active quest whose objectives are all completed.

        Args:
            quest_id: ID of quest to complete

        Returns:
            True if the quest moved to completed
        """
        quest = self._lookup(quest_id)
        if quest is None:
            return self._reject(str(QuestNotFoundError(quest_id)))
        if quest_id not in self.state.active_ids:
            return self._reject("Cannot complete quest that is not active")
        if not quest.all_objectives_completed():
            return self._reject("Cannot complete quest: not all objectives are completed")

        self._remove_from_indices(quest_id)
        self.state.completed_ids.append(quest_id)
        quest.status = "completed"
        quest.expires_at = None

        progress = self.state.progress.get(quest_id)
        if progress is not None:
            progress.completed_at = self.clock()

        self._clear_tracking(quest_id)
        self._log(quest_id, f"Completed quest: {quest.title}", "complete")

        for unlock_id in quest.unlocks:
            if unlock_id not in self.state.quests:
                logger.warning("Quest %s unlocks unknown quest %s", quest_id, unlock_id)
                continue
            self.unlock(unlock_id)

        logger.info("Quest %s completed", quest_id)
        return True

    def abandon(self, quest_id: str) -> bool:
        """Drop an active quest.

        Non-story quests go back to available. Story quests are only taken
        off the active list; the orchestrator refuses to abandon them.
        """
        quest = self.state.quests.get(quest_id)
        if quest is None:
            return self._reject(str(QuestNotFoundError(quest_id)))
        if quest_id not in self.state.active_ids:
            return self._reject("Cannot abandon quest that is not active")

        self._remove_from_indices(quest_id)
        reset_objectives(quest)
        quest.expires_at = None
        if quest.is_story:
            quest.status = "available"
        else:
            self._make_available(quest)

        self.state.progress.pop(quest_id, None)
        self._clear_tracking(quest_id)
        self._log(quest_id, f"Abandoned quest: {quest.title}", "fail")
        logger.info("Quest %s abandoned", quest_id)
        return True

    def fail(self, quest_id: str, reason: Optional[str] = None) -> bool:
        """Fail an active quest; repeatable quests become available again."""
        quest = self.state.quests.get(quest_id)
        if quest is None:
            return self._reject(str(QuestNotFoundError(quest_id)))
        if quest_id not in self.state.active_ids:
            return self._reject("Cannot fail quest that is not active")

        self.state.active_ids.remove(quest_id)
        self.state.failed_ids.append(quest_id)
        quest.status = "failed"
        quest.expires_at = None

        self._clear_tracking(quest_id)
        suffix = f" - {reason}" if reason else ""
        self._log(quest_id, f"Failed quest: {quest.title}{suffix}", "fail")

        if quest.repeatable:
            self._make_available(quest)

        logger.info("Quest %s failed%s", quest_id, suffix)
        return True

    def expire_overdue(self) -> List[str]:
        """Fail every active quest whose deadline has passed."""
        now = self.clock()
        expired = [
            quest_id for quest_id in list(self.state.active_ids)
            if is_expired(self.state.quests[quest_id], now)
        ]
        for quest_id in expired:
            self.fail(quest_id, "Time limit expired")
        return expired

    # ------------------------------------------------------------------
    # tracking and selection

    def track_quest(self, quest_id: Optional[str]) -> bool:
        """Set or clear the HUD-tracked quest."""
        if quest_id is None:
            self.state.tracked_id = None
            return True

        quest = self._lookup(quest_id)
        if quest is None:
            return self._reject(str(QuestNotFoundError(quest_id)))
        if quest_id not in self.state.active_ids:
            return self._reject("Cannot track quest that is not active")

        self.state.tracked_id = quest_id
        return True

    def select_quest(self, quest_id: Optional[str]) -> None:
        self.state.selected_id = quest_id

    # ------------------------------------------------------------------
    # journal

    def add_log_entry(self, quest_id: str, message: str, entry_type: str) -> QuestLogEntry:
        entry = create_log_entry(quest_id, message, entry_type, self.clock())
        self.state.log.append(entry)
        return entry

    def mark_log_entries_read(self, entry_ids: Iterable[str]) -> int:
        """Flag log entries as read, returning how many changed."""
        wanted = set(entry_ids)
        changed = 0
        for entry in self.state.log:
            if entry.id in wanted and not entry.read:
                entry.read = True
                changed += 1
        return changed

    # ------------------------------------------------------------------
    # scheduled resets

    def _reset_category(self, category: str) -> List[str]:
        reset_ids = [
            quest_id for quest_id in self.state.completed_ids
            if self.state.quests[quest_id].category == category
        ]
        for quest_id in reset_ids:
            quest = self.state.quests[quest_id]
            self.state.completed_ids.remove(quest_id)
            reset_objectives(quest)
            quest.started_at = None
            self.state.progress.pop(quest_id, None)
            self._make_available(quest)
        if reset_ids:
            logger.info("Reset %d %s quest(s)", len(reset_ids), category)
        return reset_ids

    def reset_daily_quests(self) -> List[str]:
        """Return completed daily quests to available and restart the daily timer."""
        reset_ids = self._reset_category("daily")
        self.state.daily_reset = self.clock() + config.get_daily_reset_seconds()
        return reset_ids

    def reset_weekly_quests(self) -> List[str]:
        """Return completed weekly quests to available and restart the weekly timer."""
        reset_ids = self._reset_category("weekly")
        self.state.weekly_reset = self.clock() + config.get_weekly_reset_seconds()
        return reset_ids

    def run_scheduled_resets(self) -> List[str]:
        """Run the daily/weekly resets whose timestamp has passed.

        Missed periods (e.g. after a long break) only reset quests once; the
        timer then restarts one period from the current time.
        """
        now = self.clock()
        reset_ids: List[str] = []
        if now >= self.state.daily_reset:
            reset_ids.extend(self.reset_daily_quests())
        if now >= self.state.weekly_reset:
            reset_ids.extend(self.reset_weekly_quests())
        return reset_ids

    # ------------------------------------------------------------------
    # maintenance

    def clear_error(self) -> None:
        self.state.error = None

    def reset(self) -> None:
        """Drop every quest and start from an empty state."""
        self.state = self._fresh_state()
