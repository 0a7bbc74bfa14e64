"""Exceptions raised by the quest engine.

Every error here is recoverable: the orchestrator turns them into a failed
``QuestOutcome`` plus a notification, and the store reports them through its
``error`` slot instead of raising.
"""


class QuestError(Exception):
    """Base class for quest engine errors."""
    pass


class QuestNotFoundError(QuestError):
    def __init__(self, quest_id: str):
        super().__init__(f"Quest with ID {quest_id} not found")
        self.quest_id = quest_id


class ObjectiveNotFoundError(QuestError):
    def __init__(self, quest_id: str, objective_id: str):
        super().__init__(f"Objective with ID {objective_id} not found in quest {quest_id}")
        self.quest_id = quest_id
        self.objective_id = objective_id


class IllegalTransitionError(QuestError):
    """A lifecycle transition was requested from a state that forbids it."""

    def __init__(self, quest_id: str, message: str):
        super().__init__(message)
        self.quest_id = quest_id


class RequirementsNotMetError(QuestError):
    """Raised when a quest is started while some prerequisite is unmet.

    Carries the full ``RequirementsCheck`` so the caller can show which
    gates failed.
    """

    def __init__(self, quest_id: str, check):
        unmet = ", ".join(status.description for status in check.unmet())
        super().__init__(f"Quest requirements not met: {unmet}")
        self.quest_id = quest_id
        self.check = check


class RewardApplicationError(QuestError):
    """Applying one reward kind to its subsystem failed."""

    def __init__(self, kind: str, cause: Exception):
        super().__init__(f"Failed to apply {kind} reward: {cause}")
        self.kind = kind
        self.cause = cause


class SubsystemError(QuestError):
    """Reading player state from another subsystem failed before any change was made."""

    def __init__(self, quest_id: str, cause: Exception):
        super().__init__(f"Cannot check requirements of quest {quest_id}: {cause}")
        self.quest_id = quest_id
        self.cause = cause
