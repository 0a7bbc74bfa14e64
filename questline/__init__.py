"""Quest progression engine."""

from .model import (
    Quest, Objective, Reward, RewardItem, QuestProgress, QuestLogEntry, ObjectiveDelta,
    LevelRequirement, QuestRequirement, ItemRequirement, SkillRequirement, FactionRequirement,
    UnknownRequirement,
    KillEvent, GatherEvent, ExploreEvent, TalkEvent, CraftEvent, DeliverEvent, WaitEvent,
)
from .requirements import PlayerSnapshot, RequirementsCheck, RequirementStatus, evaluate
from .matcher import match
from .store import QuestStore, QuestStoreState
from .orchestrator import QuestOrchestrator, QuestOutcome
from .errors import (
    QuestError, QuestNotFoundError, ObjectiveNotFoundError, IllegalTransitionError,
    RequirementsNotMetError, RewardApplicationError, SubsystemError,
)
from .loader import load_quests, load_into_store
from .persistence import serialize_store_state, deserialize_store_state

__all__ = [
    'Quest', 'Objective', 'Reward', 'RewardItem', 'QuestProgress', 'QuestLogEntry', 'ObjectiveDelta',
    'LevelRequirement', 'QuestRequirement', 'ItemRequirement', 'SkillRequirement',
    'FactionRequirement', 'UnknownRequirement',
    'KillEvent', 'GatherEvent', 'ExploreEvent', 'TalkEvent', 'CraftEvent', 'DeliverEvent', 'WaitEvent',
    'PlayerSnapshot', 'RequirementsCheck', 'RequirementStatus', 'evaluate',
    'match',
    'QuestStore', 'QuestStoreState',
    'QuestOrchestrator', 'QuestOutcome',
    'QuestError', 'QuestNotFoundError', 'ObjectiveNotFoundError', 'IllegalTransitionError',
    'RequirementsNotMetError', 'RewardApplicationError', 'SubsystemError',
    'load_quests', 'load_into_store',
    'serialize_store_state', 'deserialize_store_state',
]
