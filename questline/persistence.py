"""Plain-data conversion of the quest store state.

The persistence collaborator saves and restores the whole store state; this
module only turns it into JSON-compatible dictionaries and back, with a
format version so old saves can be recognized.
"""
from __future__ import annotations
import time
from dataclasses import asdict
from typing import Any, Dict

from .loader import parse_requirement
from .model import Objective, Quest, QuestLogEntry, QuestProgress, Reward, RewardItem, UnknownRequirement
from .store import QuestStoreState

# Save format version - increment when making breaking changes
STATE_VERSION = 1


class StateFormatError(Exception):
    """Raised when serialized quest state cannot be restored."""
    pass


def serialize_store_state(state: QuestStoreState) -> Dict[str, Any]:
    """Convert the store state into a JSON-compatible dictionary."""
    data = asdict(state)
    data["_metadata"] = {
        "version": STATE_VERSION,
        "timestamp": time.time(),
    }
    return data


def deserialize_store_state(data: Dict[str, Any]) -> QuestStoreState:
    """Rebuild a QuestStoreState from ``serialize_store_state`` output.

    Raises:
        StateFormatError: If the data is newer than this engine or malformed
    """
    data = dict(data)
    metadata = data.pop("_metadata", {})
    version = metadata.get("version", 0)
    if version > STATE_VERSION:
        raise StateFormatError(f"Quest state version {version} is newer than supported version {STATE_VERSION}")

    try:
        return QuestStoreState(
            quests={quest_id: _quest_from_dict(q) for quest_id, q in data.get("quests", {}).items()},
            available_ids=list(data.get("available_ids", [])),
            active_ids=list(data.get("active_ids", [])),
            completed_ids=list(data.get("completed_ids", [])),
            failed_ids=list(data.get("failed_ids", [])),
            progress={
                quest_id: QuestProgress(**progress)
                for quest_id, progress in data.get("progress", {}).items()
            },
            log=[QuestLogEntry(**entry) for entry in data.get("log", [])],
            daily_reset=data.get("daily_reset", 0.0),
            weekly_reset=data.get("weekly_reset", 0.0),
            tracked_id=data.get("tracked_id"),
            selected_id=data.get("selected_id"),
            error=data.get("error"),
        )
    except (KeyError, TypeError) as e:
        raise StateFormatError(f"Malformed quest state: {e}")


def _quest_from_dict(quest_data: Dict[str, Any]) -> Quest:
    quest_data = dict(quest_data)
    reward_data = dict(quest_data.pop("reward", {}) or {})
    reward_data["items"] = [RewardItem(**item) for item in reward_data.get("items", [])]
    return Quest(
        objectives=[Objective(**o) for o in quest_data.pop("objectives", [])],
        requirements=[_requirement_from_dict(r) for r in quest_data.pop("requirements", [])],
        reward=Reward(**reward_data),
        **quest_data,
    )


def _requirement_from_dict(requirement_data: Dict[str, Any]):
    # asdict() writes each variant's own field names, which the loader accepts
    if requirement_data.get("type") == "unknown":
        return UnknownRequirement(kind=requirement_data.get("kind", "unknown"))
    return parse_requirement(requirement_data)
