"""Quest catalog loader from JSON files.

This module loads quest definitions from JSON, validates them against
``QUEST_CATALOG_SCHEMA`` and converts them into Quest objects.
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Tuple

import jsonschema

from .model import (
    FactionRequirement,
    ItemRequirement,
    LevelRequirement,
    Objective,
    Quest,
    QuestRequirement,
    Requirement,
    Reward,
    RewardItem,
    SkillRequirement,
    UnknownRequirement,
)
from .schema import QUEST_CATALOG_SCHEMA


def load_quests(catalog_path: str) -> List[Tuple[Quest, bool]]:
    """Load a quest catalog from a JSON file.

    Args:
        catalog_path: Path to the catalog JSON file

    Returns:
        (quest, available) pairs in file order; ``available`` is False for
        quests that start locked

    Raises:
        FileNotFoundError: If the catalog file doesn't exist
        ValueError: If the file is not valid JSON or breaks the schema
    """
    path = Path(catalog_path)
    if not path.exists():
        raise FileNotFoundError(f"Quest catalog not found: {catalog_path}")

    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in quest catalog: {e}")

    return parse_catalog(data)


def parse_catalog(data: Dict[str, Any]) -> List[Tuple[Quest, bool]]:
    """Validate and parse an already-decoded catalog."""
    errors = validate_catalog(data)
    if errors:
        raise ValueError("Invalid quest catalog: " + "; ".join(errors))

    seen = set()
    parsed = []
    for quest_data in data["quests"]:
        if quest_data["id"] in seen:
            raise ValueError(f"Duplicate quest id in catalog: {quest_data['id']}")
        seen.add(quest_data["id"])
        parsed.append((parse_quest(quest_data), quest_data.get("available", True)))
    return parsed


def validate_catalog(data: Dict[str, Any]) -> List[str]:
    """Validate a catalog against the schema.

    Returns:
        List of validation error messages (empty if valid)
    """
    validator = jsonschema.Draft7Validator(QUEST_CATALOG_SCHEMA)
    errors = []
    for error in sorted(validator.iter_errors(data), key=lambda e: [str(part) for part in e.path]):
        location = "/".join(str(part) for part in error.path) or "<root>"
        errors.append(f"{location}: {error.message}")
    return errors


def parse_quest(quest_data: Dict[str, Any]) -> Quest:
    """Parse a single quest from JSON data."""
    return Quest(
        id=quest_data["id"],
        title=quest_data["title"],
        description=quest_data.get("description", ""),
        giver=quest_data.get("giver"),
        location=quest_data.get("location"),
        category=quest_data.get("category", "side"),
        difficulty=quest_data.get("difficulty", "normal"),
        is_story=quest_data.get("is_story", False),
        is_repeatable=quest_data.get("is_repeatable", False),
        objectives=[_parse_objective(o) for o in quest_data.get("objectives", [])],
        requirements=[parse_requirement(r) for r in quest_data.get("requirements", [])],
        reward=_parse_reward(quest_data.get("reward", {})),
        unlocks=list(quest_data.get("unlocks", [])),
        time_limit=quest_data.get("time_limit"),
        faction_id=quest_data.get("faction_id"),
    )


def _parse_objective(objective_data: Dict[str, Any]) -> Objective:
    return Objective(
        id=objective_data["id"],
        type=objective_data["type"],
        target=objective_data["target"],
        target_count=objective_data.get("target_count", 1),
        description=objective_data.get("description", ""),
        location=objective_data.get("location"),
    )


def parse_requirement(requirement_data: Dict[str, Any]) -> Requirement:
    """Parse a requirement into its tagged variant.

    Both the explicit form ({"type": "item", "item_id": "herb", "quantity": 3})
    and the legacy single-value form ({"type": "item", "value": "herb",
    "quantity": 3}) are accepted. Unknown kinds or entries missing their key
    field become UnknownRequirement.
    """
    kind = requirement_data.get("type")
    value = requirement_data.get("value")

    try:
        if kind == "level":
            return LevelRequirement(level=int(requirement_data.get("level", value)))
        elif kind == "quest":
            quest_id = requirement_data.get("quest_id", value)
            if quest_id is None:
                raise ValueError("quest requirement without quest id")
            return QuestRequirement(quest_id=str(quest_id))
        elif kind == "item":
            item_id = requirement_data.get("item_id", value)
            if item_id is None:
                raise ValueError("item requirement without item id")
            return ItemRequirement(item_id=str(item_id), quantity=requirement_data.get("quantity", 1))
        elif kind == "skill":
            skill_id = requirement_data.get("skill_id", value)
            if skill_id is None:
                raise ValueError("skill requirement without skill id")
            level = requirement_data.get("skill_level", requirement_data.get("level", 1))
            return SkillRequirement(skill_id=str(skill_id), level=level)
        elif kind == "faction":
            faction_id = requirement_data.get("faction_id", value)
            if faction_id is None:
                raise ValueError("faction requirement without faction id")
            # Legacy form keeps the threshold in "quantity"
            reputation = requirement_data.get("reputation", requirement_data.get("quantity", 0))
            return FactionRequirement(faction_id=str(faction_id), reputation=reputation)
    except (TypeError, ValueError):
        return UnknownRequirement(kind=f"malformed {kind}")

    return UnknownRequirement(kind=str(kind))


def _parse_reward(reward_data: Dict[str, Any]) -> Reward:
    return Reward(
        experience=reward_data.get("experience", 0),
        gold=reward_data.get("gold", 0),
        essence=reward_data.get("essence", 0),
        items=[
            RewardItem(id=item["id"], quantity=item.get("quantity", 1), name=item.get("name", ""))
            for item in reward_data.get("items", [])
        ],
        reputation=dict(reward_data.get("reputation", {})),
    )


def load_into_store(store, catalog_path: str) -> int:
    """Load a catalog file and register every quest in a QuestStore.

    Returns:
        Number of quests registered
    """
    count = 0
    for quest, available in load_quests(catalog_path):
        if store.add_quest(quest, available=available):
            count += 1
    return count
