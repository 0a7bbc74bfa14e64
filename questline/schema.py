"""JSON schema for quest catalog files.

Defines the structure a quest catalog must follow before the loader turns
it into Quest objects. Requirement entries only need a ``type``; unknown
kinds are accepted here and fail closed at evaluation time.
"""

from .model import OBJECTIVE_TYPES, QUEST_CATEGORIES

OBJECTIVE_SCHEMA = {
    "type": "object",
    "required": ["id", "type", "target"],
    "properties": {
        "id": {"type": "string", "minLength": 1},
        "type": {"type": "string", "enum": list(OBJECTIVE_TYPES)},
        "target": {"type": "string", "minLength": 1},
        "target_count": {"type": "integer", "minimum": 1, "default": 1},
        "description": {"type": "string"},
        "location": {"type": ["string", "null"]}
    },
    "additionalProperties": False
}

REQUIREMENT_SCHEMA = {
    "type": "object",
    "required": ["type"],
    "properties": {
        "type": {"type": "string", "minLength": 1},
        "value": {"type": ["string", "integer"]},  # legacy single-value form
        "level": {"type": "integer", "minimum": 0},
        "quest_id": {"type": "string"},
        "item_id": {"type": "string"},
        "quantity": {"type": "integer", "minimum": 0},
        "skill_id": {"type": "string"},
        "skill_level": {"type": "integer", "minimum": 0},
        "faction_id": {"type": "string"},
        "reputation": {"type": "integer"}
    }
}

REWARD_SCHEMA = {
    "type": "object",
    "properties": {
        "experience": {"type": "integer", "minimum": 0},
        "gold": {"type": "integer", "minimum": 0},
        "essence": {"type": "integer", "minimum": 0},
        "items": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["id"],
                "properties": {
                    "id": {"type": "string", "minLength": 1},
                    "quantity": {"type": "integer", "minimum": 1, "default": 1},
                    "name": {"type": "string"}
                }
            }
        },
        "reputation": {"type": "object", "additionalProperties": {"type": "integer"}}
    },
    "additionalProperties": False
}

QUEST_SCHEMA = {
    "type": "object",
    "required": ["id", "title"],
    "properties": {
        "id": {"type": "string", "minLength": 1},
        "title": {"type": "string", "minLength": 1},
        "description": {"type": "string"},
        "giver": {"type": ["string", "null"]},
        "location": {"type": ["string", "null"]},
        "category": {"type": "string", "enum": list(QUEST_CATEGORIES)},
        "difficulty": {"type": "string", "enum": ["easy", "normal", "hard", "epic"]},
        "is_story": {"type": "boolean"},
        "is_repeatable": {"type": "boolean"},
        "objectives": {"type": "array", "items": OBJECTIVE_SCHEMA},
        "requirements": {"type": "array", "items": REQUIREMENT_SCHEMA},
        "reward": REWARD_SCHEMA,
        "unlocks": {"type": "array", "items": {"type": "string"}},
        "time_limit": {"type": ["number", "null"], "exclusiveMinimum": 0},
        "faction_id": {"type": ["string", "null"]},
        "available": {"type": "boolean", "default": True}
    },
    "additionalProperties": False
}

QUEST_CATALOG_SCHEMA = {
    "type": "object",
    "required": ["quests"],
    "properties": {
        "quests": {"type": "array", "items": QUEST_SCHEMA}
    }
}
