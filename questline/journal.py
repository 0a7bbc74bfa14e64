"""Quest journal: the append-only audit log of quest lifecycle events.

Entries are created here and appended by the store. After creation an entry
only ever changes its ``read`` flag.
"""

import time
import uuid
from datetime import datetime
from typing import List

from .model import QuestLogEntry

LOG_TYPES = ("start", "progress", "complete", "fail")


def create_log_entry(quest_id: str, message: str, entry_type: str, timestamp: float = None) -> QuestLogEntry:
    """Create a new unread log entry.

    Args:
        quest_id: Quest the entry belongs to
        message: Text shown to the player
        entry_type: One of "start", "progress", "complete", "fail"
        timestamp: Epoch seconds; defaults to now

    Returns:
        The new QuestLogEntry

    Raises:
        ValueError: If entry_type is not a known log type
    """
    if entry_type not in LOG_TYPES:
        raise ValueError(f"Unknown log entry type: {entry_type}")
    return QuestLogEntry(
        id=uuid.uuid4().hex,
        timestamp=time.time() if timestamp is None else timestamp,
        quest_id=quest_id,
        message=message,
        type=entry_type,
        read=False,
    )


def get_recent_entries(log: List[QuestLogEntry], limit: int = 5) -> List[QuestLogEntry]:
    """Most recent entries first."""
    return sorted(log, key=lambda entry: entry.timestamp, reverse=True)[:limit]


def format_entry(entry: QuestLogEntry) -> str:
    """Format a log entry as a single display line."""
    stamp = datetime.fromtimestamp(entry.timestamp).strftime("%Y-%m-%d %H:%M")
    marker = " " if entry.read else "*"
    return f"{marker}[{stamp} | {entry.type}] {entry.message}"
