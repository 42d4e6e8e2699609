# chatterlite/domain/reactions.py
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any


@dataclass
class ReactionSummary:
    emoji: str
    count: int = 0
    users: list[str] = field(default_factory=list)


def _field(row: Any, name: str) -> Any:
    if isinstance(row, dict):
        return row[name]
    return getattr(row, name)


def aggregate_reactions(rows: Iterable[Any]) -> list[ReactionSummary]:
    """Fold raw reaction rows into one summary per emoji.

    Rows may be mappings or objects exposing ``emoji`` and ``user_id``.
    Emoji are compared as exact strings, so skin-tone and variation
    selectors produce separate groups. Groups come out in first-seen order
    and each group lists its users in insertion order. A repeated
    (user, emoji) pair is counted once.
    """
    grouped: dict[str, ReactionSummary] = {}
    for row in rows:
        emoji = _field(row, "emoji")
        user_id = _field(row, "user_id")
        summary = grouped.setdefault(emoji, ReactionSummary(emoji=emoji))
        if user_id in summary.users:
            continue
        summary.count += 1
        summary.users.append(user_id)
    return list(grouped.values())
