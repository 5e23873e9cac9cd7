"""A player's friend list and pending friend requests."""

from __future__ import annotations

import json
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

__all__ = ["FriendRecord", "UserFriend", "new_friend", "scan_friends"]


def _dumps(obj: Any) -> str:
    return json.dumps(obj, separators=(",", ":"), ensure_ascii=False)


@dataclass
class FriendRecord:
    """One friend, known by the friend's user key."""

    user_key: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"key": self.user_key}


def new_friend(key: str) -> FriendRecord:
    """A new friend entry for *key*."""
    return FriendRecord(user_key=key)


def scan_friends(text: str | bytes) -> dict[str, FriendRecord]:
    """Load stored friends keyed by user key; unreadable input gives none."""
    try:
        raw = json.loads(text or "null")
    except ValueError:
        return {}
    if not isinstance(raw, dict):
        return {}
    return {
        key: FriendRecord(user_key=str(value.get("key", "")))
        for key, value in raw.items()
        if isinstance(value, dict)
    }


@dataclass
class UserFriend:
    """Friends (by user key) and keys of players who asked to be friends."""

    items: dict[str, Any] = field(default_factory=dict)
    add_list: dict[str, str] = field(default_factory=dict)

    def to_json(self) -> str:
        """The stored form: friends and requests as two nested objects."""
        payload = {
            "AddList": {key: self.add_list[key] for key in sorted(self.add_list)},
            "Items": {key: self.items[key].to_dict() for key in sorted(self.items)},
        }
        return _dumps(payload)

    @classmethod
    def from_json(
        cls,
        data: str | bytes,
        scan: Callable[[str], dict[str, Any]] | None = None,
    ) -> UserFriend:
        """Load a stored friend list; *scan* turns the stored friends into records."""
        scan = scan or scan_friends
        if isinstance(data, (bytes, bytearray)):
            data = bytes(data).decode("utf-8")
        result = cls()
        try:
            raw = json.loads(data or "{}")
        except ValueError:
            raw = {}
        if not isinstance(raw, dict):
            raw = {}
        if "Items" in raw:
            result.items = dict(scan(json.dumps(raw["Items"])))
        add = raw.get("AddList")
        if add is None:
            return result
        if not isinstance(add, dict) or not all(isinstance(v, str) for v in add.values()):
            raise ValueError("AddList must map user keys to strings")
        result.add_list = dict(add)
        return result

    def add_friend_keys(self) -> list[str]:
        """Keys of players waiting for an answer to their request."""
        return list(self.add_list)

    def friend_keys(self) -> list[str]:
        """Keys of all friends."""
        return list(self.items)