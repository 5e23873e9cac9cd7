"""Friend-system messages passed between players through a shared store."""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass
from enum import IntEnum
from typing import Any

__all__ = [
    "FRIEND_INFO_KEY",
    "ADD_FRIEND_KEY",
    "ADD_FRIEND_REPLY_KEY",
    "DEL_FRIEND_KEY",
    "FriendMsgId",
    "FriendMsgModel",
    "FriendMsg",
]

#: Store key of a player's public friend-visit data.
FRIEND_INFO_KEY = "FriendInfo_%s"
#: Store key of pending friend requests for a player.
ADD_FRIEND_KEY = "AddFriend_%s"
#: Store key of accepted friend requests for a player.
ADD_FRIEND_REPLY_KEY = "AddFriendReply_%s"
#: Store key of friendships a player lost.
DEL_FRIEND_KEY = "DelFriend_%s"


class FriendMsgId(IntEnum):
    """Built-in message ids; games may register further ids of their own."""

    DEFAULT = 0
    ADD_FRIEND = 1
    ADD_FRIEND_REPLY = 2
    DEL_FRIEND = 3


def _dumps(obj: Any) -> str:
    return json.dumps(obj, separators=(",", ":"), ensure_ascii=False)


@dataclass
class FriendMsgModel:
    """Payload of the built-in messages: the key of the player who sent it."""

    user_key: str = ""

    def to_json(self) -> str:
        return _dumps({"key": self.user_key})

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> FriendMsgModel:
        return cls(user_key=str(data.get("key", "")))


@dataclass
class FriendMsg:
    """A message addressed to one player."""

    msg_id: int
    open_id: str
    data: Any