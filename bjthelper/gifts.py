"""Daily gifts between friends, carried by the friend message system."""

from __future__ import annotations

import json
import re
from collections import Counter
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from .friend.manager import FriendManager, append_message, take_messages
from .friend.messages import FriendMsg
from .friend.user import FriendRecord, UserFriend
from .tables import ItemInfo

__all__ = [
    "GIFT_MSG_ID",
    "SHOP_MSG_ID",
    "GIFT_KEY",
    "EPOCH",
    "GiftFriend",
    "GiftModel",
    "new_gift_friend",
    "scan_gift_friends",
    "new_gift_manager",
    "set_friend_gift",
    "collect_friend_gifts",
    "send_friends_gift",
    "send_friend_gift",
]

#: Message id of a gift.
GIFT_MSG_ID = 100
#: Message id reserved for the friend shop.
SHOP_MSG_ID = 101
#: Store key of the gifts waiting for a player.
GIFT_KEY = "bjtGift_%s"
#: The time a friend counts as last gifted before any gift was sent.
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

_FRACTION = re.compile(r"\.(\d+)")


def _dumps(obj: Any) -> str:
    return json.dumps(obj, separators=(",", ":"), ensure_ascii=False)


def _format_time(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.astimezone()
    text = value.isoformat()
    if text.endswith("+00:00"):
        text = text[: -len("+00:00")] + "Z"
    return text


def _parse_time(text: str) -> datetime:
    text = text.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    text = _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text, count=1)
    value = datetime.fromisoformat(text)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def _same_day(a: datetime, b: datetime) -> bool:
    """Whether two moments fall on the same local calendar day."""
    return a.astimezone().date() == b.astimezone().date()


@dataclass
class GiftFriend(FriendRecord):
    """A friend together with the gift bookkeeping."""

    send_time: datetime = field(default_factory=lambda: EPOCH)
    is_gift: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": self.user_key,
            "sdt": _format_time(self.send_time),
            "isgift": self.is_gift,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> GiftFriend:
        stamp = data.get("sdt")
        return cls(
            user_key=str(data.get("key", "")),
            send_time=_parse_time(stamp) if stamp else EPOCH,
            is_gift=bool(data.get("isgift", False)),
        )


@dataclass
class GiftModel:
    """A gift message: the key of the player who sent it."""

    user_key: str = ""

    def to_json(self) -> str:
        return _dumps({"key": self.user_key})

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> GiftModel:
        return cls(user_key=str(data.get("key", "")))


def new_gift_friend(key: str) -> GiftFriend:
    """A new friend entry that has neither sent nor received a gift."""
    return GiftFriend(user_key=key, send_time=EPOCH, is_gift=False)


def scan_gift_friends(text: str | bytes) -> dict[str, GiftFriend]:
    """Load stored friends keyed by user key; unreadable input gives none."""
    try:
        raw = json.loads(text or "null")
    except ValueError:
        return {}
    if not isinstance(raw, dict):
        return {}
    return {
        key: GiftFriend.from_dict(value)
        for key, value in raw.items()
        if isinstance(value, dict)
    }


def _gift_handler(store: Any, msg: FriendMsg) -> None:
    append_message(store, msg, GIFT_KEY, GiftModel.from_dict)


def _gift_getter(store: Any, user: Any) -> list:
    return take_messages(store, user.redis_key, GIFT_KEY, GiftModel.from_dict)


def new_gift_manager(store: Any) -> FriendManager:
    """A friend manager whose friends carry gift data and that delivers gifts."""
    manager = FriendManager(store, new_gift_friend, scan_gift_friends)
    manager.register(GIFT_MSG_ID, _gift_handler, _gift_getter)
    return manager


def set_friend_gift(manager: FriendManager, user: Any, friends: UserFriend) -> None:
    """Mark the friends whose gifts are waiting for *user*; gifts from strangers are dropped."""
    for gift in manager.get_data(user, GIFT_MSG_ID):
        record = friends.items.get(gift.user_key)
        if record is not None:
            record.is_gift = True


def collect_friend_gifts(
    manager: FriendManager,
    user: Any,
    friends: UserFriend,
    reward: Iterable[ItemInfo],
) -> Counter[int]:
    """Accept every waiting gift; each one is worth *reward*.

    Returns the total items by id and clears the gift marks.
    """
    per_gift: Counter[int] = Counter()
    for item in reward:
        per_gift[item.item_id] += item.count
    set_friend_gift(manager, user, friends)
    total: Counter[int] = Counter()
    for record in friends.items.values():
        if record.is_gift:
            record.is_gift = False
            total.update(per_gift)
    return total


def send_friend_gift(manager: FriendManager, user: Any, friend: GiftFriend) -> list[str]:
    """Send a gift to one friend.

    A gift goes out only when the friend was last sent one on the current
    day. Returns the keys of the friends a gift was sent to.
    """
    now = datetime.now(timezone.utc)
    if not _same_day(now, friend.send_time):
        return []
    friend.send_time = now
    manager.send_msg(friend.user_key, GIFT_MSG_ID, GiftModel(user.redis_key))
    return [friend.user_key]


def send_friends_gift(manager: FriendManager, user: Any, friends: UserFriend) -> list[str]:
    """Send gifts to every friend under the same rule as :func:`send_friend_gift`."""
    sent: list[str] = []
    for key, record in friends.items.items():
        if send_friend_gift(manager, user, record):
            sent.append(key)
    return sent