"""Asynchronous delivery of friend messages through a shared key-value store."""

from __future__ import annotations

import json
import logging
import queue
import threading
from collections.abc import Callable, Mapping
from typing import Any, Protocol

from .messages import (
    ADD_FRIEND_KEY,
    ADD_FRIEND_REPLY_KEY,
    DEL_FRIEND_KEY,
    FRIEND_INFO_KEY,
    FriendMsg,
    FriendMsgId,
    FriendMsgModel,
)
from .user import UserFriend, new_friend, scan_friends

__all__ = ["FriendManager", "append_message", "take_messages", "COMPACT_LIMIT"]

log = logging.getLogger(__name__)

#: Once a message list grows past this length, duplicate senders are merged.
COMPACT_LIMIT = 4000

_QUEUE_SIZE = 1024
_STOP = object()


class _Store(Protocol):
    def append(self, key: str, value: str) -> int: ...

    def getset(self, key: str, value: str) -> Any: ...

    def get(self, key: str) -> Any: ...

    def set(self, key: str, value: str) -> Any: ...


Handler = Callable[[Any, FriendMsg], None]
Getter = Callable[[Any, Any], list]


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8")
    return str(value)


def _parse_list(text: str, parse: Callable[[Mapping[str, Any]], Any]) -> list:
    try:
        raw = json.loads(f"[{text[:-1]}]")
    except ValueError:
        return []
    return [parse(item) for item in raw if isinstance(item, dict)]


def append_message(
    store: _Store,
    msg: FriendMsg,
    key_format: str,
    parse: Callable[[Mapping[str, Any]], Any],
) -> None:
    """Append a message to its receiver's list, merging senders when it grows long."""
    key = key_format % msg.open_id
    length = store.append(key, msg.data.to_json() + ",")
    if length <= COMPACT_LIMIT:
        return
    text = _text(store.getset(key, ""))
    if not text:
        return
    latest = {item.user_key: item for item in _parse_list(text, parse)}
    store.append(key, "".join(item.to_json() + "," for item in latest.values()))


def take_messages(
    store: _Store,
    user_key: str,
    key_format: str,
    parse: Callable[[Mapping[str, Any]], Any],
) -> list:
    """Read and clear the messages waiting for *user_key*."""
    text = _text(store.getset(key_format % user_key, ""))
    if not text:
        return []
    return _parse_list(text, parse)


def _pair(key_format: str) -> tuple[Handler, Getter]:
    def handler(store: _Store, msg: FriendMsg) -> None:
        append_message(store, msg, key_format, FriendMsgModel.from_dict)

    def getter(store: _Store, user: Any) -> list:
        return take_messages(store, user.redis_key, key_format, FriendMsgModel.from_dict)

    return handler, getter


class FriendManager:
    """Queues friend messages and writes them to the store on a worker thread.

    Users are objects with a ``redis_key`` attribute.
    """

    def __init__(
        self,
        store: _Store,
        new_friend: Callable[[str], Any] = new_friend,
        scan: Callable[[str], dict[str, Any]] = scan_friends,
    ) -> None:
        self.store = store
        self.new_friend = new_friend
        self.scan = scan
        self._handlers: dict[int, Handler] = {}
        self._getters: dict[int, Getter] = {}
        self._queue: queue.Queue = queue.Queue(maxsize=_QUEUE_SIZE)
        self._thread: threading.Thread | None = None
        for msg_id, key_format in (
            (FriendMsgId.ADD_FRIEND, ADD_FRIEND_KEY),
            (FriendMsgId.ADD_FRIEND_REPLY, ADD_FRIEND_REPLY_KEY),
            (FriendMsgId.DEL_FRIEND, DEL_FRIEND_KEY),
        ):
            self.register(msg_id, *_pair(key_format))

    def register(self, msg_id: int, handler: Handler, getter: Getter) -> None:
        """Set how messages with *msg_id* are written and read back."""
        self._handlers[msg_id] = handler
        self._getters[msg_id] = getter

    # ------------------------------------------------------------ worker

    def start(self) -> None:
        """Start writing queued messages in the background."""
        if self._thread is not None:
            raise RuntimeError("friend manager already started")
        self._thread = threading.Thread(target=self._run, name="friend-manager", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        """Write every message queued so far, then stop the worker."""
        if self._thread is None:
            return
        self._queue.put(_STOP)
        self._thread.join()
        self._thread = None

    def __enter__(self) -> FriendManager:
        self.start()
        return self

    def __exit__(self, *exc: object) -> None:
        self.stop()

    def _run(self) -> None:
        while True:
            msg = self._queue.get()
            if msg is _STOP:
                return
            self._dispatch(msg)

    def _dispatch(self, msg: FriendMsg) -> None:
        handler = self._handlers.get(msg.msg_id)
        if handler is None:
            log.info("friend message id %s is not registered", msg.msg_id)
            return
        try:
            handler(self.store, msg)
        except Exception:
            log.exception("friend message %s for %s failed", msg.msg_id, msg.open_id)

    # ------------------------------------------------------------ messages

    def send_msg(self, open_id: str, msg_id: int, data: Any) -> None:
        """Queue a message for the player *open_id*."""
        self._queue.put(FriendMsg(msg_id, open_id, data))

    def get_data(self, user: Any, msg_id: int) -> list:
        """Read and clear the messages of kind *msg_id* waiting for *user*."""
        getter = self._getters.get(msg_id)
        if getter is None:
            raise KeyError(f"friend message id {msg_id} is not registered")
        return getter(self.store, user)

    def friend_add(self, user: Any, other_open_id: str) -> None:
        """Ask *other_open_id* to become a friend of *user*."""
        self.send_msg(other_open_id, FriendMsgId.ADD_FRIEND, FriendMsgModel(user.redis_key))

    def friend_add_reply(self, user: Any, other_open_id: str) -> None:
        """Tell *other_open_id* that *user* accepted the request."""
        self.send_msg(
            other_open_id, FriendMsgId.ADD_FRIEND_REPLY, FriendMsgModel(user.redis_key)
        )

    def friend_del(self, user: Any, other_open_id: str) -> None:
        """Tell *other_open_id* that *user* ended the friendship."""
        self.send_msg(other_open_id, FriendMsgId.DEL_FRIEND, FriendMsgModel(user.redis_key))

    def get_friend_info(self, open_id: str) -> str:
        """The public data friends see when visiting *open_id*; empty if unset."""
        return _text(self.store.get(FRIEND_INFO_KEY % open_id))

    def set_friend_info(self, open_id: str, data: str) -> None:
        self.store.set(FRIEND_INFO_KEY % open_id, data)

    def set_user_friend(self, user: Any, friends: UserFriend) -> None:
        """Apply the requests, acceptances and removals waiting for *user*."""
        requests = self.get_data(user, FriendMsgId.ADD_FRIEND)
        accepted = self.get_data(user, FriendMsgId.ADD_FRIEND_REPLY)
        removed = self.get_data(user, FriendMsgId.DEL_FRIEND)
        for msg in requests:
            friends.add_list[msg.user_key] = "1"
        for msg in accepted:
            if msg.user_key not in friends.items:
                record = self.new_friend(msg.user_key)
                friends.items[record.user_key] = record
            friends.add_list.pop(msg.user_key, None)
        for msg in removed:
            friends.items.pop(msg.user_key, None)