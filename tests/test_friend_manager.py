from dataclasses import dataclass

import pytest

from bjthelper.friend.manager import (
    COMPACT_LIMIT,
    FriendManager,
    append_message,
    take_messages,
)
from bjthelper.friend.messages import (
    ADD_FRIEND_KEY,
    FriendMsg,
    FriendMsgId,
    FriendMsgModel,
)
from bjthelper.friend.user import FriendRecord, UserFriend


class FakeStore:
    def __init__(self):
        self.data = {}

    def append(self, key, value):
        self.data[key] = self.data.get(key, "") + value
        return len(self.data[key])

    def getset(self, key, value):
        old = self.data.get(key)
        self.data[key] = value
        return old

    def get(self, key):
        return self.data.get(key)

    def set(self, key, value):
        self.data[key] = value


class BytesStore(FakeStore):
    def getset(self, key, value):
        old = super().getset(key, value)
        return None if old is None else old.encode("utf-8")

    def get(self, key):
        value = super().get(key)
        return None if value is None else value.encode("utf-8")


@dataclass
class User:
    redis_key: str


def test_append_message_wire_form():
    store = FakeStore()
    msg = FriendMsg(FriendMsgId.ADD_FRIEND, "bob", FriendMsgModel("alice"))
    append_message(store, msg, ADD_FRIEND_KEY, FriendMsgModel.from_dict)
    assert store.data[ADD_FRIEND_KEY % "bob"] == '{"key":"alice"},'


def test_take_messages_reads_and_clears():
    store = FakeStore()
    for sender in ("a", "b"):
        msg = FriendMsg(FriendMsgId.ADD_FRIEND, "bob", FriendMsgModel(sender))
        append_message(store, msg, ADD_FRIEND_KEY, FriendMsgModel.from_dict)
    taken = take_messages(store, "bob", ADD_FRIEND_KEY, FriendMsgModel.from_dict)
    assert taken == [FriendMsgModel("a"), FriendMsgModel("b")]
    assert take_messages(store, "bob", ADD_FRIEND_KEY, FriendMsgModel.from_dict) == []


def test_take_messages_missing_key():
    assert take_messages(FakeStore(), "x", ADD_FRIEND_KEY, FriendMsgModel.from_dict) == []


def test_long_list_is_compacted():
    store = FakeStore()
    entry = FriendMsgModel("a").to_json() + ","
    key = ADD_FRIEND_KEY % "bob"
    store.data[key] = entry * (COMPACT_LIMIT // len(entry) + 5)
    msg = FriendMsg(FriendMsgId.ADD_FRIEND, "bob", FriendMsgModel("b"))
    append_message(store, msg, ADD_FRIEND_KEY, FriendMsgModel.from_dict)
    assert len(store.data[key]) < COMPACT_LIMIT
    taken = take_messages(store, "bob", ADD_FRIEND_KEY, FriendMsgModel.from_dict)
    assert [m.user_key for m in taken] == ["a", "b"]


def test_messages_delivered_after_stop():
    store = FakeStore()
    manager = FriendManager(store)
    manager.start()
    manager.friend_add(User("alice"), "bob")
    manager.stop()
    assert manager.get_data(User("bob"), FriendMsgId.ADD_FRIEND) == [FriendMsgModel("alice")]


def test_context_manager_delivers():
    store = FakeStore()
    with FriendManager(store) as manager:
        manager.friend_del(User("alice"), "bob")
    assert manager.get_data(User("bob"), FriendMsgId.DEL_FRIEND) == [FriendMsgModel("alice")]


def test_start_twice_raises():
    manager = FriendManager(FakeStore())
    manager.start()
    try:
        with pytest.raises(RuntimeError):
            manager.start()
    finally:
        manager.stop()


def test_unregistered_message_ignored():
    store = FakeStore()
    manager = FriendManager(store)
    manager.start()
    manager.send_msg("bob", FriendMsgId.DEFAULT, FriendMsgModel("alice"))
    manager.stop()
    assert store.data == {}


def test_get_data_unknown_id_raises():
    with pytest.raises(KeyError):
        FriendManager(FakeStore()).get_data(User("bob"), 999)


def test_friend_flow():
    store = FakeStore()
    manager = FriendManager(store)
    alice, bob = User("alice"), User("bob")
    alice_friends, bob_friends = UserFriend(), UserFriend()

    manager.start()
    manager.friend_add(alice, "bob")
    manager.stop()
    manager.set_user_friend(bob, bob_friends)
    assert bob_friends.add_list == {"alice": "1"}

    manager.start()
    manager.friend_add_reply(bob, "alice")
    manager.stop()
    alice_friends.add_list["bob"] = "1"
    manager.set_user_friend(alice, alice_friends)
    assert alice_friends.items == {"bob": FriendRecord("bob")}
    assert alice_friends.add_list == {}

    manager.start()
    manager.friend_del(bob, "alice")
    manager.stop()
    manager.set_user_friend(alice, alice_friends)
    assert alice_friends.items == {}


def test_custom_new_friend_used():
    store = FakeStore()
    made = []

    def make(key):
        made.append(key)
        return FriendRecord(key)

    manager = FriendManager(store, new_friend=make)
    manager.start()
    manager.friend_add_reply(User("carol"), "dave")
    manager.stop()
    friends = UserFriend()
    manager.set_user_friend(User("dave"), friends)
    assert made == ["carol"]
    assert friends.friend_keys() == ["carol"]


def test_register_custom_message():
    store = FakeStore()
    manager = FriendManager(store)
    written = []
    manager.register(100, lambda s, msg: written.append(msg.open_id), lambda s, u: list(written))
    manager.start()
    manager.send_msg("erin", 100, FriendMsgModel("x"))
    manager.stop()
    assert manager.get_data(User("any"), 100) == ["erin"]


def test_friend_info_round_trip():
    manager = FriendManager(FakeStore())
    assert manager.get_friend_info("bob") == ""
    manager.set_friend_info("bob", "visit-data")
    assert manager.get_friend_info("bob") == "visit-data"


def test_bytes_from_store_decoded():
    store = BytesStore()
    manager = FriendManager(store)
    manager.set_friend_info("bob", "info")
    assert manager.get_friend_info("bob") == "info"
    manager.start()
    manager.friend_add(User("alice"), "bob")
    manager.stop()
    assert manager.get_data(User("bob"), FriendMsgId.ADD_FRIEND) == [FriendMsgModel("alice")]