import json
from collections import Counter
from dataclasses import dataclass
from datetime import datetime, timezone

import pytest

from bjthelper.friend.user import UserFriend
from bjthelper.gifts import (
    EPOCH,
    GIFT_KEY,
    GIFT_MSG_ID,
    GiftFriend,
    GiftModel,
    collect_friend_gifts,
    new_gift_friend,
    new_gift_manager,
    scan_gift_friends,
    send_friend_gift,
    send_friends_gift,
    set_friend_gift,
)
from bjthelper.tables import ItemInfo


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


@dataclass
class User:
    redis_key: str


@pytest.fixture
def store():
    return FakeStore()


def test_gift_model_json():
    assert GiftModel("alice").to_json() == '{"key":"alice"}'
    assert GiftModel.from_dict({"key": "bob"}) == GiftModel("bob")


def test_new_gift_friend_defaults():
    record = new_gift_friend("alice")
    assert record.user_key == "alice"
    assert record.send_time == EPOCH
    assert record.is_gift is False


def test_gift_friend_stored_form():
    data = new_gift_friend("alice").to_dict()
    assert data == {"key": "alice", "sdt": "1970-01-01T00:00:00Z", "isgift": False}


def test_user_friend_round_trip_with_gift_friends():
    stamp = datetime(2021, 3, 4, 5, 6, 7, 123456, tzinfo=timezone.utc)
    friends = UserFriend(
        items={"a": GiftFriend("a", stamp, True), "b": new_gift_friend("b")},
        add_list={"c": "1"},
    )
    loaded = UserFriend.from_json(friends.to_json(), scan_gift_friends)
    assert loaded.items == friends.items
    assert loaded.add_list == friends.add_list


def test_scan_gift_friends_bad_input():
    assert scan_gift_friends("not json") == {}
    assert scan_gift_friends("") == {}


def test_send_friend_gift_skipped_when_not_sent_today(store):
    manager = new_gift_manager(store)
    record = new_gift_friend("bob")
    with manager:
        assert send_friend_gift(manager, User("alice"), record) == []
    assert record.send_time == EPOCH
    assert (GIFT_KEY % "bob") not in store.data


def test_gift_delivered_and_marked(store):
    manager = new_gift_manager(store)
    alice, bob = User("alice"), User("bob")
    to_bob = GiftFriend("bob", datetime.now(timezone.utc), False)
    with manager:
        assert send_friend_gift(manager, alice, to_bob) == ["bob"]
    assert json.loads("[" + store.data[GIFT_KEY % "bob"][:-1] + "]") == [{"key": "alice"}]

    bob_friends = UserFriend(items={"alice": new_gift_friend("alice")})
    set_friend_gift(manager, bob, bob_friends)
    assert bob_friends.items["alice"].is_gift is True
    assert manager.get_data(bob, GIFT_MSG_ID) == []


def test_gift_from_stranger_is_ignored(store):
    manager = new_gift_manager(store)
    store.append(GIFT_KEY % "bob", GiftModel("mallory").to_json() + ",")
    friends = UserFriend(items={"alice": new_gift_friend("alice")})
    set_friend_gift(manager, User("bob"), friends)
    assert friends.items["alice"].is_gift is False
    assert "mallory" not in friends.items


def test_send_friends_gift_only_today(store):
    manager = new_gift_manager(store)
    friends = UserFriend(
        items={
            "recent": GiftFriend("recent", datetime.now(timezone.utc), False),
            "old": new_gift_friend("old"),
        }
    )
    with manager:
        sent = send_friends_gift(manager, User("alice"), friends)
    assert sent == ["recent"]
    assert (GIFT_KEY % "recent") in store.data
    assert (GIFT_KEY % "old") not in store.data


def test_collect_friend_gifts_sums_and_clears(store):
    manager = new_gift_manager(store)
    store.append(GIFT_KEY % "bob", GiftModel("carol").to_json() + ",")
    friends = UserFriend(
        items={
            "alice": GiftFriend("alice", EPOCH, True),
            "carol": new_gift_friend("carol"),
            "dave": new_gift_friend("dave"),
        }
    )
    total = collect_friend_gifts(manager, User("bob"), friends, [ItemInfo(1, 5), ItemInfo(2, 1)])
    assert total == Counter({1: 10, 2: 2})
    assert all(not record.is_gift for record in friends.items.values())


def test_collect_without_gifts_is_empty(store):
    manager = new_gift_manager(store)
    friends = UserFriend(items={"alice": new_gift_friend("alice")})
    assert collect_friend_gifts(manager, User("bob"), friends, [ItemInfo(1, 5)]) == Counter()