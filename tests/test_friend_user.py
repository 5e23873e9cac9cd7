import json

import pytest

from bjthelper.friend.user import FriendRecord, UserFriend, new_friend, scan_friends


def test_friend_record_dict_from_source_case():
    assert FriendRecord("userabckey").to_dict() == {"key": "userabckey"}


def test_nested_raw_json_round_trip_from_source_case():
    friends = UserFriend(items={"abc": new_friend("userabckey")})
    text = friends.to_json()
    assert '"abc":{"key":"userabckey"}' in text
    loaded = UserFriend.from_json(text)
    assert loaded.items == {"abc": FriendRecord("userabckey")}
    assert loaded.to_json() == text


def test_new_friend_key():
    assert new_friend("k1").user_key == "k1"


def test_empty_list_round_trip():
    loaded = UserFriend.from_json(UserFriend().to_json())
    assert loaded == UserFriend()


def test_empty_bytes_give_empty_list():
    loaded = UserFriend.from_json(b"")
    assert (loaded.items, loaded.add_list) == ({}, {})


def test_add_list_loaded():
    text = json.dumps({"Items": {}, "AddList": {"p1": "1", "p2": "1"}})
    loaded = UserFriend.from_json(text)
    assert sorted(loaded.add_friend_keys()) == ["p1", "p2"]


def test_bad_add_list_raises():
    with pytest.raises(ValueError):
        UserFriend.from_json(json.dumps({"AddList": {"p1": 1}}))


def test_invalid_outer_json_gives_empty_list():
    loaded = UserFriend.from_json("not json")
    assert loaded == UserFriend()


def test_custom_scan_used():
    seen = []

    def scan(text):
        seen.append(json.loads(text))
        return {"x": FriendRecord("x")}

    loaded = UserFriend.from_json(json.dumps({"Items": {"a": {"key": "a"}}}), scan)
    assert seen == [{"a": {"key": "a"}}]
    assert loaded.friend_keys() == ["x"]


def test_friend_keys():
    friends = UserFriend(items={"a": new_friend("a"), "b": new_friend("b")})
    assert sorted(friends.friend_keys()) == ["a", "b"]


def test_scan_friends_reads_records():
    assert scan_friends('{"a":{"key":"a"}}') == {"a": FriendRecord("a")}


@pytest.mark.parametrize("text", ["", "null", "[1,2]", "garbage"])
def test_scan_friends_unreadable(text):
    assert scan_friends(text) == {}