import json

import pytest

from bjthelper.friend.messages import (
    ADD_FRIEND_KEY,
    ADD_FRIEND_REPLY_KEY,
    DEL_FRIEND_KEY,
    FRIEND_INFO_KEY,
    FriendMsg,
    FriendMsgId,
    FriendMsgModel,
)


def test_model_wire_form():
    assert FriendMsgModel("abc").to_json() == '{"key":"abc"}'


def test_model_round_trip():
    model = FriendMsgModel("玩家01")
    assert FriendMsgModel.from_dict(json.loads(model.to_json())) == model


def test_model_from_dict_missing_key():
    assert FriendMsgModel.from_dict({}).user_key == ""


@pytest.mark.parametrize(
    "value, member",
    [
        (0, FriendMsgId.DEFAULT),
        (1, FriendMsgId.ADD_FRIEND),
        (2, FriendMsgId.ADD_FRIEND_REPLY),
        (3, FriendMsgId.DEL_FRIEND),
    ],
)
def test_message_ids(value, member):
    assert FriendMsgId(value) is member


def test_unknown_message_id_rejected():
    with pytest.raises(ValueError):
        FriendMsgId(100)


@pytest.mark.parametrize(
    "fmt, expected",
    [
        (FRIEND_INFO_KEY, "FriendInfo_u1"),
        (ADD_FRIEND_KEY, "AddFriend_u1"),
        (ADD_FRIEND_REPLY_KEY, "AddFriendReply_u1"),
        (DEL_FRIEND_KEY, "DelFriend_u1"),
    ],
)
def test_key_formats(fmt, expected):
    assert fmt % "u1" == expected


def test_friend_msg_holds_payload():
    payload = FriendMsgModel("k")
    msg = FriendMsg(FriendMsgId.ADD_FRIEND, "target", payload)
    assert (msg.msg_id, msg.open_id, msg.data.to_json()) == (
        FriendMsgId.ADD_FRIEND,
        "target",
        payload.to_json(),
    )