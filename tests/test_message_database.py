import pytest

from messaging_toolkit.conversation_database.data_models.message import Message, derive_message_id, latest
from messaging_toolkit.conversation_database.kv import KVMessageDatabase


def dm(sender: str, recipient: str, timestamp: int, text: str = "hi") -> Message:
    return Message(
        id=derive_message_id(sender, recipient, timestamp),
        from_user_id=sender,
        to_user_id=recipient,
        text=text,
        timestamp=timestamp,
    )


def group_message(sender: str, group_id: str, timestamp: int, text: str = "hello all") -> Message:
    return Message(
        id=derive_message_id(sender, group_id, timestamp),
        from_user_id=sender,
        group_id=group_id,
        text=text,
        timestamp=timestamp,
    )


def test_message_requires_exactly_one_target():
    with pytest.raises(ValueError):
        Message(id="x", from_user_id="u1", text="t", timestamp=1)
    with pytest.raises(ValueError):
        Message(id="x", from_user_id="u1", to_user_id="u2", group_id="group_1", text="t", timestamp=1)


def test_message_is_stored_with_camel_case_keys():
    assert dm("u1", "u2", 1000).to_store() == {
        "id": "u1:u2:1000",
        "fromUserId": "u1",
        "toUserId": "u2",
        "groupId": None,
        "text": "hi",
        "timestamp": 1000,
    }


async def test_list_for_direct_is_symmetric_and_sorted(message_db: KVMessageDatabase):
    await message_db.append(dm("u2", "u1", 3000, "third"))
    await message_db.append(dm("u1", "u2", 1000, "first"))
    await message_db.append(dm("u1", "u3", 1500, "other pair"))
    await message_db.append(dm("u2", "u1", 2000, "second"))

    forward = await message_db.list_for_direct("u1", "u2")
    backward = await message_db.list_for_direct("u2", "u1")

    assert [m.text for m in forward] == ["first", "second", "third"]
    assert forward == backward


async def test_list_for_group_only_returns_that_group(message_db: KVMessageDatabase):
    await message_db.append(group_message("u1", "group_a", 20, "later"))
    await message_db.append(group_message("u2", "group_a", 10, "earlier"))
    await message_db.append(group_message("u1", "group_b", 15))
    await message_db.append(dm("u1", "u2", 5))

    assert [m.text for m in await message_db.list_for_group("group_a")] == ["earlier", "later"]


async def test_append_overwrites_same_id(message_db: KVMessageDatabase):
    await message_db.append(dm("u1", "u2", 1000, "first"))
    await message_db.append(dm("u1", "u2", 1000, "second"))

    messages = await message_db.list_all()
    assert [m.text for m in messages] == ["second"]


async def test_delete_all_for_user_keeps_group_messages(message_db: KVMessageDatabase):
    await message_db.append(dm("u1", "u2", 1))
    await message_db.append(dm("u3", "u1", 2))
    await message_db.append(dm("u2", "u3", 3))
    await message_db.append(group_message("u1", "group_a", 4))

    assert await message_db.delete_all_for_user("u1") == 2

    remaining = await message_db.list_all()
    assert sorted(m.id for m in remaining) == ["u1:group_a:4", "u2:u3:3"]


async def test_delete_all_for_group(message_db: KVMessageDatabase):
    await message_db.append(group_message("u1", "group_a", 1))
    await message_db.append(group_message("u2", "group_a", 2))
    await message_db.append(group_message("u1", "group_b", 3))

    assert await message_db.delete_all_for_group("group_a") == 2
    assert await message_db.list_for_group("group_a") == []
    assert len(await message_db.list_for_group("group_b")) == 1


def test_latest_picks_greatest_timestamp():
    messages = [dm("u1", "u2", 5, "mid"), dm("u1", "u2", 9, "last"), dm("u1", "u2", 1, "first")]

    assert latest(messages).text == "last"
    assert latest([]) is None
