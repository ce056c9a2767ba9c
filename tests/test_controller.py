import pytest

from conftest import FakeClock, identity
from messaging_toolkit.conversation_database.controller import (
    AccountDeletionInput,
    CreateGroupInput,
    MessagingController,
    PasswordChangeInput,
    PasswordResetInput,
    ProfileInput,
    SendMessageInput,
    SignupInput,
)
from messaging_toolkit.conversation_database.data_models.user import User
from messaging_toolkit.errors import BadRequest, NotFound
from messaging_toolkit.identity.base import Identity


async def register(controller: MessagingController, name: str, password: str = "secret1") -> Identity:
    signup = SignupInput(email=f"{name.lower()}@example.com", password=password, name=name)
    user = await controller.register_user(signup)
    return Identity(id=user.id, email=user.email)


@pytest.mark.parametrize(
    "signup",
    [
        SignupInput(password="secret1", name="Alice"),
        SignupInput(email="alice@example.com", name="Alice"),
        SignupInput(email="alice@example.com", password="secret1", name=""),
    ],
)
async def test_register_user_requires_every_field(controller: MessagingController, signup: SignupInput):
    with pytest.raises(BadRequest, match="Email, password, and name are required"):
        await controller.register_user(signup)


async def test_register_user_creates_profile(controller: MessagingController):
    alice = await register(controller, "Alice")

    user = await controller.get_user(alice.id)
    assert user.name == "Alice"
    assert user.email == "alice@example.com"


async def test_get_unknown_user(controller: MessagingController):
    with pytest.raises(NotFound, match="User not found"):
        await controller.get_user("ghost")


async def test_list_contacts_excludes_caller(controller: MessagingController):
    alice = await register(controller, "Alice")
    bob = await register(controller, "Bob")

    assert [user.id for user in await controller.list_contacts(alice)] == [bob.id]


async def test_send_direct_message_updates_both_peer_sets(controller: MessagingController):
    message = await controller.send_message(identity("u1"), SendMessageInput(to_user_id="u2", text="hi"))

    assert message.id == "u1:u2:1000"
    assert message.timestamp == 1000
    assert await controller.conversation_index.list_peers("u1") == ["u2"]
    assert await controller.conversation_index.list_peers("u2") == ["u1"]


async def test_same_millisecond_messages_get_distinct_ids(controller: MessagingController):
    first = await controller.send_message(identity("u1"), SendMessageInput(to_user_id="u2", text="one"))
    second = await controller.send_message(identity("u1"), SendMessageInput(to_user_id="u2", text="two"))
    third = await controller.send_message(identity("u1"), SendMessageInput(to_user_id="u2", text="three"))

    assert [first.id, second.id, third.id] == ["u1:u2:1000", "u1:u2:1000:1", "u1:u2:1000:2"]
    assert len(await controller.get_messages(identity("u2"), "u1")) == 3


@pytest.mark.parametrize(
    "message_input, error",
    [
        (SendMessageInput(text="hi"), "Recipient/group and message text are required"),
        (SendMessageInput(to_user_id="u2", text=""), "Recipient/group and message text are required"),
        (SendMessageInput(to_user_id="u2", group_id="group_1_x", text="hi"), "not both"),
    ],
)
async def test_send_message_validation(controller: MessagingController, message_input, error):
    with pytest.raises(BadRequest, match=error):
        await controller.send_message(identity("u1"), message_input)


async def test_group_message_does_not_touch_peer_sets(controller: MessagingController):
    group = await controller.create_group(identity("u1"), CreateGroupInput(name="Team", member_ids=["u2"]))

    message = await controller.send_message(identity("u1"), SendMessageInput(group_id=group.id, text="hello"))

    assert message.id == f"u1:{group.id}:1000"
    assert await controller.conversation_index.list_peers("u1") == []
    assert [m.text for m in await controller.get_messages(identity("u2"), group.id)] == ["hello"]


async def test_create_group_requires_name_and_members(controller: MessagingController):
    with pytest.raises(BadRequest, match="Group name and members are required"):
        await controller.create_group(identity("u1"), CreateGroupInput(name="Team"))


async def test_get_messages_returns_direct_history_in_order(controller: MessagingController, clock: FakeClock):
    await controller.send_message(identity("u1"), SendMessageInput(to_user_id="u2", text="hi"))
    clock.now = 2000
    await controller.send_message(identity("u2"), SendMessageInput(to_user_id="u1", text="hey"))
    await controller.send_message(identity("u1"), SendMessageInput(to_user_id="u3", text="other"))

    history = await controller.get_messages(identity("u1"), "u2")

    assert [(m.from_user_id, m.text) for m in history] == [("u1", "hi"), ("u2", "hey")]


async def test_conversations_are_sorted_and_skip_dangling_references(
    controller: MessagingController, clock: FakeClock
):
    alice = await register(controller, "Alice")
    bob = await register(controller, "Bob")
    carol = await register(controller, "Carol")

    await controller.send_message(alice, SendMessageInput(to_user_id=bob.id, text="hi bob"))
    clock.now = 3000
    group = await controller.create_group(alice, CreateGroupInput(name="Team", member_ids=[bob.id, carol.id]))
    await controller.send_message(carol, SendMessageInput(group_id=group.id, text="hello team"))
    clock.now = 4000
    await controller.send_message(alice, SendMessageInput(to_user_id="ghost", text="anyone?"))
    await controller.create_group(alice, CreateGroupInput(name="Quiet", member_ids=[]))

    conversations = await controller.list_conversations(alice)

    assert [(c.type, c.name, c.latest_message, c.timestamp) for c in conversations] == [
        ("group", "Team", "hello team", 3000),
        ("dm", "Bob", "hi bob", 1000),
        ("group", "Quiet", "", 0),
    ]
    assert conversations[0].member_count == 3
    assert conversations[1].email == "bob@example.com"


async def test_update_profile_renames_everywhere(controller: MessagingController):
    alice = await register(controller, "Alice")

    assert await controller.update_profile(alice, ProfileInput(name="  Alicia ")) == "Alicia"

    assert (await controller.get_user(alice.id)).name == "Alicia"
    assert {u.id: u.name for u in await controller.identity_provider.list_users()}[alice.id] == "Alicia"


async def test_update_profile_requires_name(controller: MessagingController):
    with pytest.raises(BadRequest, match="Name is required"):
        await controller.update_profile(identity("u1"), ProfileInput(name="   "))


@pytest.mark.parametrize(
    "change, error",
    [
        (PasswordChangeInput(current_password="secret1"), "Current password and new password are required"),
        (PasswordChangeInput(current_password="secret1", new_password="abc"), "at least 6 characters"),
        (PasswordChangeInput(current_password="wrong", new_password="secret2"), "Current password is incorrect"),
    ],
)
async def test_change_password_validation(controller: MessagingController, change, error):
    alice = await register(controller, "Alice")

    with pytest.raises(BadRequest, match=error):
        await controller.change_password(alice, change)


async def test_change_password(controller: MessagingController):
    alice = await register(controller, "Alice")

    await controller.change_password(alice, PasswordChangeInput(current_password="secret1", new_password="secret2"))

    assert await controller.identity_provider.verify_password(alice.email, "secret2")


async def test_password_reset_never_reveals_failures(controller: MessagingController, monkeypatch):
    async def broken(email):
        raise RuntimeError("mail server down")

    monkeypatch.setattr(controller.identity_provider, "request_password_reset", broken)

    assert await controller.request_password_reset(PasswordResetInput(email="alice@example.com")) is None
    with pytest.raises(BadRequest):
        await controller.request_password_reset(PasswordResetInput())


async def test_delete_account_requires_correct_password(controller: MessagingController):
    alice = await register(controller, "Alice")

    with pytest.raises(BadRequest, match="Password is required to delete account"):
        await controller.delete_account(alice, AccountDeletionInput())
    with pytest.raises(BadRequest, match="Password is incorrect"):
        await controller.delete_account(alice, AccountDeletionInput(password="wrong"))

    report = await controller.delete_account(alice, AccountDeletionInput(password="secret1"))

    assert report.target_id == alice.id
    assert await controller.user_db.get_user_by_id(alice.id) is None


async def test_user_db_profiles_are_camel_case(controller: MessagingController):
    await controller.user_db.create_user(User(id="u1", email="u1@example.com", name="One"))

    assert await controller.user_db.store.get("user:u1") == {"id": "u1", "email": "u1@example.com", "name": "One"}
