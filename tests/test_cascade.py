import pytest

from messaging_toolkit.conversation_database.cascade import Cascade, CascadeError, user_deletion
from messaging_toolkit.conversation_database.controller import MessagingController
from messaging_toolkit.conversation_database.data_models.message import Message
from messaging_toolkit.conversation_database.data_models.user import User


class Flaky:
    """Step action that fails a given number of times before succeeding."""

    def __init__(self, failures: int = 0, result: object = None) -> None:
        self.failures = failures
        self.result = result
        self.calls = 0

    async def __call__(self) -> object:
        self.calls += 1
        if self.calls <= self.failures:
            raise RuntimeError("store unavailable")
        return self.result


def test_add_step_rejects_duplicate_names():
    cascade = Cascade("user", "u1").add_step("profile", Flaky())

    with pytest.raises(ValueError):
        cascade.add_step("profile", Flaky())


async def test_run_executes_steps_in_order():
    order = []

    def recording(name):
        async def action():
            order.append(name)
            return name.upper()

        return action

    cascade = Cascade("user", "u1").add_step("a", recording("a")).add_step("b", recording("b"))
    report = await cascade.run()

    assert order == ["a", "b"]
    assert report.completed == ["a", "b"]
    assert report.results == {"a": "A", "b": "B"}
    assert cascade.pending == []


async def test_run_stops_at_first_failure_and_resumes():
    first, second, third = Flaky(), Flaky(failures=1), Flaky()
    cascade = Cascade("group", "g1").add_step("first", first).add_step("second", second).add_step("third", third)

    with pytest.raises(CascadeError) as exc_info:
        await cascade.run()

    error = exc_info.value
    assert error.status_code == 500
    assert error.step == "second"
    assert error.completed == ["first"]
    assert error.message == "Failed to delete group at step 'second'"
    assert third.calls == 0
    assert cascade.pending == ["second", "third"]

    report = await cascade.run()

    assert report.completed == ["first", "second", "third"]
    assert first.calls == 1
    assert second.calls == 2
    assert third.calls == 1


async def test_user_deletion_removes_every_reference(controller: MessagingController):
    alice = await controller.identity_provider.create_user("alice@example.com", "secret1", "Alice")
    await controller.user_db.create_user(User(id=alice.id, email=alice.email, name="Alice"))
    await controller.user_db.create_user(User(id="u2", email="u2@example.com", name="Bob"))
    await controller.conversation_index.record_direct_message(alice.id, "u2")
    group = await controller.group_directory.create("Team", alice.id, ["u2"])
    await controller.message_db.append(
        Message(id="dm", from_user_id="u2", to_user_id=alice.id, text="hi", timestamp=1)
    )
    await controller.message_db.append(
        Message(id="gm", from_user_id=alice.id, group_id=group.id, text="hello", timestamp=2)
    )

    cascade = user_deletion(
        alice.id,
        identity_provider=controller.identity_provider,
        user_db=controller.user_db,
        conversation_index=controller.conversation_index,
        group_directory=controller.group_directory,
        message_db=controller.message_db,
    )
    assert cascade.steps == [
        "identity",
        "profile",
        "conversation_index",
        "group_index",
        "group_memberships",
        "direct_messages",
    ]
    report = await cascade.run()

    assert report.results["direct_messages"] == 1
    assert await controller.user_db.get_user_by_id(alice.id) is None
    assert not await controller.identity_provider.verify_password("alice@example.com", "secret1")
    assert await controller.conversation_index.list_peers(alice.id) == []
    assert await controller.group_directory.list_group_ids_for_user(alice.id) == []
    assert (await controller.group_directory.get_group(group.id)).member_ids == ["u2"]
    assert [m.id for m in await controller.message_db.list_all()] == ["gm"]
    # The survivor's peer set still names the deleted user.
    assert await controller.conversation_index.list_peers("u2") == [alice.id]
