"""
Ordered, resumable multi-key deletions.

The key-value store has no transactions, so deleting a user or a group is a
sequence of independent writes. 'Cascade' makes that sequence explicit: a
named, ordered list of idempotent steps. 'run()' executes the steps in order
and records each one that completes. The first failing step aborts the run
with a 'CascadeError'; completed steps are not rolled back, and calling
'run()' again on the same cascade resumes at the failed step. The owners of
the two cascades ('MessagingController' for users, 'KVGroupDirectory' for
groups) keep failed cascades by target id, so the next deletion request for
that id resumes instead of starting over.

    cascade = Cascade("user", user_id).add_step("profile", delete_profile).add_step(...)
    report = await cascade.run()

'user_deletion' and 'group_deletion' build the two cascades the service uses.
"""

from collections.abc import Awaitable, Callable
from typing import Any

from loguru import logger
from pydantic import BaseModel

from messaging_toolkit.conversation_database.data_models.conversation import ConversationIndex
from messaging_toolkit.conversation_database.data_models.group import GroupDirectory
from messaging_toolkit.conversation_database.data_models.message import MessageDatabase
from messaging_toolkit.conversation_database.data_models.user import UserDatabase
from messaging_toolkit.errors import InternalError
from messaging_toolkit.identity.base import IdentityProvider

Step = Callable[[], Awaitable[Any]]


class CascadeReport(BaseModel):
    """Outcome of a fully completed cascade, with each step's return value."""

    target: str
    target_id: str
    completed: list[str]
    results: dict[str, Any]


class CascadeError(InternalError):
    """Raised by 'Cascade.run' at the first failing step."""

    def __init__(self, target: str, target_id: str, step: str, completed: list[str]) -> None:
        super().__init__(f"Failed to delete {target} at step '{step}'")
        self.target = target
        self.target_id = target_id
        self.step = step
        self.completed = completed


class Cascade:
    """
    An ordered list of named, idempotent steps applied to one target.

    Attributes:
        target: What is being deleted ('user', 'group'), used in logs and errors.
        target_id: Id of the deleted entity.
        completed: Names of the steps that finished, in execution order.
    """

    def __init__(self, target: str, target_id: str) -> None:
        self.target = target
        self.target_id = target_id
        self.completed: list[str] = []
        self.results: dict[str, Any] = {}
        self._steps: list[tuple[str, Step]] = []

    def add_step(self, name: str, action: Step) -> "Cascade":
        if any(existing == name for existing, _ in self._steps):
            raise ValueError(f"Duplicate cascade step {name!r}")
        self._steps.append((name, action))
        return self

    @property
    def steps(self) -> list[str]:
        return [name for name, _ in self._steps]

    @property
    def pending(self) -> list[str]:
        return [name for name in self.steps if name not in self.completed]

    async def run(self) -> CascadeReport:
        for name, action in self._steps:
            if name in self.completed:
                continue
            try:
                self.results[name] = await action()
            except Exception as exc:
                logger.error(f"Deleting {self.target} {self.target_id} failed at step '{name}': {exc}")
                raise CascadeError(self.target, self.target_id, name, list(self.completed)) from exc
            self.completed.append(name)
            logger.debug(f"Deleting {self.target} {self.target_id}: step '{name}' done")

        logger.info(f"Deleted {self.target} {self.target_id} ({len(self.completed)} steps)")
        return CascadeReport(
            target=self.target, target_id=self.target_id, completed=list(self.completed), results=dict(self.results)
        )


def user_deletion(
    user_id: str,
    identity_provider: IdentityProvider,
    user_db: UserDatabase,
    conversation_index: ConversationIndex,
    group_directory: GroupDirectory,
    message_db: MessageDatabase,
) -> Cascade:
    """
    Cascade removing a user everywhere they are referenced.

    Group messages the user sent are kept: only direct messages, in both
    directions, are deleted. Other users' peer sets keep the id.
    """
    return (
        Cascade("user", user_id)
        .add_step("identity", lambda: identity_provider.delete_user(user_id))
        .add_step("profile", lambda: user_db.delete_user(user_id))
        .add_step("conversation_index", lambda: conversation_index.remove_user(user_id))
        .add_step("group_index", lambda: group_directory.remove_user_index(user_id))
        .add_step("group_memberships", lambda: group_directory.remove_user_from_all_groups(user_id))
        .add_step("direct_messages", lambda: message_db.delete_all_for_user(user_id))
    )


def group_deletion(
    group_id: str,
    member_ids: list[str],
    delete_record: Step,
    remove_from_member: Callable[[str], Awaitable[Any]],
    message_db: MessageDatabase,
) -> Cascade:
    """
    Cascade removing a group: record first, then member back-references, then messages.

    'member_ids' is captured before the record is deleted so a resumed run can
    still reach every member index.
    """

    async def remove_member_indices() -> int:
        removed = 0
        for member_id in member_ids:
            if await remove_from_member(member_id):
                removed += 1
        return removed

    return (
        Cascade("group", group_id)
        .add_step("group_record", delete_record)
        .add_step("member_indices", remove_member_indices)
        .add_step("group_messages", lambda: message_db.delete_all_for_group(group_id))
    )
