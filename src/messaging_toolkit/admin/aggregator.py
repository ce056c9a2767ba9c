"""
Administrator read models and moderation actions.

'AdminAggregator' joins profiles, identity-provider metadata, groups and
messages into the audit views of the admin panel, computes system statistics
and runs the user and group deletion cascades on behalf of an administrator.

Administrators are identified by email. The allow-list is an immutable value
handed in at construction time (from 'Settings.admin_emails'); nothing in the
data model marks a user as admin and it cannot change at runtime.

Every view is built from full prefix scans: listing groups costs one message
scan per group, so this component is only meant for small installations.
"""

from collections.abc import Iterable

from loguru import logger

from messaging_toolkit.admin.data_models import GroupAudit, Stats, UserAudit
from messaging_toolkit.conversation_database.cascade import CascadeReport
from messaging_toolkit.conversation_database.controller import MessagingController
from messaging_toolkit.errors import BadRequest, NotFound
from messaging_toolkit.identity.base import Identity


class AdminAggregator:
    """
    Admin-only queries and cascading deletes.

    Attributes:
        controller: Gives access to the repositories and the user deletion cascade.
        admin_emails: Lower-cased administrator emails.
    """

    def __init__(self, controller: MessagingController, admin_emails: Iterable[str]) -> None:
        self.controller = controller
        self.admin_emails = frozenset(email.strip().lower() for email in admin_emails)

    def is_admin(self, email: str | None) -> bool:
        return bool(email) and email.lower() in self.admin_emails  # type: ignore[union-attr]

    async def list_users_with_audit(self) -> list[UserAudit]:
        auth_users = {auth_user.id: auth_user for auth_user in await self.controller.identity_provider.list_users()}
        audits = []
        for user in await self.controller.user_db.list_users():
            auth_user = auth_users.get(user.id)
            audits.append(
                UserAudit(
                    id=user.id,
                    name=user.name,
                    email=user.email,
                    created_at=auth_user.created_at if auth_user else None,
                    last_sign_in=auth_user.last_sign_in_at if auth_user else None,
                    is_admin=self.is_admin(user.email),
                )
            )
        return audits

    async def list_groups_with_audit(self) -> list[GroupAudit]:
        audits = []
        for group in await self.controller.group_directory.list_groups():
            creator = await self.controller.user_db.get_user_by_id(group.created_by)
            messages = await self.controller.message_db.list_for_group(group.id)
            audits.append(
                GroupAudit(
                    id=group.id,
                    name=group.name,
                    member_count=len(group.member_ids),
                    created_by=creator.name if creator else "Unknown",
                    created_at=group.created_at,
                    message_count=len(messages),
                )
            )
        return audits

    async def compute_stats(self) -> Stats:
        users = await self.controller.user_db.list_users()
        messages = await self.controller.message_db.list_all()
        groups = await self.controller.group_directory.list_groups()
        direct = sum(1 for message in messages if message.is_direct)
        return Stats(
            total_users=len(users),
            total_messages=len(messages),
            total_groups=len(groups),
            direct_messages=direct,
            group_messages=len(messages) - direct,
        )

    async def delete_user(self, actor: Identity, target_id: str) -> CascadeReport:
        if target_id == actor.id:
            raise BadRequest("Cannot delete your own account")
        if self.controller.has_pending_deletion(target_id):
            logger.info(f"Admin {actor.id} resuming deletion of user {target_id}")
            return await self.controller.delete_user_data(target_id)

        target = await self.controller.user_db.get_user_by_id(target_id)
        if target is None:
            raise NotFound("User not found")
        if self.is_admin(target.email):
            raise BadRequest("Cannot delete another admin account")

        logger.info(f"Admin {actor.id} deleting user {target_id}")
        return await self.controller.delete_user_data(target_id)

    async def delete_group(self, actor: Identity, group_id: str) -> None:
        logger.info(f"Admin {actor.id} deleting group {group_id}")
        if not await self.controller.group_directory.delete(group_id):
            raise NotFound("Group not found")
