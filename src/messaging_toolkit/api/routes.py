"""
HTTP routes of the messaging service.

Every route except signup, password reset and the health check requires a
bearer token. Admin routes additionally require the caller's email to be on
the administrator allow-list (403 otherwise). Response envelopes:

    POST   /signup               {success, user}
    POST   /reset-password       {success, message}   (same answer for any email)
    GET    /users                {users}
    POST   /create-group         {success, group}
    POST   /send-message         {success, message}
    GET    /messages/{targetId}  {messages}            ('group_' prefix -> group history)
    GET    /conversations        {conversations}
    GET    /user/{userId}        {user}
    PUT    /user/profile         {success, message, name}
    PUT    /user/password        {success, message}
    DELETE /user/account         {success, message}
    GET    /admin/check          {isAdmin}
    GET    /admin/users          {users}
    DELETE /admin/user/{userId}  {success, message}
    GET    /admin/stats          {stats}
    GET    /admin/groups         {groups}
    DELETE /admin/group/{id}     {success, message}
"""

from typing import Any

from fastapi import APIRouter, Depends

from messaging_toolkit.admin.aggregator import AdminAggregator
from messaging_toolkit.api.auth.base import AuthProvider
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
from messaging_toolkit.errors import Forbidden
from messaging_toolkit.identity.base import Identity

PASSWORD_RESET_MESSAGE = "If an account exists, a password reset email has been sent"


def build_router(controller: MessagingController, admin: AdminAggregator, auth_provider: AuthProvider) -> APIRouter:
    router = APIRouter()
    current_identity = Depends(auth_provider.get_current_identity)

    async def require_admin(identity: Identity = current_identity) -> Identity:
        if not admin.is_admin(identity.email):
            raise Forbidden("Unauthorized - Admin only")
        return identity

    admin_identity = Depends(require_admin)

    @router.get("/")
    async def health() -> dict[str, Any]:
        return {"message": "Messaging API ready"}

    @router.post("/signup")
    async def signup(payload: SignupInput = SignupInput()) -> dict[str, Any]:
        user = await controller.register_user(payload)
        return {"success": True, "user": user.to_store()}

    @router.post("/reset-password")
    async def reset_password(payload: PasswordResetInput = PasswordResetInput()) -> dict[str, Any]:
        await controller.request_password_reset(payload)
        return {"success": True, "message": PASSWORD_RESET_MESSAGE}

    @router.get("/users")
    async def list_users(identity: Identity = current_identity) -> dict[str, Any]:
        users = await controller.list_contacts(identity)
        return {"users": [user.to_store() for user in users]}

    @router.post("/create-group")
    async def create_group(
        payload: CreateGroupInput = CreateGroupInput(), identity: Identity = current_identity
    ) -> dict[str, Any]:
        group = await controller.create_group(identity, payload)
        return {"success": True, "group": group.to_store()}

    @router.post("/send-message")
    async def send_message(
        payload: SendMessageInput = SendMessageInput(), identity: Identity = current_identity
    ) -> dict[str, Any]:
        message = await controller.send_message(identity, payload)
        return {"success": True, "message": message.to_store()}

    @router.get("/messages/{target_id}")
    async def get_messages(target_id: str, identity: Identity = current_identity) -> dict[str, Any]:
        messages = await controller.get_messages(identity, target_id)
        return {"messages": [message.to_store() for message in messages]}

    @router.get("/conversations")
    async def list_conversations(identity: Identity = current_identity) -> dict[str, Any]:
        conversations = await controller.list_conversations(identity)
        return {"conversations": [conversation.to_store(exclude_none=True) for conversation in conversations]}

    @router.get("/user/{user_id}")
    async def get_user(user_id: str, identity: Identity = current_identity) -> dict[str, Any]:
        user = await controller.get_user(user_id)
        return {"user": user.to_store()}

    @router.put("/user/profile")
    async def update_profile(
        payload: ProfileInput = ProfileInput(), identity: Identity = current_identity
    ) -> dict[str, Any]:
        name = await controller.update_profile(identity, payload)
        return {"success": True, "message": "Profile updated successfully", "name": name}

    @router.put("/user/password")
    async def change_password(
        payload: PasswordChangeInput = PasswordChangeInput(), identity: Identity = current_identity
    ) -> dict[str, Any]:
        await controller.change_password(identity, payload)
        return {"success": True, "message": "Password updated successfully"}

    @router.delete("/user/account")
    async def delete_account(
        payload: AccountDeletionInput = AccountDeletionInput(), identity: Identity = current_identity
    ) -> dict[str, Any]:
        await controller.delete_account(identity, payload)
        return {"success": True, "message": "Account deleted successfully"}

    @router.get("/admin/check")
    async def admin_check(identity: Identity = current_identity) -> dict[str, Any]:
        return {"isAdmin": admin.is_admin(identity.email)}

    @router.get("/admin/users")
    async def admin_users(identity: Identity = admin_identity) -> dict[str, Any]:
        users = await admin.list_users_with_audit()
        return {"users": [user.to_store() for user in users]}

    @router.delete("/admin/user/{user_id}")
    async def admin_delete_user(user_id: str, identity: Identity = admin_identity) -> dict[str, Any]:
        await admin.delete_user(identity, user_id)
        return {"success": True, "message": "User deleted successfully"}

    @router.get("/admin/stats")
    async def admin_stats(identity: Identity = admin_identity) -> dict[str, Any]:
        stats = await admin.compute_stats()
        return {"stats": stats.to_store()}

    @router.get("/admin/groups")
    async def admin_groups(identity: Identity = admin_identity) -> dict[str, Any]:
        groups = await admin.list_groups_with_audit()
        return {"groups": [group.to_store() for group in groups]}

    @router.delete("/admin/group/{group_id}")
    async def admin_delete_group(group_id: str, identity: Identity = admin_identity) -> dict[str, Any]:
        await admin.delete_group(identity, group_id)
        return {"success": True, "message": "Group deleted successfully"}

    return router
