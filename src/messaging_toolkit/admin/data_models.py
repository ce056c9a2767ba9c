"""
Read models produced by 'AdminAggregator'.

None of these are stored: each is recomputed from full scans of the
key-value store on every admin request.
"""

from datetime import datetime

from messaging_toolkit.conversation_database.data_models.base import CamelModel


class UserAudit(CamelModel):
    """A profile joined with identity-provider metadata and the admin flag."""

    id: str
    name: str
    email: str
    created_at: datetime | None = None
    last_sign_in: datetime | None = None
    is_admin: bool = False


class GroupAudit(CamelModel):
    """A group joined with its creator's display name and its message count.

    'created_by' holds the creator's name, or 'Unknown' once the creator's
    profile is gone.
    """

    id: str
    name: str
    member_count: int
    created_by: str
    created_at: int
    message_count: int


class Stats(CamelModel):
    total_users: int
    total_messages: int
    total_groups: int
    direct_messages: int
    group_messages: int
