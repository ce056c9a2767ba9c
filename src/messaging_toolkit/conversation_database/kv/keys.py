"""Keyspace shared by every KV-backed repository."""

USER_PREFIX = "user:"
MESSAGE_PREFIX = "message:"
CONVERSATIONS_PREFIX = "conversations:"
USER_GROUPS_PREFIX = "user_groups:"
GROUP_PREFIX = "group:"


def user_key(user_id: str) -> str:
    return f"{USER_PREFIX}{user_id}"


def message_key(message_id: str) -> str:
    return f"{MESSAGE_PREFIX}{message_id}"


def conversations_key(user_id: str) -> str:
    return f"{CONVERSATIONS_PREFIX}{user_id}"


def user_groups_key(user_id: str) -> str:
    return f"{USER_GROUPS_PREFIX}{user_id}"


def group_key(group_id: str) -> str:
    return f"{GROUP_PREFIX}{group_id}"
