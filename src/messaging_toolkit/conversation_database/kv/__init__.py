"""
Repositories backed by a generic 'KeyValueStore'.

    from messaging_toolkit.conversation_database.kv import (
        KVConversationIndex, KVGroupDirectory, KVMessageDatabase, KVUserDatabase,
    )
"""

from messaging_toolkit.conversation_database.kv.conversation import KVConversationIndex
from messaging_toolkit.conversation_database.kv.group import KVGroupDirectory
from messaging_toolkit.conversation_database.kv.message import KVMessageDatabase
from messaging_toolkit.conversation_database.kv.user import KVUserDatabase

__all__ = [
    "KVConversationIndex",
    "KVGroupDirectory",
    "KVMessageDatabase",
    "KVUserDatabase",
]
