from messaging_toolkit.conversation_database.data_models.conversation import Conversation, ConversationIndex
from messaging_toolkit.conversation_database.data_models.group import Group, GroupDirectory
from messaging_toolkit.conversation_database.data_models.message import Message, MessageDatabase
from messaging_toolkit.conversation_database.data_models.user import User, UserDatabase

__all__ = [
    "Conversation",
    "ConversationIndex",
    "Group",
    "GroupDirectory",
    "Message",
    "MessageDatabase",
    "User",
    "UserDatabase",
]
