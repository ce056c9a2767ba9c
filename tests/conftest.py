import pytest
from fastapi.testclient import TestClient

from messaging_toolkit.admin.aggregator import AdminAggregator
from messaging_toolkit.api.app import create_app
from messaging_toolkit.conversation_database.controller import MessagingController
from messaging_toolkit.conversation_database.kv import (
    KVConversationIndex,
    KVGroupDirectory,
    KVMessageDatabase,
    KVUserDatabase,
)
from messaging_toolkit.identity.base import Identity
from messaging_toolkit.identity.local import LocalIdentityProvider
from messaging_toolkit.kv_store.in_memory import InMemoryKeyValueStore

ADMIN_EMAIL = "admin@example.com"
PASSWORD = "correct-horse"


class FakeClock:
    """Settable millisecond clock."""

    def __init__(self, now: int = 1000) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def identity_provider(store: InMemoryKeyValueStore) -> LocalIdentityProvider:
    return LocalIdentityProvider(store, secret="test-secret", pbkdf2_iterations=1000)


@pytest.fixture
def message_db(store: InMemoryKeyValueStore) -> KVMessageDatabase:
    return KVMessageDatabase(store)


@pytest.fixture
def user_db(store: InMemoryKeyValueStore) -> KVUserDatabase:
    return KVUserDatabase(store)


@pytest.fixture
def conversation_index(store: InMemoryKeyValueStore) -> KVConversationIndex:
    return KVConversationIndex(store)


@pytest.fixture
def group_directory(store: InMemoryKeyValueStore, message_db: KVMessageDatabase, clock: FakeClock) -> KVGroupDirectory:
    return KVGroupDirectory(store, message_db, clock=clock)


@pytest.fixture
def controller(
    user_db: KVUserDatabase,
    message_db: KVMessageDatabase,
    conversation_index: KVConversationIndex,
    group_directory: KVGroupDirectory,
    identity_provider: LocalIdentityProvider,
    clock: FakeClock,
) -> MessagingController:
    return MessagingController(
        user_db=user_db,
        message_db=message_db,
        conversation_index=conversation_index,
        group_directory=group_directory,
        identity_provider=identity_provider,
        clock=clock,
    )


@pytest.fixture
def admin(controller: MessagingController) -> AdminAggregator:
    return AdminAggregator(controller, [ADMIN_EMAIL])


@pytest.fixture
def client(controller: MessagingController, admin: AdminAggregator) -> TestClient:
    return TestClient(create_app(controller, admin))


def identity(user_id: str) -> Identity:
    return Identity(id=user_id, email=f"{user_id}@example.com")


def signup(client: TestClient, email: str, name: str, password: str = PASSWORD) -> tuple[str, dict[str, str]]:
    """Sign up and log in through the API. Returns the user id and auth headers."""
    response = client.post("/signup", json={"email": email, "password": password, "name": name})
    assert response.status_code == 200, response.text
    user_id = response.json()["user"]["id"]

    response = client.post("/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return user_id, {"Authorization": f"Bearer {response.json()['access_token']}"}
