"""
FastAPI application factory.

'create_app' assembles an application from already-built components, which is
what the tests use. 'create_app_from_settings' builds every component from a
'Settings' object: key-value store, identity provider, repositories,
controller, admin aggregator and the bearer auth provider.

    app = create_app_from_settings(Settings.from_env())
"""

import time
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from messaging_toolkit.admin.aggregator import AdminAggregator
from messaging_toolkit.api.auth.base import AuthProvider
from messaging_toolkit.api.auth.bearer import BearerTokenProvider
from messaging_toolkit.api.errors import error_response, register_exception_handlers
from messaging_toolkit.api.routes import build_router
from messaging_toolkit.config import Settings
from messaging_toolkit.conversation_database.controller import MessagingController
from messaging_toolkit.conversation_database.kv import (
    KVConversationIndex,
    KVGroupDirectory,
    KVMessageDatabase,
    KVUserDatabase,
)
from messaging_toolkit.errors import INTERNAL_ERROR_MESSAGE
from messaging_toolkit.identity.local import LocalIdentityProvider
from messaging_toolkit.kv_store import KeyValueStore, create_store


async def log_requests(request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
    """Log every request and turn unexpected exceptions into a generic 500."""
    started = time.perf_counter()
    try:
        response = await call_next(request)
    except Exception:
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        response = error_response(500, INTERNAL_ERROR_MESSAGE)
    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info(f"{request.method} {request.url.path} -> {response.status_code} ({elapsed_ms:.1f} ms)")
    return response


def create_app(
    controller: MessagingController,
    admin: AdminAggregator,
    auth_provider: AuthProvider | None = None,
    store: KeyValueStore | None = None,
    cors_origins: list[str] | None = None,
) -> FastAPI:
    auth_provider = auth_provider or BearerTokenProvider(controller)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if store is not None:
            await store.initialize()
        yield
        if store is not None:
            await store.close()

    app = FastAPI(title="Messaging API", lifespan=lifespan)
    app.middleware("http")(log_requests)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins or ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    auth_provider.bind_to_app(app)
    app.include_router(build_router(controller, admin, auth_provider))
    return app


def build_controller(store: KeyValueStore, settings: Settings) -> MessagingController:
    message_db = KVMessageDatabase(store)
    return MessagingController(
        user_db=KVUserDatabase(store),
        message_db=message_db,
        conversation_index=KVConversationIndex(store),
        group_directory=KVGroupDirectory(store, message_db),
        identity_provider=LocalIdentityProvider(store, settings.jwt_secret, settings.token_ttl_seconds),
        min_password_length=settings.min_password_length,
    )


def create_app_from_settings(settings: Settings) -> FastAPI:
    store = create_store(settings.kv_store_url)
    if settings.kv_store_url is None:
        logger.warning("KV_STORE_URL is not set; using an in-memory store, data is lost on restart.")
    if not settings.admin_emails:
        logger.warning("ADMIN_EMAILS is empty; admin routes will reject every caller.")

    controller = build_controller(store, settings)
    admin = AdminAggregator(controller, settings.admin_emails)
    return create_app(controller, admin, store=store, cors_origins=settings.cors_origins)
