from typing import Any

from fastapi import FastAPI, Request

from messaging_toolkit.api.auth.base import AuthProvider
from messaging_toolkit.conversation_database.controller import LoginInput, MessagingController
from messaging_toolkit.errors import Unauthorized
from messaging_toolkit.identity.base import Identity


class BearerTokenProvider(AuthProvider):
    """
    Resolves 'Authorization: Bearer <token>' through the identity provider.

    '/login' exchanges email and password for a token; the token is then sent
    on every request and re-validated each time, so a deleted account loses
    access immediately.
    """

    def __init__(self, controller: MessagingController) -> None:
        self.controller = controller

    async def get_current_identity(self, request: Request) -> Identity:
        auth_header = request.headers.get("Authorization")
        scheme, _, token = (auth_header or "").partition(" ")
        token = token.strip()
        if scheme.lower() != "bearer" or not token:
            raise Unauthorized("Unauthorized")
        return await self.controller.identity_provider.resolve_token(token)

    def bind_to_app(self, app: FastAPI) -> None:
        controller = self.controller

        @app.post("/login")
        async def login(payload: LoginInput = LoginInput()) -> dict[str, Any]:
            session = await controller.sign_in(payload)
            return session.model_dump(mode="json")
