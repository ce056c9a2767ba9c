"""
Self-contained identity provider.

Accounts live in the shared key-value store under 'identity:{id}', next to the
messaging data but outside every prefix the messaging repositories scan.
Passwords are stored as salted PBKDF2-HMAC-SHA256 digests and bearer tokens
are HS256 JWTs signed with the configured secret:

    {"sub": <user id>, "email": <email>, "iat": <issued>, "exp": <expiry>}

A token only resolves while its account still exists, so deleting an account
revokes every token issued for it.
"""

import base64
import hashlib
import hmac
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt
from loguru import logger

from messaging_toolkit.errors import BadRequest, NotFound, Unauthorized
from messaging_toolkit.identity.base import AuthUser, Identity, IdentityProvider, Session
from messaging_toolkit.kv_store.base import KeyValueStore
from messaging_toolkit.utils.database import generate_uid

IDENTITY_PREFIX = "identity:"
JWT_ALGORITHM = "HS256"
PBKDF2_ITERATIONS = 200_000
PBKDF2_DKLEN = 32


def _identity_key(user_id: str) -> str:
    return f"{IDENTITY_PREFIX}{user_id}"


def _hash_password(password: str, salt: bytes, iterations: int = PBKDF2_ITERATIONS) -> str:
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations, dklen=PBKDF2_DKLEN)
    return base64.b64encode(digest).decode("ascii")


def _now() -> datetime:
    return datetime.now(timezone.utc)


class LocalIdentityProvider(IdentityProvider):
    """
    'IdentityProvider' that keeps credentials in a 'KeyValueStore'.

    Attributes:
        store: Key-value store holding the 'identity:' records.
        secret: HS256 signing secret for bearer tokens.
        token_ttl_seconds: Lifetime of an issued token.
        pbkdf2_iterations: Work factor for newly hashed passwords. Existing hashes keep
            the iteration count they were created with.
    """

    def __init__(
        self,
        store: KeyValueStore,
        secret: str,
        token_ttl_seconds: int = 3600,
        pbkdf2_iterations: int = PBKDF2_ITERATIONS,
    ) -> None:
        if not secret:
            raise ValueError("A non-empty token signing secret is required")
        self.store = store
        self.secret = secret
        self.token_ttl_seconds = token_ttl_seconds
        self.pbkdf2_iterations = pbkdf2_iterations

    async def _find_by_email(self, email: str) -> dict[str, Any] | None:
        email = email.strip().lower()
        for record in await self.store.get_by_prefix(IDENTITY_PREFIX):
            if record["email"] == email:
                return record
        return None

    @staticmethod
    def _check_password(record: dict[str, Any], password: str) -> bool:
        salt = base64.b64decode(record["salt"])
        candidate = _hash_password(password, salt, record["iterations"])
        return hmac.compare_digest(candidate, record["passwordHash"])

    def _set_password(self, record: dict[str, Any], password: str) -> None:
        salt = secrets.token_bytes(16)
        record["salt"] = base64.b64encode(salt).decode("ascii")
        record["iterations"] = self.pbkdf2_iterations
        record["passwordHash"] = _hash_password(password, salt, self.pbkdf2_iterations)

    @staticmethod
    def _to_auth_user(record: dict[str, Any]) -> AuthUser:
        return AuthUser(
            id=record["id"],
            email=record["email"],
            name=record["name"],
            created_at=record["createdAt"],
            last_sign_in_at=record.get("lastSignInAt"),
        )

    def _issue_token(self, record: dict[str, Any], issued_at: datetime) -> str:
        claims = {
            "sub": record["id"],
            "email": record["email"],
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + timedelta(seconds=self.token_ttl_seconds)).timestamp()),
        }
        return jwt.encode(claims, self.secret, algorithm=JWT_ALGORITHM)

    async def create_user(self, email: str, password: str, name: str) -> AuthUser:
        email = email.strip().lower()
        if await self._find_by_email(email) is not None:
            raise BadRequest("A user with this email address has already been registered")

        record: dict[str, Any] = {
            "id": generate_uid(),
            "email": email,
            "name": name,
            "createdAt": _now().isoformat(),
            "lastSignInAt": None,
        }
        self._set_password(record, password)
        await self.store.set(_identity_key(record["id"]), record)
        logger.info(f"Created identity {record['id']}")
        return self._to_auth_user(record)

    async def sign_in(self, email: str, password: str) -> Session:
        record = await self._find_by_email(email)
        if record is None or not self._check_password(record, password):
            raise Unauthorized("Invalid login credentials")

        issued_at = _now()
        record["lastSignInAt"] = issued_at.isoformat()
        await self.store.set(_identity_key(record["id"]), record)
        return Session(
            access_token=self._issue_token(record, issued_at),
            expires_in=self.token_ttl_seconds,
            user=self._to_auth_user(record),
        )

    async def resolve_token(self, token: str) -> Identity:
        try:
            claims = jwt.decode(token, self.secret, algorithms=[JWT_ALGORITHM])
        except JWTError as e:
            raise Unauthorized(f"Token verification failed: {e}")

        record = await self.store.get(_identity_key(str(claims.get("sub", ""))))
        if record is None:
            raise Unauthorized("Token refers to a deleted account")
        return Identity(id=record["id"], email=record["email"])

    async def verify_password(self, email: str, password: str) -> bool:
        record = await self._find_by_email(email)
        return record is not None and self._check_password(record, password)

    async def update_user(self, user_id: str, name: str | None = None, password: str | None = None) -> AuthUser:
        record = await self.store.get(_identity_key(user_id))
        if record is None:
            raise NotFound("User not found")
        if name is not None:
            record["name"] = name
        if password is not None:
            self._set_password(record, password)
        await self.store.set(_identity_key(user_id), record)
        return self._to_auth_user(record)

    async def delete_user(self, user_id: str) -> bool:
        return await self.store.delete(_identity_key(user_id))

    async def list_users(self) -> list[AuthUser]:
        return [self._to_auth_user(record) for record in await self.store.get_by_prefix(IDENTITY_PREFIX)]

    async def request_password_reset(self, email: str) -> None:
        record = await self._find_by_email(email)
        if record is None:
            logger.info("Password reset requested for an unknown email")
            return
        # No mail transport is configured; the request is only recorded.
        logger.info(f"Password reset requested for identity {record['id']}")
