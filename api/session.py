"""Signed session tokens and the stores that keep each table between requests."""

import asyncio
import json
import logging
import time
from abc import ABC, abstractmethod
from typing import Any
from uuid import uuid4

import redis.asyncio as redis
from redis.exceptions import RedisError
from itsdangerous import BadSignature, URLSafeTimedSerializer

from config import config

logger = logging.getLogger(__name__)

SESSION_SALT = "blackjack-table-session"


class SessionSigner:
    """
    Wraps raw session ids in tamper-proof tokens.

    Clients only ever see the token. The raw id is the key used for the
    session store, the table cache and the per-session lock.
    """

    def __init__(self, secret_key: str | None = None) -> None:
        self._serializer = URLSafeTimedSerializer(
            secret_key or config.security.secret_key,
            salt=SESSION_SALT,
        )

    def sign(self, session_id: str) -> str:
        return self._serializer.dumps(session_id)

    def unsign(self, token: str, max_age: int | None = None) -> str | None:
        """
        Recover the raw session id from a token.

        Returns None for a forged or malformed token, or for one older than
        ``max_age`` seconds when a limit is given. How long a session lives is
        up to the store TTL, not the token.
        """
        try:
            session_id = self._serializer.loads(token, max_age=max_age)
        except BadSignature:
            return None
        return session_id if isinstance(session_id, str) else None


_session_signer: SessionSigner | None = None


def get_session_signer() -> SessionSigner:
    global _session_signer
    if _session_signer is None:
        _session_signer = SessionSigner()
    return _session_signer


class SessionStore(ABC):
    """Session data keyed by raw session id. Every write restarts the entry's TTL."""

    @abstractmethod
    async def get(self, session_id: str) -> dict[str, Any] | None: ...

    @abstractmethod
    async def set(self, session_id: str, data: dict[str, Any], ttl: int | None = None) -> None: ...

    @abstractmethod
    async def delete(self, session_id: str) -> None: ...

    async def exists(self, session_id: str) -> bool:
        return await self.get(session_id) is not None

    async def purge_expired(self) -> list[str]:
        """Drop expired entries the backend keeps around, returning their ids."""
        return []


class InMemorySessionStore(SessionStore):
    """Process-local store used unless Redis is enabled."""

    def __init__(self) -> None:
        # session id -> (data, monotonic deadline)
        self._entries: dict[str, tuple[dict[str, Any], float]] = {}

    async def get(self, session_id: str) -> dict[str, Any] | None:
        entry = self._entries.get(session_id)
        if entry is None:
            return None
        data, deadline = entry
        if deadline <= time.monotonic():
            del self._entries[session_id]
            return None
        return data

    async def set(self, session_id: str, data: dict[str, Any], ttl: int | None = None) -> None:
        deadline = time.monotonic() + (ttl or config.session_ttl)
        self._entries[session_id] = (data, deadline)

    async def delete(self, session_id: str) -> None:
        self._entries.pop(session_id, None)

    async def purge_expired(self) -> list[str]:
        now = time.monotonic()
        expired = [sid for sid, (_, deadline) in self._entries.items() if deadline <= now]
        for sid in expired:
            del self._entries[sid]
        return expired


class RedisSessionStore(SessionStore):
    """Redis-backed store. Redis expires the keys itself."""

    def __init__(self, client: redis.Redis, prefix: str = "blackjack:session:") -> None:
        self._redis = client
        self._prefix = prefix

    async def get(self, session_id: str) -> dict[str, Any] | None:
        raw = await self._redis.get(self._prefix + session_id)
        return None if raw is None else json.loads(raw)

    async def set(self, session_id: str, data: dict[str, Any], ttl: int | None = None) -> None:
        await self._redis.setex(self._prefix + session_id, ttl or config.session_ttl, json.dumps(data))

    async def delete(self, session_id: str) -> None:
        await self._redis.delete(self._prefix + session_id)

    async def exists(self, session_id: str) -> bool:
        return await self._redis.exists(self._prefix + session_id) > 0


_session_store: SessionStore | None = None

# One lock per live session; a table is never acted on by two requests at once
_session_locks: dict[str, asyncio.Lock] = {}


async def get_session_store() -> SessionStore:
    """Return the process-wide store, connecting to Redis on first use when enabled."""
    global _session_store
    if _session_store is not None:
        return _session_store

    if config.redis.enabled:
        client = redis.from_url(config.redis.url)
        try:
            await client.ping()
        except RedisError as exc:
            logger.warning(
                "Redis at %s unavailable (%s); using in-memory sessions",
                config.redis.url,
                exc,
            )
        else:
            _session_store = RedisSessionStore(client)
            return _session_store

    _session_store = InMemorySessionStore()
    return _session_store


def session_lock(session_id: str) -> asyncio.Lock:
    lock = _session_locks.get(session_id)
    if lock is None:
        lock = _session_locks[session_id] = asyncio.Lock()
    return lock


def release_session_lock(session_id: str) -> None:
    """Forget a session's lock unless a request is still holding it."""
    lock = _session_locks.get(session_id)
    if lock is not None and not lock.locked():
        del _session_locks[session_id]


def locked_session_ids() -> list[str]:
    """Session ids that currently have a lock allocated."""
    return list(_session_locks)


async def create_session(data: dict[str, Any] | None = None) -> tuple[str, str]:
    """Start a session, returning ``(session_id, token)``."""
    session_id = str(uuid4())
    store = await get_session_store()
    await store.set(session_id, data or {})
    return session_id, get_session_signer().sign(session_id)


def extract_session_id(token: str) -> str | None:
    """The raw session id behind a client token, or None if it does not verify."""
    return get_session_signer().unsign(token)
