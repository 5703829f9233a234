"""Redis connection, session records and login throttling."""

from typing import Optional

import redis.asyncio as redis

from civic_reporter.config import settings

MAX_CONNECTIONS = 50

redis_pool: Optional[redis.ConnectionPool] = None
redis_client: Optional[redis.Redis] = None


async def init_redis() -> redis.Redis:
    """Open the shared pool and make sure the server answers."""
    global redis_pool, redis_client

    redis_pool = redis.ConnectionPool.from_url(
        settings.redis_url,
        password=settings.redis_password or None,
        decode_responses=True,
        max_connections=MAX_CONNECTIONS,
    )
    redis_client = redis.Redis(connection_pool=redis_pool)
    await redis_client.ping()
    return redis_client


async def get_redis() -> redis.Redis:
    """FastAPI dependency yielding the shared client, connecting lazily."""
    return redis_client if redis_client is not None else await init_redis()


async def close_redis() -> None:
    """Release the client and its pool."""
    global redis_pool, redis_client

    if redis_client is not None:
        await redis_client.aclose()
    if redis_pool is not None:
        await redis_pool.disconnect()
    redis_client = redis_pool = None


def _flag(value: bool) -> str:
    return "1" if value else "0"


class SessionStore:
    """Login sessions kept as Redis hashes.

    ``session:<id>`` holds the account ID, the solver and admin flags and
    the solver's department. ``account_sessions:<account>`` indexes the
    live session IDs of one account so they can all be ended at once.
    Both keys expire together with the cookie.
    """

    PREFIX = "session:"
    ACCOUNT_SESSIONS_PREFIX = "account_sessions:"

    def __init__(self, redis_client: redis.Redis):
        self.redis = redis_client

    def _session_key(self, session_id: str) -> str:
        return self.PREFIX + session_id

    def _index_key(self, account_id: str) -> str:
        return self.ACCOUNT_SESSIONS_PREFIX + account_id

    async def create(
        self,
        session_id: str,
        account_id: str,
        expires_in: int,
        is_solver: bool = False,
        is_admin: bool = False,
        department: Optional[str] = None,
    ) -> None:
        record = {
            "account_id": account_id,
            "is_solver": _flag(is_solver),
            "is_admin": _flag(is_admin),
            "department": department or "",
        }
        key = self._session_key(session_id)
        index = self._index_key(account_id)

        pipe = self.redis.pipeline()
        pipe.hset(key, mapping=record)
        pipe.expire(key, expires_in)
        pipe.sadd(index, session_id)
        pipe.expire(index, expires_in)
        await pipe.execute()

    async def get(self, session_id: str) -> Optional[dict]:
        """Return the stored record, or None once it expired or was deleted."""
        record = await self.redis.hgetall(self._session_key(session_id))
        return record or None

    async def delete(self, session_id: str) -> None:
        key = self._session_key(session_id)
        record = await self.redis.hgetall(key)
        account_id = record.get("account_id") if record else None
        if account_id:
            await self.redis.srem(self._index_key(account_id), session_id)
        await self.redis.delete(key)

    async def delete_all_account_sessions(self, account_id: str) -> int:
        """End every session of an account and return how many there were."""
        index = self._index_key(account_id)
        session_ids = await self.redis.smembers(index)
        for session_id in session_ids:
            await self.redis.delete(self._session_key(session_id))
        await self.redis.delete(index)
        return len(session_ids)


class RateLimiter:
    """Sliding window counter over a Redis sorted set.

    Every attempt is stored with its timestamp as score; attempts older
    than the window are dropped before counting.
    """

    PREFIX = "rate_limit:"

    def __init__(self, redis_client: redis.Redis):
        self.redis = redis_client

    async def is_allowed(
        self, key: str, max_requests: int, window_seconds: int = 60
    ) -> tuple[bool, int, int]:
        """Record one attempt.

        Returns ``(allowed, remaining, retry_after_seconds)``.
        """
        window_key = self.PREFIX + key
        seconds, microseconds = await self.redis.time()
        now = seconds + microseconds / 1_000_000

        pipe = self.redis.pipeline()
        pipe.zremrangebyscore(window_key, 0, now - window_seconds)
        pipe.zcard(window_key)
        pipe.zadd(window_key, {f"{now:.6f}": now})
        pipe.expire(window_key, window_seconds)
        _, attempts, _, _ = await pipe.execute()

        if attempts < max_requests:
            return True, max_requests - attempts - 1, 0

        oldest = await self.redis.zrange(window_key, 0, 0, withscores=True)
        if not oldest:
            return False, 0, window_seconds
        _, first_seen = oldest[0]
        return False, 0, max(int(first_seen + window_seconds - now), 1)
