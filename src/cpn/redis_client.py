"""Shared Redis client.

Redis backs the per-client rate limiter and the readiness probe only; no
domain data lives there, so the API keeps serving when it is down.
"""

import redis.asyncio as redis

_client: redis.Redis | None = None


async def init_redis(url: str) -> None:
    """Create the shared client. Nothing connects until the first command."""
    global _client  # noqa: PLW0603
    _client = redis.from_url(  # type: ignore[no-untyped-call]
        url,
        encoding="utf-8",
        decode_responses=True,
        max_connections=20,
        socket_connect_timeout=2,
        health_check_interval=30,
    )


async def close_redis() -> None:
    global _client  # noqa: PLW0603
    if _client is not None:
        await _client.aclose()
        _client = None


def get_redis() -> redis.Redis:
    """Return the shared client.

    Raises:
        RuntimeError: ``init_redis`` has not run, as in tests or a
            deployment without Redis.
    """
    if _client is None:
        msg = "Redis client is not initialized"
        raise RuntimeError(msg)
    return _client
