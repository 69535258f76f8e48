import logging

from redis import Redis
from redis.exceptions import RedisError

from agent_runner_sdk.nonce import InMemoryNonceStore, NonceStore
from agent_runner_sdk.signing import NONCE_TTL_SECONDS
from app.core.config import Settings
from app.db.redis import build_redis_client

logger = logging.getLogger("agent_runner.replay")

NONCE_KEY_PREFIX = "agent-runner:nonce:"


class RedisNonceStore:
    """Replay window shared by every worker through Redis ``SET NX EX``."""

    def __init__(self, redis_client: Redis, ttl_seconds: int = NONCE_TTL_SECONDS) -> None:
        self._redis = redis_client
        self._ttl_seconds = ttl_seconds

    def try_accept(self, nonce: str) -> bool:
        try:
            accepted = self._redis.set(f"{NONCE_KEY_PREFIX}{nonce}", "1", nx=True, ex=self._ttl_seconds)
        except RedisError:
            logger.warning(
                "redis_unavailable_nonce_check",
                extra={"event_name": "redis_unavailable_nonce_check"},
                exc_info=True,
            )
            return False

        return bool(accepted)


def build_nonce_store(settings: Settings) -> NonceStore:
    backend = settings.nonce_store_backend.strip().lower()
    if backend == "memory":
        return InMemoryNonceStore()
    if backend == "redis":
        return RedisNonceStore(build_redis_client(settings))
    raise ValueError(f"Unsupported nonce store backend: {settings.nonce_store_backend!r}")
