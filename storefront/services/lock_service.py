import uuid

import redis

from storefront.utils.retry import redis_retry
from storefront.utils.settings import REDIS_URL
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

#compare-and-delete, redis runs the script atomically so nothing can slip between GET and DEL
_RELEASE_LUA = """
if redis.call('GET', KEYS[1]) == ARGV[1] then
    return redis.call('DEL', KEYS[1])
else
    return 0
end
"""


class LockService:
    """
    Short-lived checkout locks keyed by cart id.

    -acquire: SET NX EX, so an abandoned lock expires on its own
    -release: only by the holder's token (lua compare-and-delete)
    """

    def __init__(self, url: str | None = None, client: redis.Redis | None = None):
        self.redis = client or redis.Redis.from_url(
            url or REDIS_URL,
            decode_responses=True,
        )

    @staticmethod
    def _key(cart_id: str) -> str:
        return f"cart:{cart_id}:checkout"

    def acquire_checkout_lock(self, cart_id: str, ttl: int) -> str | None:
        """Returns the holder token, or None when someone else holds the lock."""
        key = self._key(cart_id)
        # one token for all attempts, a retry after a lost reply finds its own lock
        token = str(uuid.uuid4())
        logger.info(f"Acquire lock {key}")
        return token if self._set_lock(key, token, ttl) else None

    @redis_retry()
    def _set_lock(self, key: str, token: str, ttl: int) -> bool:
        #SET cart:<id>:checkout <token> NX EX <ttl>
        if self.redis.set(name=key, value=token, nx=True, ex=ttl):
            return True
        return self.redis.get(key) == token

    @redis_retry()
    def release_checkout_lock(self, cart_id: str, token: str) -> bool:
        key = self._key(cart_id)
        logger.info(f"Release lock {key}")
        res = self.redis.eval(_RELEASE_LUA, 1, key, token)
        return bool(res)

    def ping(self) -> bool:
        return bool(self.redis.ping())
