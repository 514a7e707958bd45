from tutorhub.config import get_settings
from typing import Optional
import redis

class RedisClient:
    """
    Redis client wrapper for auth session storage.

    This class provides a simplified interface for the Redis operations used in the
    application: storing, reading and deleting serialized session records that expire
    on their own.

    Attributes:
        redis_host (str): Redis server hostname/IP
        redis_port (int): Redis server port
        redis_password (str): Redis server password
        client (redis.StrictRedis): Redis client instance
    """

    key_prefix = "sess:"

    def __init__(self, client: Optional[redis.StrictRedis] = None):
        settings = get_settings()
        self.redis_host = settings.redis_host
        self.redis_port = settings.redis_port
        self.redis_password = settings.redis_password

        # The connection is opened lazily on the first command.
        # decode_responses=True so values come back as str, not bytes.
        self.client = client or redis.StrictRedis(
            host=self.redis_host,
            port=self.redis_port,
            password=self.redis_password,
            decode_responses=True
        )

    def _key(self, sid: str) -> str:
        return f"{self.key_prefix}{sid}"

    def set_session(self, sid: str, value: str, expiration: int):
        """
        Store a serialized session record with an expiration time.

        Args:
            sid (str): Session identifier from the cookie
            value (str): JSON encoded session data
            expiration (int): Time in seconds until the record expires
        """
        self.client.setex(self._key(sid), expiration, value)

    def get_session(self, sid: str) -> Optional[str]:
        """
        Retrieve a serialized session record.

        Returns:
            str: The JSON encoded session data if found, None otherwise
        """
        return self.client.get(self._key(sid))

    def delete_session(self, sid: str):
        self.client.delete(self._key(sid))

_redis_client: Optional[RedisClient] = None

def get_redis_client() -> RedisClient:
    """Shared client, created on first use so that Redis is only contacted when enabled."""
    global _redis_client
    if _redis_client is None:
        _redis_client = RedisClient()
    return _redis_client
