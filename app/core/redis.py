"""
Redis/Valkey client configuration.

- All configuration from centralized settings (config.py)
- Never use os.getenv directly
- The client is created lazily; redis-py only connects on the first command
"""
from __future__ import annotations
import redis
from core.config import Settings, get_settings

_client: redis.Redis | None = None
_settings: Settings | None = None


def configure(settings: Settings) -> None:
    global _settings, _client
    _settings = settings
    _client = None


def get_redis() -> redis.Redis:
    global _client
    if _client is None:
        s = _settings or get_settings()
        ssl = s.REDIS_SSL.lower() in ("1", "true", "yes")
        _client = redis.Redis(
            host=s.REDIS_HOST,
            port=s.REDIS_PORT,
            password=s.REDIS_PASSWORD,
            ssl=ssl,
            ssl_cert_reqs=None,
            decode_responses=True,
            socket_keepalive=True,
        )
    return _client


def set_client(client) -> None:
    """Swap the client (used by tests and scripts)."""
    global _client
    _client = client
