# backend/tourhub/services/cache_service.py
"""
Cache Service for Tourhub

Redis when ``settings.redis_url`` is configured, otherwise an in-process
TTL map shared by every CacheService instance. Values are JSON
serializable documents.

A circuit breaker stops hammering Redis after repeated failures; while it
is open, reads miss and writes are dropped.
"""

from datetime import datetime, timedelta
from enum import Enum
import fnmatch
import json
import logging
import threading
from typing import Any, Callable, Dict, Optional, TypeVar

import redis
from redis import Redis
from redis.exceptions import RedisError
from sqlalchemy.orm import Session

from ..core.config import settings
from .base import BaseService

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CircuitState(Enum):
    """Circuit breaker states."""

    CLOSED = "closed"  # Normal operation
    OPEN = "open"  # Failing, reject calls
    HALF_OPEN = "half_open"  # Testing if service recovered


class CircuitBreaker:
    """Circuit breaker guarding Redis calls."""

    def __init__(self, failure_threshold: int = 5, recovery_timeout: int = 60) -> None:
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self._failure_count = 0
        self._last_failure_time: Optional[datetime] = None
        self._state = CircuitState.CLOSED
        self._lock = threading.Lock()

    @property
    def state(self) -> CircuitState:
        with self._lock:
            if self._state == CircuitState.OPEN and self._last_failure_time:
                if (datetime.now() - self._last_failure_time).total_seconds() >= self.recovery_timeout:
                    self._state = CircuitState.HALF_OPEN
            return self._state

    def call(self, func: Callable[..., T], *args: Any, **kwargs: Any) -> Optional[T]:
        if self.state == CircuitState.OPEN:
            logger.warning("Circuit breaker is OPEN, skipping %s", func.__name__)
            return None
        try:
            result = func(*args, **kwargs)
        except RedisError:
            self._on_failure()
            if self.state == CircuitState.CLOSED:
                raise
            return None
        self._on_success()
        return result

    def _on_success(self) -> None:
        with self._lock:
            self._failure_count = 0
            if self._state == CircuitState.HALF_OPEN:
                self._state = CircuitState.CLOSED
                logger.info("Circuit breaker recovered, closing circuit")

    def _on_failure(self) -> None:
        with self._lock:
            self._failure_count += 1
            self._last_failure_time = datetime.now()
            if self._failure_count >= self.failure_threshold:
                self._state = CircuitState.OPEN
                logger.warning("Circuit breaker opened after %d failures", self._failure_count)


# Process-wide state shared by every CacheService instance
_memory_cache: Dict[str, Any] = {}
_memory_expiry: Dict[str, datetime] = {}
_memory_lock = threading.Lock()
_circuit_breaker = CircuitBreaker()
_redis_client: Optional[Redis] = None
_redis_checked = False


def _connect_redis() -> Optional[Redis]:
    global _redis_client, _redis_checked
    if _redis_checked:
        return _redis_client
    _redis_checked = True
    if not settings.redis_url:
        logger.info("REDIS_URL not set, using in-memory cache")
        return None
    try:
        client = redis.from_url(
            settings.redis_url,
            decode_responses=True,
            socket_keepalive=True,
            socket_connect_timeout=5,
            retry_on_timeout=True,
            health_check_interval=30,
        )
        client.ping()
        logger.info("Connected to Redis")
        _redis_client = client
    except (RedisError, ConnectionError) as e:
        logger.warning("Redis not available: %s. Using in-memory fallback.", e)
        _redis_client = None
    return _redis_client


class CacheService(BaseService):
    """
    Centralized caching service.

    Features:
    - JSON serialization
    - TTL tiers
    - Pattern invalidation
    """

    # TTL Tiers (in seconds)
    TTL_TIERS = {
        "hot": 300,  # 5 minutes - frequently accessed
        "warm": 3600,  # 1 hour - moderate access
        "cold": 86400,  # 24 hours - infrequent access
    }

    def __init__(self, db: Optional[Session] = None, redis_client: Optional[Redis] = None):
        super().__init__(db)
        self.logger = logging.getLogger(__name__)
        self.redis: Optional[Redis] = redis_client if redis_client is not None else _connect_redis()
        self.circuit_breaker = _circuit_breaker

    def _redis_usable(self) -> bool:
        return self.redis is not None and self.circuit_breaker.state != CircuitState.OPEN

    def get(self, key: str) -> Optional[Any]:
        """Get value from cache; None on miss or error."""
        if self.redis is not None:
            if not self._redis_usable():
                return None
            try:
                raw = self.circuit_breaker.call(self.redis.get, key)
            except RedisError as e:
                self.logger.error("Cache get error for key %s: %s", key, e)
                return None
            return json.loads(raw) if raw is not None else None

        with _memory_lock:
            if key not in _memory_cache:
                return None
            expires_at = _memory_expiry.get(key)
            if expires_at is not None and datetime.now() >= expires_at:
                _memory_cache.pop(key, None)
                _memory_expiry.pop(key, None)
                return None
            return _memory_cache[key]

    def set(self, key: str, value: Any, ttl: Optional[int] = None, tier: str = "warm") -> bool:
        """Set value in cache with the given TTL (or the tier's TTL)."""
        if ttl is None:
            ttl = self.TTL_TIERS.get(tier, self.TTL_TIERS["warm"])
        serialized = json.dumps(value, default=str)

        if self.redis is not None:
            if not self._redis_usable():
                return False
            try:
                return bool(self.circuit_breaker.call(self.redis.setex, key, ttl, serialized))
            except RedisError as e:
                self.logger.error("Cache set error for key %s: %s", key, e)
                return False

        with _memory_lock:
            # Store the serialized round trip so callers never share mutable state
            _memory_cache[key] = json.loads(serialized)
            _memory_expiry[key] = datetime.now() + timedelta(seconds=ttl)
        return True

    def delete(self, key: str) -> bool:
        if self.redis is not None:
            if not self._redis_usable():
                return False
            try:
                return bool(self.circuit_breaker.call(self.redis.delete, key))
            except RedisError as e:
                self.logger.error("Cache delete error for key %s: %s", key, e)
                return False

        with _memory_lock:
            existed = key in _memory_cache
            _memory_cache.pop(key, None)
            _memory_expiry.pop(key, None)
            return existed

    def delete_pattern(self, pattern: str) -> int:
        """Delete all keys matching a glob pattern."""
        count = 0
        if self.redis is not None:
            if not self._redis_usable():
                return 0
            try:
                for key in self.redis.scan_iter(match=pattern):
                    if self.redis.delete(key):
                        count += 1
            except RedisError as e:
                self.logger.error("Cache delete pattern error: %s", e)
                return count
        else:
            with _memory_lock:
                for key in [k for k in _memory_cache if fnmatch.fnmatch(k, pattern)]:
                    _memory_cache.pop(key, None)
                    _memory_expiry.pop(key, None)
                    count += 1
        self.logger.info("Deleted %d keys matching pattern: %s", count, pattern)
        return count


def get_cache_service(db: Optional[Session] = None) -> CacheService:
    """Cache service bound to the shared Redis client (or the in-process map)."""
    return CacheService(db)
