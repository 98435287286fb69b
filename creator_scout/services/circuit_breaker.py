"""
Redis-backed circuit breaker for outbound calls.

Instagram starts refusing anonymous search traffic quickly, so repeated
failures trip the breaker and further scrape requests fail fast until the
reset window passes:
  - CLOSED    → calls pass through
  - OPEN      → calls raise CircuitOpenError without touching the network
  - HALF_OPEN → reset window elapsed, the next call is let through as a probe

State lives in Redis so every gunicorn worker sees the same breaker. If
Redis is unreachable the breaker stays out of the way (calls pass).
"""
import logging
import time
from functools import wraps

from redis.exceptions import RedisError

logger = logging.getLogger('services.circuit_breaker')

CLOSED = 'closed'
OPEN = 'open'
HALF_OPEN = 'half_open'


class CircuitOpenError(Exception):
    """Raised when calling through an open circuit breaker."""
    def __init__(self, name, retry_after=None):
        self.name = name
        self.retry_after = retry_after
        super().__init__(f"Circuit breaker '{name}' is OPEN — service unavailable")


class CircuitBreaker:
    """
    Usage:
        cb = CircuitBreaker('instagram', redis_client, failure_threshold=3, reset_timeout=300)
        resp = cb.call(requests.get, url, timeout=20)
    """

    PREFIX = 'cb'

    def __init__(self, name, redis_client, failure_threshold=3, reset_timeout=300):
        self.name = name
        self.redis = redis_client
        self.failure_threshold = failure_threshold
        self.reset_timeout = reset_timeout

    def _key(self, suffix):
        return f'{self.PREFIX}:{self.name}:{suffix}'

    # ── State ─────────────────────────────────────────────────────────

    def _last_failure_at(self):
        raw = self.redis.get(self._key('last_failure'))
        return float(raw) if raw else None

    @property
    def state(self):
        try:
            current = self.redis.get(self._key('state')) or CLOSED
            if current == OPEN:
                last = self._last_failure_at()
                if last is not None and time.time() - last > self.reset_timeout:
                    self.redis.set(self._key('state'), HALF_OPEN)
                    return HALF_OPEN
            return current
        except RedisError:
            return CLOSED

    @property
    def failure_count(self):
        try:
            return int(self.redis.get(self._key('failures')) or 0)
        except RedisError:
            return 0

    def get_health(self):
        """Counters for the stats endpoint."""
        try:
            data = self.redis.hgetall(self._key('health')) or {}
        except RedisError:
            data = {}
        return {
            'name': self.name,
            'state': self.state,
            'failure_count': self.failure_count,
            'failure_threshold': self.failure_threshold,
            'total_success': int(data.get('success', 0)),
            'total_failure': int(data.get('failure', 0)),
            'last_error': data.get('last_error', ''),
        }

    # ── Calls ─────────────────────────────────────────────────────────

    def call(self, func, *args, **kwargs):
        if self.state == OPEN:
            retry_after = None
            try:
                last = self._last_failure_at()
                if last is not None:
                    retry_after = max(0, self.reset_timeout - (time.time() - last))
            except RedisError:
                pass
            raise CircuitOpenError(self.name, retry_after=retry_after)

        try:
            result = func(*args, **kwargs)
        except Exception as e:
            self._on_failure(e)
            raise
        self._on_success()
        return result

    def protect(self, func):
        """Decorator form of call()."""
        @wraps(func)
        def wrapper(*args, **kwargs):
            return self.call(func, *args, **kwargs)
        return wrapper

    def _on_success(self):
        try:
            pipe = self.redis.pipeline()
            pipe.set(self._key('state'), CLOSED)
            pipe.set(self._key('failures'), 0)
            pipe.hincrby(self._key('health'), 'success', 1)
            pipe.execute()
        except RedisError:
            logger.debug("Circuit '%s': could not record success", self.name)

    def _on_failure(self, error):
        try:
            failures = self.redis.incr(self._key('failures'))
            pipe = self.redis.pipeline()
            pipe.set(self._key('last_failure'), str(time.time()))
            pipe.hincrby(self._key('health'), 'failure', 1)
            pipe.hset(self._key('health'), 'last_error', str(error)[:200])
            if failures >= self.failure_threshold:
                pipe.set(self._key('state'), OPEN)
            pipe.execute()
        except RedisError:
            logger.debug("Circuit '%s': could not record failure", self.name)
            return

        if failures >= self.failure_threshold:
            logger.warning("Circuit '%s' OPENED after %d failures: %s", self.name, failures, error)
        else:
            logger.info("Circuit '%s' failure %d/%d: %s", self.name, failures, self.failure_threshold, error)

    def reset(self):
        try:
            pipe = self.redis.pipeline()
            pipe.set(self._key('state'), CLOSED)
            pipe.set(self._key('failures'), 0)
            pipe.delete(self._key('last_failure'))
            pipe.execute()
            logger.info("Circuit '%s' manually reset to CLOSED", self.name)
        except RedisError as e:
            logger.error("Failed to reset circuit '%s': %s", self.name, e)


# ── Registry ──────────────────────────────────────────────────────────────

_registry = {}

BREAKER_SETTINGS = {
    'instagram': dict(failure_threshold=3, reset_timeout=300),
}


def get_breaker(name, redis_client=None, **kwargs):
    """Get or create a named breaker (one per name per process)."""
    if name not in _registry:
        if redis_client is None:
            from creator_scout.extensions import redis_client as rc
            redis_client = rc
        settings = {**BREAKER_SETTINGS.get(name, {}), **kwargs}
        _registry[name] = CircuitBreaker(name, redis_client, **settings)
    return _registry[name]


def get_all_breakers():
    return dict(_registry)


def init_breakers(redis_client):
    """Register breakers for every outbound service."""
    breakers = {
        name: CircuitBreaker(name, redis_client, **settings)
        for name, settings in BREAKER_SETTINGS.items()
    }
    _registry.update(breakers)
    return breakers
