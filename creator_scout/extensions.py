"""
Shared client instances.

Importing this module never connects: redis-py opens the socket on first
command, so tests and local runs without Redis still import cleanly.
"""
import logging
import redis

from creator_scout.config import REDIS_URL

logger = logging.getLogger('creator_scout.extensions')

# ── Redis ─────────────────────────────────────────────────────────────────────
redis_client = redis.from_url(REDIS_URL, decode_responses=True)
