"""
Shared client instances — Redis for the RQ job queue.

redis.from_url() does not connect until the first command, so importing this
module is always safe (even when Redis is unreachable during tests).
RQ pickles job payloads, so responses must stay undecoded bytes.
"""
import redis

from lead_engine.config import REDIS_URL

# ── Redis ─────────────────────────────────────────────────────────────────────
redis_client = redis.from_url(REDIS_URL)
