import json
import logging
from typing import List, Optional

import redis

from app.core.config import settings

logger = logging.getLogger(__name__)

_redis_client = None


def get_redis_client():
    global _redis_client
    if _redis_client is None:
        # Use simple redis client (synchronous) for lightweight operations
        _redis_client = redis.Redis.from_url(settings.redis_url, decode_responses=True)
    return _redis_client


class QuestionSetCache:
    """
    Question sets fetched from the external question bank, keyed by
    subject and size.

    Entries expire after ``ttl`` seconds; ``invalidate`` drops every set
    cached for a subject. A ttl of 0 disables caching. Redis failures are
    logged and behave like a miss.
    """

    prefix = "question_bank"

    def __init__(self, redis_client, ttl: int):
        self.redis_client = redis_client
        self.ttl = ttl

    @property
    def enabled(self) -> bool:
        return self.redis_client is not None and self.ttl > 0

    def _key(self, subject: str, limit: int) -> str:
        return f"{self.prefix}:{subject.lower()}:{limit}"

    def get(self, subject: str, limit: int) -> Optional[List[dict]]:
        if not self.enabled:
            return None
        try:
            raw = self.redis_client.get(self._key(subject, limit))
        except redis.RedisError as e:
            logger.error(f"Failed to read question set cache: {e}")
            return None
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except (TypeError, ValueError):
            logger.warning(f"Discarding corrupt cache entry for {subject}")
            return None

    def set(self, subject: str, limit: int, questions: List[dict]) -> bool:
        if not self.enabled:
            return False
        try:
            return bool(
                self.redis_client.setex(
                    self._key(subject, limit), self.ttl, json.dumps(questions)
                )
            )
        except redis.RedisError as e:
            logger.error(f"Failed to write question set cache: {e}")
            return False

    def invalidate(self, subject: str) -> int:
        """Drop every cached set for a subject. Returns the number of keys removed."""
        if self.redis_client is None:
            return 0
        try:
            keys = list(self.redis_client.scan_iter(match=f"{self.prefix}:{subject.lower()}:*"))
            if not keys:
                return 0
            return int(self.redis_client.delete(*keys))
        except redis.RedisError as e:
            logger.error(f"Failed to invalidate question set cache: {e}")
            return 0


def get_question_cache() -> QuestionSetCache:
    """FastAPI dependency; override in tests to inject another client."""
    return QuestionSetCache(get_redis_client(), settings.question_bank_cache_ttl)
