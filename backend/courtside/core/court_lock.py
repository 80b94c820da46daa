"""
Per-court advisory lock backed by Redis.

Only used when ``COURT_LOCK_ENABLED`` is set, as a fallback for storage
that cannot run admissions at SERIALIZABLE isolation. The lock fails open:
if Redis is unreachable the admission still runs and relies on in-transaction
re-validation alone.
"""

from __future__ import annotations

from contextlib import contextmanager
import logging
import threading
import time
from typing import Iterator, Optional

from redis import Redis

from ..monitoring.prometheus_metrics import prometheus_metrics
from .config import settings

logger = logging.getLogger(__name__)

_SYNC_REDIS: Optional[Redis] = None
_SYNC_REDIS_LOCK = threading.Lock()


def _lock_key(court_id: str) -> str:
    return f"{settings.lock_namespace}:lock:court:{court_id}:admission"


def _get_sync_redis() -> Optional[Redis]:
    global _SYNC_REDIS
    if _SYNC_REDIS is not None:
        return _SYNC_REDIS
    with _SYNC_REDIS_LOCK:
        if _SYNC_REDIS is not None:
            return _SYNC_REDIS
        try:
            client = Redis.from_url(settings.redis_url, encoding="utf-8", decode_responses=True)
            client.ping()
        except Exception as exc:
            logger.warning("court_lock_redis_unavailable: %s", exc)
            return None
        _SYNC_REDIS = client
        return _SYNC_REDIS


def acquire_court_lock(court_id: str, ttl_s: int = 30, wait_s: float = 5.0) -> bool:
    """
    Try to take the court lock, polling up to ``wait_s`` seconds.

    Returns True when the lock is held or Redis is unavailable, False when
    another admission kept the court locked for the whole wait.
    """
    client = _get_sync_redis()
    if client is None:
        prometheus_metrics.record_court_lock("acquire", "redis_unavailable")
        return True

    deadline = time.monotonic() + wait_s
    try:
        while True:
            if client.set(_lock_key(court_id), str(time.time()), nx=True, ex=ttl_s):
                prometheus_metrics.record_court_lock("acquire", "success")
                return True
            if time.monotonic() >= deadline:
                prometheus_metrics.record_court_lock("acquire", "blocked")
                return False
            time.sleep(0.05)
    except Exception as exc:
        prometheus_metrics.record_court_lock("acquire", "error")
        logger.warning(
            "court_lock_acquire_failed",
            extra={"court_id": court_id, "error": str(exc), "error_type": type(exc).__name__},
        )
        return True


def release_court_lock(court_id: str) -> None:
    client = _get_sync_redis()
    if client is None:
        return
    try:
        deleted = client.delete(_lock_key(court_id))
        prometheus_metrics.record_court_lock("release", "success" if deleted else "not_found")
    except Exception as exc:
        prometheus_metrics.record_court_lock("release", "error")
        logger.warning(
            "court_lock_release_failed",
            extra={"court_id": court_id, "error": str(exc), "error_type": type(exc).__name__},
        )


@contextmanager
def court_lock(court_id: str, enabled: Optional[bool] = None) -> Iterator[bool]:
    """Hold the advisory lock for the duration of one admission call."""
    if enabled is None:
        enabled = settings.court_lock_enabled
    if not enabled:
        yield True
        return

    acquired = acquire_court_lock(court_id, ttl_s=settings.court_lock_ttl_seconds)
    try:
        yield acquired
    finally:
        if acquired:
            release_court_lock(court_id)
