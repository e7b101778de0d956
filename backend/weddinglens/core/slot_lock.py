"""Per-(photographer, date) mutual exclusion around booking creation.

Redis ``SET NX EX`` locks are used when ``settings.redis_url`` is set so that
several API workers serialize on the same slot. Without Redis (or when Redis
is unreachable) the lock degrades to an in-process keyed ``threading.Lock``;
the partial unique index on active bookings remains the last line of defence.
"""

from __future__ import annotations

from contextlib import contextmanager
from datetime import date
import logging
import threading
import time
from typing import Dict, Iterator, Optional
import uuid

from redis import Redis

from weddinglens.core.config import settings
from weddinglens.monitoring.prometheus_metrics import prometheus_metrics

logger = logging.getLogger(__name__)

_SYNC_REDIS: Optional[Redis] = None
_SYNC_REDIS_LOCK = threading.Lock()

_LOCAL_LOCKS: Dict[str, "_LocalSlot"] = {}
_LOCAL_LOCKS_GUARD = threading.Lock()

_POLL_INTERVAL_S = 0.05


def slot_key(photographer_id: int, event_date: date) -> str:
    return f"weddinglens:lock:slot:{photographer_id}:{event_date.isoformat()}"


def _get_sync_redis() -> Optional[Redis]:
    global _SYNC_REDIS
    if not settings.redis_url:
        return None
    if _SYNC_REDIS is not None:
        return _SYNC_REDIS
    with _SYNC_REDIS_LOCK:
        if _SYNC_REDIS is not None:
            return _SYNC_REDIS
        try:
            client = Redis.from_url(
                settings.redis_url,
                encoding="utf-8",
                decode_responses=True,
            )
            client.ping()
        except Exception as exc:
            logger.warning("slot_lock_redis_unavailable: %s", exc)
            return None
        _SYNC_REDIS = client
        return _SYNC_REDIS


class _LocalSlot:
    __slots__ = ("lock", "users")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.users = 0


def _checkout_local(key: str) -> threading.Lock:
    with _LOCAL_LOCKS_GUARD:
        slot = _LOCAL_LOCKS.get(key)
        if slot is None:
            slot = _LocalSlot()
            _LOCAL_LOCKS[key] = slot
        slot.users += 1
        return slot.lock


def _checkin_local(key: str) -> None:
    # Entries live only while some request holds or waits on the slot.
    with _LOCAL_LOCKS_GUARD:
        slot = _LOCAL_LOCKS[key]
        slot.users -= 1
        if slot.users == 0:
            del _LOCAL_LOCKS[key]


def _acquire_redis(client: Redis, key: str, token: str, ttl_s: int, wait_s: float) -> bool:
    deadline = time.monotonic() + wait_s
    while True:
        if client.set(key, token, nx=True, ex=ttl_s):
            return True
        if time.monotonic() >= deadline:
            return False
        time.sleep(_POLL_INTERVAL_S)


def _release_redis(client: Redis, key: str, token: str) -> None:
    try:
        # Only drop the lock if it is still ours (it may have expired and been re-taken).
        if client.get(key) == token:
            client.delete(key)
            prometheus_metrics.record_slot_lock("release", "success")
        else:
            prometheus_metrics.record_slot_lock("release", "not_found")
    except Exception as exc:
        prometheus_metrics.record_slot_lock("release", "error")
        logger.warning(
            "slot_lock_release_failed",
            extra={"key": key, "error": str(exc), "error_type": type(exc).__name__},
        )


@contextmanager
def slot_lock(
    photographer_id: int,
    event_date: date,
    *,
    ttl_s: Optional[int] = None,
    wait_s: Optional[float] = None,
) -> Iterator[bool]:
    """
    Hold the booking slot for ``photographer_id`` on ``event_date``.

    Yields True when the lock is held, False when another request kept it
    for longer than ``wait_s``.
    """
    key = slot_key(photographer_id, event_date)
    ttl = ttl_s if ttl_s is not None else settings.slot_lock_ttl_seconds
    wait = wait_s if wait_s is not None else settings.slot_lock_wait_seconds

    client = _get_sync_redis()
    if client is not None:
        token = uuid.uuid4().hex
        try:
            acquired = _acquire_redis(client, key, token, ttl, wait)
        except Exception as exc:
            prometheus_metrics.record_slot_lock("acquire", "error")
            logger.warning(
                "slot_lock_acquire_failed",
                extra={"key": key, "error": str(exc), "error_type": type(exc).__name__},
            )
        else:
            prometheus_metrics.record_slot_lock("acquire", "success" if acquired else "blocked")
            try:
                yield acquired
            finally:
                if acquired:
                    _release_redis(client, key, token)
            return
    elif settings.redis_url:
        prometheus_metrics.record_slot_lock("acquire", "redis_unavailable")

    lock = _checkout_local(key)
    try:
        acquired = lock.acquire(timeout=wait)
        prometheus_metrics.record_slot_lock("acquire", "success" if acquired else "blocked")
        try:
            yield acquired
        finally:
            if acquired:
                lock.release()
                prometheus_metrics.record_slot_lock("release", "success")
    finally:
        _checkin_local(key)
