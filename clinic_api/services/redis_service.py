"""
Redis-backed booking locks.

Closes the check-then-write race on appointment creation: when
BOOKING_LOCKS_ENABLED is set, every doctor/patient involved in a booking
is locked (in sorted key order) until the write is committed.
"""
import logging
from contextlib import contextmanager

import redis
from flask import current_app
from redis.exceptions import RedisError

from clinic_api.errors import StorageError, ValidationFailure


logger = logging.getLogger(__name__)

_client = None


def get_client() -> redis.Redis:
    global _client
    if _client is None:
        _client = redis.Redis(
            host=current_app.config.get("REDIS_HOST", "localhost"),
            port=int(current_app.config.get("REDIS_PORT", 6379)),
            db=0,
            decode_responses=True,
        )
    return _client


def _lock_key(key: str) -> str:
    return f"booking-lock:{key}"


@contextmanager
def booking_lock(*keys: str):
    if not current_app.config.get("BOOKING_LOCKS_ENABLED"):
        yield
        return

    client = get_client()
    timeout = current_app.config.get("BOOKING_LOCK_TIMEOUT_SECONDS", 10)
    wait = current_app.config.get("BOOKING_LOCK_WAIT_SECONDS", 3)
    held = []
    try:
        for key in sorted(set(keys)):
            lock = client.lock(_lock_key(key), timeout=timeout, blocking_timeout=wait)
            if not lock.acquire():
                logger.info(f"[booking_lock] Busy key={key}")
                raise ValidationFailure(
                    ValidationFailure.BOOKING_IN_PROGRESS,
                    "Another booking for the same doctor or patient is in progress. Please retry.",
                )
            held.append(lock)
        yield
    except RedisError as e:
        logger.exception(f"[booking_lock] Redis failure for keys={keys}: {e}")
        raise StorageError("booking_lock") from e
    finally:
        for lock in reversed(held):
            try:
                lock.release()
            except RedisError as e:
                # expired before release; the write has already committed
                logger.warning(f"[booking_lock] Release failed for {lock.name}: {e}")
