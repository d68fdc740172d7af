import json
import logging
import redis
from flask import current_app
from datetime import datetime
from typing import List, Optional

from src.ui.cards import LogEvent, humanize_age


logger = logging.getLogger("activity_service")

# ✅ Redis client, built from the app config on first use
r = None

ACTIVITY_TTL_SEC = 604800  # 7 days
MAX_ENTRIES = 50
UNREAD_WINDOW_SEC = 3600
REDIS_TIMEOUT_SEC = 2


def _client():
    global r
    if r is None:
        r = redis.Redis(
            host=current_app.config["REDIS_HOST"],
            port=current_app.config["REDIS_PORT"],
            db=0,
            decode_responses=True,
            socket_connect_timeout=REDIS_TIMEOUT_SEC,
            socket_timeout=REDIS_TIMEOUT_SEC,
        )
    return r


# ✅ Helper for redis key formatting
def _key(clinic_id: int) -> str:
    return f"activity:{clinic_id}"


def record_activity(clinic_id: int, title: str, body: Optional[str] = None) -> bool:
    """Push one event onto the clinic's activity feed (newest first)."""
    entry = {
        "title": title,
        "body": body,
        "created_at": datetime.utcnow().isoformat(),
    }
    try:
        key = _key(clinic_id)
        client = _client()
        client.lpush(key, json.dumps(entry))
        client.ltrim(key, 0, MAX_ENTRIES - 1)
        client.expire(key, ACTIVITY_TTL_SEC)
        return True
    except redis.RedisError as e:
        logger.warning(f"[record_activity] Redis unavailable for clinic_id={clinic_id}: {e}")
        return False


def list_recent_activity(clinic_id: int, limit: int = 10, now: Optional[datetime] = None) -> List[LogEvent]:
    """
    Return the latest activity as LogEvents for the dashboard.
    Redis outages only cost the feed, never the page.
    """
    now = now or datetime.utcnow()
    try:
        raw_items = _client().lrange(_key(clinic_id), 0, limit - 1)
    except redis.RedisError as e:
        logger.warning(f"[list_recent_activity] Redis unavailable for clinic_id={clinic_id}: {e}")
        return []

    events: List[LogEvent] = []
    for raw in raw_items:
        try:
            data = json.loads(raw)
            created = datetime.fromisoformat(data["created_at"])
        except (ValueError, KeyError, TypeError):
            continue  # skip corrupted entries

        events.append(
            LogEvent(
                title=data.get("title") or "",
                body=data.get("body"),
                time=humanize_age(created, now),
                unread=(now - created).total_seconds() < UNREAD_WINDOW_SEC,
            )
        )
    return events


def clear_activity(clinic_id: int):
    try:
        _client().delete(_key(clinic_id))
    except redis.RedisError as e:
        logger.warning(f"[clear_activity] Redis unavailable for clinic_id={clinic_id}: {e}")
