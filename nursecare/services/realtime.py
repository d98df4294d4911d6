"""
Real-time change feed over Redis pub/sub

Every mutation publishes a small event on the organization channel and/or the
user channel so connected clients know to refetch. Redis being unavailable
never fails the mutation: publishing operates in fail-open mode.
"""

import json
import logging
from datetime import datetime
from typing import Optional

import redis
import redis.asyncio as aioredis

from ..config import REDIS_URL

logger = logging.getLogger(__name__)

redis_client: Optional[redis.Redis] = None


def org_channel(organization_id: int) -> str:
    return f"changes:org:{organization_id}"


def user_channel(user_id: int) -> str:
    return f"changes:user:{user_id}"


def get_redis_client() -> Optional[redis.Redis]:
    """Get or create the Redis client. Returns None when no REDIS_URL is configured."""
    global redis_client

    if redis_client is None and REDIS_URL:
        logger.info("🔄 Initializing Redis connection for change feed...")
        redis_client = redis.from_url(
            REDIS_URL,
            decode_responses=True,
            socket_connect_timeout=5,
            socket_timeout=5,
            retry_on_timeout=True,
        )
    return redis_client


def change_feed_enabled() -> bool:
    return bool(REDIS_URL)


def get_async_redis_client() -> Optional[aioredis.Redis]:
    """Fresh asyncio client for long-lived subscriptions (one per stream)."""
    if not REDIS_URL:
        return None
    return aioredis.from_url(REDIS_URL, decode_responses=True)


def publish_change(
    table: str,
    event: str,
    record_id: Optional[int],
    organization_id: Optional[int] = None,
    user_ids: Optional[list[int]] = None,
    **extra,
) -> int:
    """
    Publish a change event; returns the number of channels published to.

    Args:
        table: Table that changed (e.g. "staff_shifts")
        event: INSERT, UPDATE or DELETE
        record_id: Primary key of the changed row
        organization_id: Publish on the organization channel when set
        user_ids: Publish on each user's channel
    """
    channels = []
    if organization_id is not None:
        channels.append(org_channel(organization_id))
    for user_id in user_ids or []:
        if user_id is not None:
            channels.append(user_channel(user_id))

    if not channels:
        return 0

    payload = json.dumps(
        {
            "table": table,
            "event": event,
            "id": record_id,
            "at": datetime.utcnow().isoformat(),
            **extra,
        },
        default=str,
    )

    try:
        client = get_redis_client()
        if client is None:
            logger.debug(f"Change feed disabled, skipping {event} {table}#{record_id}")
            return 0
        for channel in channels:
            client.publish(channel, payload)
        return len(channels)
    except redis.RedisError as e:
        logger.warning(f"⚠️ Change feed publish failed (fail-open) for {table}#{record_id}: {e}")
        return 0
