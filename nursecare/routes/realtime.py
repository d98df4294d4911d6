"""
Server-Sent Events stream of the real-time change feed

Subscribes to the caller's user channel and organization channel on Redis and
forwards each change event. Browsers' EventSource cannot set headers, so the
access token is also accepted as a ``token`` query parameter.
"""

import asyncio
import json
import logging
from collections.abc import AsyncGenerator
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import StreamingResponse
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from redis.exceptions import RedisError
from sqlalchemy.orm import Session

from ..auth import find_user_organization, resolve_token_user
from ..database import get_db
from ..services.realtime import (
    change_feed_enabled,
    get_async_redis_client,
    org_channel,
    user_channel,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/realtime", tags=["Realtime"])

optional_security = HTTPBearer(auto_error=False)

HEARTBEAT_SECONDS = 25


def format_sse(data: str, event: Optional[str] = None) -> str:
    lines = []
    if event:
        lines.append(f"event: {event}")
    lines.append(f"data: {data}")
    return "\n".join(lines) + "\n\n"


async def change_stream(channels: list[str]) -> AsyncGenerator[str, None]:
    """Relay pub/sub messages as SSE frames, with a heartbeat comment between them"""
    client = get_async_redis_client()
    pubsub = client.pubsub()
    try:
        await pubsub.subscribe(*channels)
        yield format_sse(json.dumps({"channels": channels}), event="ready")

        while True:
            message = await pubsub.get_message(ignore_subscribe_messages=True, timeout=HEARTBEAT_SECONDS)
            if message is None:
                yield ": heartbeat\n\n"
                continue
            yield format_sse(message["data"], event="change")
    except RedisError as e:
        logger.warning(f"⚠️ Change feed stream ended: {e}")
    except asyncio.CancelledError:
        logger.debug(f"Change feed client disconnected from {channels}")
        raise
    finally:
        await pubsub.unsubscribe()
        await pubsub.aclose()
        await client.aclose()


@router.get("/stream")
async def stream_changes(
    token: Optional[str] = Query(None),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(optional_security),
    db: Session = Depends(get_db),
):
    """Stream change events for the caller's user and organization channels"""
    access_token = credentials.credentials if credentials else token
    if not access_token:
        raise HTTPException(status_code=401, detail="Not authenticated")

    user = resolve_token_user(db, access_token)

    if not change_feed_enabled():
        raise HTTPException(status_code=503, detail="Real-time change feed is not configured")

    channels = [user_channel(user.id)]
    organization = find_user_organization(db, user)
    if organization:
        channels.append(org_channel(organization.id))

    logger.info(f"📡 User {user.id} subscribed to {channels}")
    return StreamingResponse(
        change_stream(channels),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )