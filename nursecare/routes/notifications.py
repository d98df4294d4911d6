from datetime import datetime
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from ..auth import get_current_user
from ..database import get_db
from ..models import User
from ..models_messaging import Notification
from ..services.realtime import publish_change

router = APIRouter(prefix="/notifications", tags=["Notifications"])

# Number of notifications returned to the bell dropdown
NOTIFICATION_LIMIT = 20


class NotificationResponse(BaseModel):
    id: int
    type: str
    title: str
    message: Optional[str] = None
    link: Optional[str] = None
    priority: str
    data: Optional[dict[str, Any]] = None
    is_read: bool
    read_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class NotificationListResponse(BaseModel):
    notifications: list[NotificationResponse]
    unread_count: int


class UnreadCountResponse(BaseModel):
    unread_count: int


def count_unread(db: Session, user_id: int) -> int:
    return (
        db.query(Notification)
        .filter(Notification.user_id == user_id, Notification.is_read.is_(False))
        .count()
    )


def get_user_notification(db: Session, notification_id: int, user_id: int) -> Notification:
    notification = (
        db.query(Notification)
        .filter(Notification.id == notification_id, Notification.user_id == user_id)
        .first()
    )
    if not notification:
        raise HTTPException(status_code=404, detail="Notification not found")
    return notification


@router.get("", response_model=NotificationListResponse)
async def get_notifications(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Latest notifications, newest first, with the unread count"""
    notifications = (
        db.query(Notification)
        .filter(Notification.user_id == current_user.id)
        .order_by(Notification.created_at.desc(), Notification.id.desc())
        .limit(NOTIFICATION_LIMIT)
        .all()
    )
    return NotificationListResponse(
        notifications=notifications,
        unread_count=count_unread(db, current_user.id),
    )


@router.get("/unread-count", response_model=UnreadCountResponse)
async def get_unread_count(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return UnreadCountResponse(unread_count=count_unread(db, current_user.id))


@router.post("/{notification_id}/read", response_model=UnreadCountResponse)
async def mark_notification_read(
    notification_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Mark one notification as read.

    Only an unread notification changes, so repeating the call never lowers the
    unread count a second time, and the count never goes below zero.
    """
    notification = get_user_notification(db, notification_id, current_user.id)

    if not notification.is_read:
        notification.is_read = True
        notification.read_at = datetime.utcnow()
        db.commit()
        publish_change("notifications", "UPDATE", notification.id, user_ids=[current_user.id])

    return UnreadCountResponse(unread_count=max(0, count_unread(db, current_user.id)))


@router.post("/read-all", response_model=UnreadCountResponse)
async def mark_all_read(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    updated = (
        db.query(Notification)
        .filter(Notification.user_id == current_user.id, Notification.is_read.is_(False))
        .update({"is_read": True, "read_at": datetime.utcnow()}, synchronize_session=False)
    )
    db.commit()
    if updated:
        publish_change("notifications", "UPDATE", None, user_ids=[current_user.id], count=updated)
    return UnreadCountResponse(unread_count=0)


@router.delete("/{notification_id}")
async def delete_notification(
    notification_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    notification = get_user_notification(db, notification_id, current_user.id)
    db.delete(notification)
    db.commit()
    publish_change("notifications", "DELETE", notification_id, user_ids=[current_user.id])
    return {"message": "Notification deleted"}
