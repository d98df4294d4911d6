"""
Notification Service
Creates in-app notifications for workflow events (shift assignment, declines,
swap requests, messages) and optionally mirrors them by email
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ..email_service import send_notification_email
from ..models import Organization, User
from ..models_messaging import Notification
from .realtime import publish_change

logger = logging.getLogger(__name__)


def notify_user(
    db: Session,
    user_id: Optional[int],
    notification_type: str,
    title: str,
    message: Optional[str] = None,
    link: Optional[str] = None,
    priority: str = "normal",
    data: Optional[dict] = None,
) -> Optional[Notification]:
    """
    Persist an in-app notification and publish it on the user's change feed.

    Returns None when there is nobody to notify (e.g. staff without an account).
    """
    if user_id is None:
        logger.debug(f"⚠️ No recipient for {notification_type} notification, skipping")
        return None

    notification = Notification(
        user_id=user_id,
        type=notification_type,
        title=title,
        message=message,
        link=link,
        priority=priority,
        data=data,
    )
    db.add(notification)
    db.commit()
    db.refresh(notification)

    publish_change("notifications", "INSERT", notification.id, user_ids=[user_id])
    logger.info(f"🔔 {notification_type} notification created for user {user_id}")
    return notification


def notify_organization_owner(
    db: Session, organization_id: int, notification_type: str, title: str, **kwargs
) -> Optional[Notification]:
    organization = db.query(Organization).filter(Organization.id == organization_id).first()
    if not organization:
        return None
    return notify_user(db, organization.owner_id, notification_type, title, **kwargs)


async def send_notification(
    db: Session,
    user_id: Optional[int],
    notification_type: str,
    title: str,
    message: Optional[str] = None,
    link: Optional[str] = None,
    email: bool = False,
    **kwargs,
) -> dict:
    """
    In-app notification plus an optional email copy.

    Email failures are logged and reported in the result, never raised.
    """
    result = {"notification_id": None, "email_sent": False, "email_error": None}

    notification = notify_user(db, user_id, notification_type, title, message, link, **kwargs)
    if notification:
        result["notification_id"] = notification.id

    if email and user_id is not None:
        user = db.query(User).filter(User.id == user_id).first()
        if user and user.email:
            try:
                logger.info(f"📧 Sending {notification_type} email to {user.email}")
                await send_notification_email(user.email, title, message or title, link)
                result["email_sent"] = True
            except Exception as e:
                result["email_error"] = str(e)
                logger.error(f"❌ Failed to send {notification_type} email to {user.email}: {e}")

    return result
