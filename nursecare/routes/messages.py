import logging
from datetime import datetime
from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, field_validator
from sqlalchemy import or_
from sqlalchemy.orm import Session

from ..auth import get_current_user
from ..database import get_db
from ..models import User
from ..models_messaging import Message
from ..security_utils import sanitize_html
from ..services.notification_service import notify_user
from ..services.realtime import publish_change

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/messages", tags=["Messages"])


class MessageCreate(BaseModel):
    recipient_id: int
    content: str
    message_type: Literal["text", "file", "appointment"] = "text"
    file_url: Optional[str] = None
    appointment_id: Optional[int] = None

    @field_validator("content")
    @classmethod
    def check_content(cls, v):
        if not v or not v.strip():
            raise ValueError("Message cannot be empty")
        return v


class MessageResponse(BaseModel):
    id: int
    conversation_id: str
    sender_id: int
    recipient_id: int
    content: str
    message_type: str
    file_url: Optional[str] = None
    appointment_id: Optional[int] = None
    is_read: bool
    read_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ConversationResponse(BaseModel):
    conversation_id: str
    other_user_id: int
    other_user_name: Optional[str] = None
    last_message: MessageResponse
    unread_count: int


def conversation_id_for(user_a: int, user_b: int) -> str:
    """Stable id for a two-person conversation regardless of who writes first"""
    return "-".join(str(uid) for uid in sorted([user_a, user_b]))


@router.post("", response_model=MessageResponse)
async def send_message(
    data: MessageCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if data.recipient_id == current_user.id:
        raise HTTPException(status_code=400, detail="Cannot send a message to yourself")

    recipient = db.query(User).filter(User.id == data.recipient_id).first()
    if not recipient:
        raise HTTPException(status_code=404, detail="Recipient not found")

    message = Message(
        conversation_id=conversation_id_for(current_user.id, recipient.id),
        sender_id=current_user.id,
        recipient_id=recipient.id,
        content=sanitize_html(data.content),
        message_type=data.message_type,
        file_url=data.file_url,
        appointment_id=data.appointment_id,
    )
    db.add(message)
    db.commit()
    db.refresh(message)
    logger.info(f"💬 Message {message.id} sent in conversation {message.conversation_id}")

    publish_change(
        "messages",
        "INSERT",
        message.id,
        user_ids=[current_user.id, recipient.id],
        conversation_id=message.conversation_id,
    )
    notify_user(
        db,
        recipient.id,
        "new_message",
        f"New message from {current_user.full_name}",
        message=message.content[:200],
        link=f"/messages/{message.conversation_id}",
        data={"conversation_id": message.conversation_id, "message_id": message.id},
    )
    return message


@router.get("/conversations", response_model=list[ConversationResponse])
async def get_conversations(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Caller's conversations, most recent first, with unread counts"""
    messages = (
        db.query(Message)
        .filter(or_(Message.sender_id == current_user.id, Message.recipient_id == current_user.id))
        .order_by(Message.created_at.desc(), Message.id.desc())
        .all()
    )

    conversations: dict[str, dict] = {}
    for message in messages:
        entry = conversations.get(message.conversation_id)
        if entry is None:
            other_id = message.recipient_id if message.sender_id == current_user.id else message.sender_id
            entry = conversations[message.conversation_id] = {
                "conversation_id": message.conversation_id,
                "other_user_id": other_id,
                "last_message": message,
                "unread_count": 0,
            }
        if message.recipient_id == current_user.id and not message.is_read:
            entry["unread_count"] += 1

    other_ids = {c["other_user_id"] for c in conversations.values()}
    names = {
        u.id: u.full_name for u in db.query(User).filter(User.id.in_(other_ids)).all()
    } if other_ids else {}

    return [
        ConversationResponse(
            conversation_id=c["conversation_id"],
            other_user_id=c["other_user_id"],
            other_user_name=names.get(c["other_user_id"]),
            last_message=MessageResponse.model_validate(c["last_message"]),
            unread_count=c["unread_count"],
        )
        for c in conversations.values()
    ]


@router.get("/conversations/{conversation_id}", response_model=list[MessageResponse])
async def get_conversation_messages(
    conversation_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if str(current_user.id) not in conversation_id.split("-"):
        raise HTTPException(status_code=404, detail="Conversation not found")

    return (
        db.query(Message)
        .filter(Message.conversation_id == conversation_id)
        .order_by(Message.created_at, Message.id)
        .all()
    )


@router.post("/conversations/{conversation_id}/read")
async def mark_conversation_read(
    conversation_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Mark every message addressed to the caller in the conversation as read"""
    updated = (
        db.query(Message)
        .filter(
            Message.conversation_id == conversation_id,
            Message.recipient_id == current_user.id,
            Message.is_read.is_(False),
        )
        .update({"is_read": True, "read_at": datetime.utcnow()}, synchronize_session=False)
    )
    db.commit()
    if updated:
        publish_change("messages", "UPDATE", None, user_ids=[current_user.id], conversation_id=conversation_id)
    return {"updated": updated}


@router.post("/{message_id}/read", response_model=MessageResponse)
async def mark_message_read(
    message_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Only the recipient can mark a message read"""
    message = db.query(Message).filter(Message.id == message_id).first()
    if not message or current_user.id not in (message.sender_id, message.recipient_id):
        raise HTTPException(status_code=404, detail="Message not found")
    if message.recipient_id != current_user.id:
        raise HTTPException(status_code=403, detail="Only the recipient can mark a message as read")

    if not message.is_read:
        message.is_read = True
        message.read_at = datetime.utcnow()
        db.commit()
        db.refresh(message)
        publish_change("messages", "UPDATE", message.id, user_ids=[message.sender_id, message.recipient_id])
    return message
