"""
Data models for the broadcast chat server
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict
import uuid
from .constants import DEFAULT_CHAT_ID


def utc_timestamp() -> str:
    """ISO-8601 UTC timestamp with millisecond precision, e.g. 2024-05-01T12:00:00.000Z"""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class UserStatus(str, Enum):
    ONLINE = "online"


class MessageType(str, Enum):
    TEXT = "text"


class MessageStatus(str, Enum):
    DELIVERED = "delivered"


class ConnectionState(str, Enum):
    """Per-connection lifecycle enforced by the event router"""
    CONNECTED = "connected"
    REGISTERED = "registered"
    CLOSED = "closed"


class InboundEvent(str, Enum):
    """Events a client may send"""
    REGISTER_USER = "register_user"
    SEND_MESSAGE = "send_message"
    TYPING_START = "typing_start"
    TYPING_STOP = "typing_stop"


class OutboundEvent(str, Enum):
    """Events the server emits"""
    USER_REGISTERED = "user_registered"
    USER_JOINED = "user_joined"
    ACTIVE_USERS = "active_users"
    NEW_MESSAGE = "new_message"
    TYPING_STATUS = "typing_status"
    USER_LEFT = "user_left"
    SYSTEM_ERROR = "system_error"


@dataclass(frozen=True)
class Session:
    """A registered identity bound to one live connection"""
    id: str
    username: str
    status: UserStatus = UserStatus.ONLINE
    joined_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization"""
        return {
            "id": self.id,
            "username": self.username,
            "status": self.status.value,
        }


@dataclass(frozen=True)
class Message:
    """Immutable chat message; sender fields are a snapshot taken at send time"""
    sender_id: str
    sender_name: str
    content: str
    message_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    chat_id: str = DEFAULT_CHAT_ID
    type: MessageType = MessageType.TEXT
    timestamp: str = field(default_factory=utc_timestamp)
    status: MessageStatus = MessageStatus.DELIVERED

    @classmethod
    def from_session(cls, session: Session, content: str, chat_id: str = DEFAULT_CHAT_ID) -> "Message":
        return cls(
            sender_id=session.id,
            sender_name=session.username,
            content=content,
            chat_id=chat_id,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization"""
        return {
            "messageId": self.message_id,
            "chatId": self.chat_id,
            "senderId": self.sender_id,
            "senderName": self.sender_name,
            "content": self.content,
            "type": self.type.value,
            "timestamp": self.timestamp,
            "status": self.status.value,
        }
