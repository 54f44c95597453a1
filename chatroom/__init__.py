"""
Broadcast Chat Server core
Session registry, message log and event fanout for a single shared room
"""

from .models import (
    Session,
    Message,
    UserStatus,
    MessageType,
    MessageStatus,
    ConnectionState,
    InboundEvent,
    OutboundEvent,
    utc_timestamp
)
from .validators import validate_username, parse_client_frame
from .session_registry import SessionRegistry
from .message_log import MessageLog
from .room import Room
from .event_router import EventRouter
from .transport import WebSocketConnection
from .constants import *
from .logger import (
    get_logger,
    log_security_event,
    log_connection_event,
    log_message_event,
    log_websocket_event,
    log_system_event
)

__all__ = [
    'Session',
    'Message',
    'UserStatus',
    'MessageType',
    'MessageStatus',
    'ConnectionState',
    'InboundEvent',
    'OutboundEvent',
    'utc_timestamp',
    'validate_username',
    'parse_client_frame',
    'SessionRegistry',
    'MessageLog',
    'Room',
    'EventRouter',
    'WebSocketConnection',
    'get_logger',
    'log_security_event',
    'log_connection_event',
    'log_message_event',
    'log_websocket_event',
    'log_system_event'
]
