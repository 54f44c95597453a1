"""
Event router: validates session state, mutates registry/log, decides fanout
"""

import asyncio
from typing import Any, Dict, Optional
from .constants import CLOSE_CODE_POLICY_VIOLATION, DEFAULT_CHAT_ID, ERROR_MESSAGES
from .models import ConnectionState, InboundEvent, Message, OutboundEvent, Session
from .message_log import MessageLog
from .room import Room
from .session_registry import SessionRegistry
from .logger import get_logger, log_connection_event, log_message_event, log_security_event

logger = get_logger()


class EventRouter:
    """
    Per-room behavioural core

    A single lock covers the room, the registry and the log. Every handler
    performs its mutation and queues its notifications while holding it, so
    observers never see another event's broadcast in between.
    """

    def __init__(self, room: Optional[Room] = None, registry: Optional[SessionRegistry] = None,
                 message_log: Optional[MessageLog] = None):
        self.room = room or Room(DEFAULT_CHAT_ID)
        self.registry = registry or SessionRegistry()
        self.message_log = message_log or MessageLog()
        # connection_id -> lifecycle state
        self._states: Dict[str, ConnectionState] = {}
        self._lock = asyncio.Lock()
        self._handlers = {
            InboundEvent.REGISTER_USER: self._handle_register_user,
            InboundEvent.SEND_MESSAGE: self._handle_send_message,
            InboundEvent.TYPING_START: self._handle_typing_start,
            InboundEvent.TYPING_STOP: self._handle_typing_stop,
        }

    def state_of(self, connection_id: str) -> ConnectionState:
        return self._states.get(connection_id, ConnectionState.CLOSED)

    async def connect(self, connection: Any):
        """Admit a freshly accepted connection into the room, unregistered"""
        async with self._lock:
            self.room.join(connection)
            self._states[connection.connection_id] = ConnectionState.CONNECTED

        log_connection_event(connection.connection_id, "connect", ip_address=getattr(connection, "ip_address", "unknown"))

    async def dispatch(self, connection: Any, event: InboundEvent, data: Any = None):
        """
        Handle one inbound client event

        Args:
            connection: Connection the event arrived on
            event: Parsed inbound event kind
            data: Event payload
        """
        handler = self._handlers[event]
        async with self._lock:
            if self.state_of(connection.connection_id) == ConnectionState.CLOSED:
                logger.debug(f"Dropping {event.value} from closed connection {connection.connection_id}")
                return
            handler(connection, data)

    async def disconnect(self, connection: Any):
        """
        Tear down a connection; announce departure only if it had registered
        """
        connection_id = connection.connection_id
        async with self._lock:
            if self._states.pop(connection_id, None) is None:
                return
            self.room.leave(connection_id)
            session = self.registry.remove(connection_id)
            if session is not None:
                self.room.broadcast(OutboundEvent.USER_LEFT.value, session.id)
                self._broadcast_active_users()

        if session is not None:
            log_connection_event(connection_id, "disconnect", session.username)
        else:
            log_connection_event(connection_id, "disconnect_unregistered")

    async def stats(self) -> Dict[str, int]:
        async with self._lock:
            return {
                "connections": len(self.room),
                "sessions": len(self.registry),
                "messages": len(self.message_log),
            }

    def _handle_register_user(self, connection: Any, username: Any):
        connection_id = connection.connection_id

        if self._states[connection_id] == ConnectionState.REGISTERED:
            log_security_event("duplicate_registration", {"connection": connection_id})
            self.room.send_to(connection_id, OutboundEvent.SYSTEM_ERROR.value, ERROR_MESSAGES["already_registered"])
            return

        success, error_msg, session = self.registry.register(connection_id, username)
        if not success:
            # No session can exist without a name: hard rejection
            self.room.send_to(connection_id, OutboundEvent.SYSTEM_ERROR.value, error_msg)
            self.room.leave(connection_id)
            self._states[connection_id] = ConnectionState.CLOSED
            connection.close(CLOSE_CODE_POLICY_VIOLATION, error_msg)
            return

        self._states[connection_id] = ConnectionState.REGISTERED

        self.room.send_to(connection_id, OutboundEvent.USER_REGISTERED.value, {
            "userId": connection_id,
            "messageHistory": [message.to_dict() for message in self.message_log.all()],
        })
        self.room.broadcast(OutboundEvent.USER_JOINED.value, {
            "id": session.id,
            "username": session.username,
        })
        self._broadcast_active_users()

        log_connection_event(connection_id, "register", session.username)

    def _handle_send_message(self, connection: Any, payload: Any):
        sender = self._registered_session(connection.connection_id)
        if sender is None:
            log_security_event("unauthenticated_send", {"connection": connection.connection_id})
            self.room.send_to(connection.connection_id, OutboundEvent.SYSTEM_ERROR.value, ERROR_MESSAGES["unauthenticated"])
            return

        message = Message.from_session(sender, payload["content"], chat_id=self.room.chat_id)
        self.message_log.append(message)

        recipients = self.room.broadcast(OutboundEvent.NEW_MESSAGE.value, message.to_dict())
        # Sending a message ends the sender's typing indicator
        self.room.broadcast(OutboundEvent.TYPING_STATUS.value, {"userId": sender.id, "isTyping": False})

        log_message_event(message.message_id, sender.username, "broadcast", f"recipients={recipients}")

    def _handle_typing_start(self, connection: Any, _data: Any = None):
        self._broadcast_typing(connection, True)

    def _handle_typing_stop(self, connection: Any, _data: Any = None):
        self._broadcast_typing(connection, False)

    def _broadcast_typing(self, connection: Any, is_typing: bool):
        sender = self._registered_session(connection.connection_id)
        if sender is None:
            # Typing from an unregistered connection is ignored without an error
            return

        self.room.broadcast(OutboundEvent.TYPING_STATUS.value, {
            "userId": sender.id,
            "username": sender.username,
            "isTyping": is_typing,
        }, exclude=sender.id)

    def _registered_session(self, connection_id: str) -> Optional[Session]:
        if self._states.get(connection_id) != ConnectionState.REGISTERED:
            return None
        return self.registry.get(connection_id)

    def _broadcast_active_users(self):
        self.room.broadcast(
            OutboundEvent.ACTIVE_USERS.value,
            [session.to_dict() for session in self.registry.snapshot()],
        )
