"""
Room: the fanout scope for chat content and presence
"""

from typing import Any, Dict, List, Optional
from .logger import get_logger, log_security_event

logger = get_logger()


class Room:
    """Set of open connections that share broadcasts"""

    def __init__(self, chat_id: str):
        self.chat_id = chat_id
        # connection_id -> connection
        self._members: Dict[str, Any] = {}

    def join(self, connection: Any):
        self._members[connection.connection_id] = connection

    def leave(self, connection_id: str) -> Optional[Any]:
        return self._members.pop(connection_id, None)

    def members(self) -> List[Any]:
        return list(self._members.values())

    def send_to(self, connection_id: str, event: str, data: Any) -> bool:
        """
        Deliver an event to a single member

        Returns:
            True if the member exists and the event was queued
        """
        connection = self._members.get(connection_id)
        if connection is None:
            return False
        return self._deliver(connection, event, data)

    def broadcast(self, event: str, data: Any, exclude: Optional[str] = None) -> int:
        """
        Deliver an event to every member, optionally skipping one connection

        Args:
            event: Outbound event name
            data: Event payload
            exclude: Connection id that should not receive the event

        Returns:
            Number of members the event was queued for
        """
        successful_sends = 0
        for connection_id, connection in self._members.items():
            if connection_id == exclude:
                continue
            if self._deliver(connection, event, data):
                successful_sends += 1

        logger.debug(f"Broadcast {event} to {successful_sends} members of {self.chat_id}")
        return successful_sends

    def _deliver(self, connection: Any, event: str, data: Any) -> bool:
        try:
            connection.send(event, data)
            return True
        except Exception as e:
            # One broken connection must not stop delivery to the others
            logger.error(f"Failed to send {event} to {connection.connection_id}: {e}")
            log_security_event("event_send_failed", {
                "recipient": connection.connection_id,
                "event": event,
                "error": str(e)
            })
            return False

    def __len__(self) -> int:
        return len(self._members)

    def __contains__(self, connection_id: str) -> bool:
        return connection_id in self._members
