"""
Session registry: the single source of truth for who is online
"""

from typing import Dict, List, Optional, Tuple
from .models import Session
from .validators import validate_username


class SessionRegistry:
    """
    Mapping of connection identity -> registered Session

    Not locked on its own; the EventRouter serializes all access.
    Dicts keep insertion order, so snapshots come out in registration order.
    """

    def __init__(self):
        self._sessions: Dict[str, Session] = {}

    def register(self, connection_id: str, username) -> Tuple[bool, str, Optional[Session]]:
        """
        Create a session for a connection, replacing any existing entry

        Args:
            connection_id: Transport-assigned connection identity
            username: Display name supplied by the client

        Returns:
            Tuple of (success, error_message, session)
        """
        is_valid, error_msg = validate_username(username)
        if not is_valid:
            return False, error_msg, None

        # Re-inserting would keep the old position; drop first so order reflects this registration
        self._sessions.pop(connection_id, None)
        session = Session(id=connection_id, username=username)
        self._sessions[connection_id] = session
        return True, "", session

    def get(self, connection_id: str) -> Optional[Session]:
        return self._sessions.get(connection_id)

    def remove(self, connection_id: str) -> Optional[Session]:
        """Delete and return the session, or None if the connection never registered"""
        return self._sessions.pop(connection_id, None)

    def snapshot(self) -> List[Session]:
        return list(self._sessions.values())

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, connection_id: str) -> bool:
        return connection_id in self._sessions
