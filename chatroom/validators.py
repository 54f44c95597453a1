"""
Input validation for inbound WebSocket frames and registration
"""

import json
from typing import Any, Optional, Tuple
from .constants import ERROR_MESSAGES
from .models import InboundEvent
from .logger import log_security_event


def validate_username(username: Any) -> Tuple[bool, str]:
    """
    Validate a display name at registration

    Any non-empty string is accepted; names are neither normalized nor
    required to be unique.

    Args:
        username: Raw username from the register_user payload

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not isinstance(username, str) or not username:
        log_security_event("invalid_username", {"username": repr(username)})
        return False, ERROR_MESSAGES["invalid_username"]

    return True, ""


def parse_client_frame(raw: str) -> Tuple[bool, str, Optional[InboundEvent], Any]:
    """
    Parse and validate one text frame of the form {"event": ..., "data": ...}

    Args:
        raw: Text frame received from the client

    Returns:
        Tuple of (is_valid, error_message, event, data)
    """
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError:
        return False, ERROR_MESSAGES["invalid_json"], None, None

    if not isinstance(payload, dict) or not isinstance(payload.get("event"), str):
        log_security_event("invalid_frame", {"payload_type": type(payload).__name__})
        return False, ERROR_MESSAGES["invalid_frame"], None, None

    event_name = payload["event"]
    try:
        event = InboundEvent(event_name)
    except ValueError:
        log_security_event("unknown_event", {"event": event_name})
        return False, ERROR_MESSAGES["unknown_event"].format(event=event_name), None, None

    data = payload.get("data")

    if event == InboundEvent.SEND_MESSAGE:
        if not isinstance(data, dict) or not isinstance(data.get("content"), str):
            log_security_event("invalid_payload", {"event": event_name})
            return False, ERROR_MESSAGES["invalid_payload"].format(event=event_name), None, None

    return True, "", event, data
