"""
Logging configuration for the broadcast chat server
"""

import logging
import re
import sys
from typing import Optional
from .constants import LOG_LEVEL, LOG_SANITIZATION_PATTERN


class SanitizingFormatter(logging.Formatter):
    """Formatter that strips control characters smuggled in through usernames or content"""

    def format(self, record):
        message = super().format(record)
        return re.sub(LOG_SANITIZATION_PATTERN, '', message)


def get_logger(name: str = "broadcast_chat") -> logging.Logger:
    """
    Get a logger instance with the server's formatting

    Args:
        name: Logger name

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(logging.DEBUG)

        formatter = SanitizingFormatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )
        handler.setFormatter(formatter)

        logger.addHandler(handler)
        logger.setLevel(LOG_LEVEL)

        # Keep uvicorn's root configuration from duplicating our lines
        logger.propagate = False

    return logger


def log_security_event(event_type: str, details: dict, logger: Optional[logging.Logger] = None):
    """
    Log rejected or suspicious client behaviour with structured data

    Args:
        event_type: Type of security event
        details: Event details
        logger: Logger instance (optional)
    """
    if logger is None:
        logger = get_logger()

    logger.warning(f"SECURITY_EVENT: {event_type} | {details}")


def log_connection_event(connection_id: str, action: str, username: str = "", ip_address: str = "unknown"):
    """
    Log connection lifecycle events (connect/register/disconnect)

    Args:
        connection_id: Transport-assigned connection identity
        action: Lifecycle action
        username: Registered display name, if any
        ip_address: Client IP address
    """
    logger = get_logger()
    user_info = f" | user={username}" if username else ""
    logger.info(f"CONNECTION_EVENT: {action} | conn={connection_id}{user_info} | ip={ip_address}")


def log_message_event(message_id: str, username: str, action: str, details: str = ""):
    """
    Log chat message events

    Args:
        message_id: Unique message identifier
        username: Sender display name
        action: Action (append/broadcast)
        details: Additional details
    """
    logger = get_logger()
    logger.info(f"MESSAGE_EVENT: {action} | id={message_id[:8]}... | user={username} | {details}")


def log_websocket_event(event_type: str, connection_id: str, details: str = ""):
    """Log WebSocket protocol events"""
    logger = get_logger()
    logger.debug(f"WEBSOCKET_EVENT: {event_type} | conn={connection_id} | {details}")


def log_system_event(event_type: str, details: str, level: str = "info"):
    """
    Log system-level events

    Args:
        event_type: Type of system event
        details: Event details
        level: Log level (info/warning/error)
    """
    logger = get_logger()
    log_message = f"SYSTEM_EVENT: {event_type} | {details}"

    if level == "warning":
        logger.warning(log_message)
    elif level == "error":
        logger.error(log_message)
    else:
        logger.info(log_message)
