"""
Configuration constants for the broadcast chat server
"""

import os

# Single implicit room
DEFAULT_CHAT_ID = "group-1"

# Server settings
HOST = os.getenv("CHAT_HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "8000"))

# WebSocket settings
WS_PING_INTERVAL = 20
WS_PING_TIMEOUT = 10
CLOSE_CODE_POLICY_VIOLATION = 1008

# Logging levels
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Control characters stripped from user-supplied text before it reaches the logs
LOG_SANITIZATION_PATTERN = r'[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]'

# CORS allow-list
_DEFAULT_CORS_ORIGINS = [
    "https://groupchatug.netlify.app",
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:8000",
    "*",
]
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", ",".join(_DEFAULT_CORS_ORIGINS)).split(",")
    if origin.strip()
]
CORS_ALLOW_CREDENTIALS = True
CORS_ALLOW_METHODS = ["GET", "POST"]

# Error messages
ERROR_MESSAGES = {
    "invalid_username": "Username cannot be empty.",
    "unauthenticated": "Authentication failed. Please refresh.",
    "already_registered": "User is already registered.",
    "invalid_json": "Invalid JSON format",
    "invalid_frame": "Frame must be an object with an 'event' field",
    "unknown_event": "Unknown event: {event}",
    "invalid_payload": "Invalid payload for {event}",
}
