"""
Configuration constants for the Twitch chat dumper

This module contains all configurable constants used throughout the application.
Each constant can be overridden by setting an environment variable with the same name.
"""

import os


def _get_env_int(name: str, default: int) -> int:
    """Retrieve an integer value from an environment variable.

    Attempts to parse the environment variable as an integer. If the variable
    is not set or cannot be parsed, prints a warning and returns the default value.

    Args:
        name: The name of the environment variable to read.
        default: The default integer value to return if parsing fails.

    Returns:
        The parsed integer value from the environment, or the default if unavailable.
    """
    value = os.getenv(name)
    if value is not None:
        try:
            return int(value)
        except ValueError:
            print(
                f"Warning: Invalid integer value for {name}='{value}', using default {default}"
            )
    return default


def _get_env_float(name: str, default: float) -> float:
    """Retrieve a float value from an environment variable.

    Same contract as ``_get_env_int`` but for floats.
    """
    value = os.getenv(name)
    if value is not None:
        try:
            return float(value)
        except ValueError:
            print(
                f"Warning: Invalid float value for {name}='{value}', using default {default}"
            )
    return default


def _get_env_str(name: str, default: str) -> str:
    value = os.getenv(name)
    return value if value else default


# Chat relay endpoint
TWITCH_IRC_WS_URL = _get_env_str(
    "TWITCH_IRC_WS_URL", "wss://irc-ws.chat.twitch.tv:443"
)  # Websocket endpoint of the chat relay
TWITCH_IRC_CONNECT_TIMEOUT = _get_env_float(
    "TWITCH_IRC_CONNECT_TIMEOUT", 15.0
)  # Seconds to wait for the websocket handshake
TWITCH_CAPABILITIES = "twitch.tv/commands twitch.tv/tags"  # Requested on open
ANONYMOUS_PASS = "SCHMOOPIIE"  # Any value is accepted for justinfan logins
ANONYMOUS_NICK_PREFIX = "justinfan"
ANONYMOUS_NICK_MAX = 1_000_000  # Exclusive upper bound of the guest suffix

# Live heuristic
LIVE_WINDOW_SIZE = _get_env_int(
    "LIVE_WINDOW_SIZE", 10
)  # Number of recent messages kept for the live heuristic
LIVE_DEBOUNCE_SECONDS = _get_env_float(
    "LIVE_DEBOUNCE_SECONDS", 60.0
)  # Minimum seconds between two live inferences
LIVE_TERMS: tuple[str, ...] = ("live", "hi youtube", "hi yt", "pog", "pogchamp")

# Session state retention
SESSION_MAX_USERS = _get_env_int(
    "SESSION_MAX_USERS", 50_000
)  # Max user records kept per connection (0 disables the cap)
SESSION_IDLE_SECONDS = _get_env_int(
    "SESSION_IDLE_SECONDS", 6 * 3600
)  # Records idle longer than this are removed by sweep()

# Tag decoding
IGNORED_TAGS: frozenset[str] = frozenset({"client-nonce", "flags"})
SUB_MSG_IDS: frozenset[str] = frozenset({"sub", "resub", "subgift"})

# Archive
ARCHIVE_LINE_SUFFIX = ".line"  # Suffix of the incremental append file
ARCHIVE_DEFAULT_COLOR = "#FFFFFF"
ARCHIVE_VIDEO_TITLE = "Chat Dump"
