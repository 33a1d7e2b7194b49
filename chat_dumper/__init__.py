"""Anonymous Twitch chat capture with VOD-compatible archiving."""

__version__ = "1.0.0"
