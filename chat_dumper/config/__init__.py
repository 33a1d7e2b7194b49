"""Configuration package exports."""

from .model import ChannelConfig, DumperConfig, normalize_login
from .repository import ChannelRegistry

__all__ = ["ChannelConfig", "ChannelRegistry", "DumperConfig", "normalize_login"]
