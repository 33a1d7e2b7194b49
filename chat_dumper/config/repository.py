from __future__ import annotations

import json
import logging
import os
from typing import Any

from pydantic import ValidationError

from .model import ChannelConfig, normalize_login


class ChannelRegistry:
    """Read-only view of the channel registry JSON file.

    Accepts either a list of channel records or ``{"channels": [...]}``.
    Invalid records are skipped with a warning.
    """

    def __init__(self, path: str | os.PathLike[str]):
        if not isinstance(path, str | os.PathLike):
            raise TypeError("path must be str or os.PathLike")
        self.path = str(path)
        self._file_mtime: float | None = None
        self._cached: dict[str, ChannelConfig] | None = None

    def load_raw(self) -> list[dict[str, Any]]:
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return []
        except (OSError, ValueError) as e:
            logging.error(f"Channel registry load error: {e}")
            return []
        if isinstance(data, dict) and "channels" in data:
            data = data["channels"]
        if not isinstance(data, list):
            return []
        return [c for c in data if isinstance(c, dict)]

    def load(self) -> dict[str, ChannelConfig]:
        try:
            mtime = os.stat(self.path).st_mtime
        except OSError:
            mtime = None
        if self._cached is not None and mtime == self._file_mtime:
            return self._cached
        channels: dict[str, ChannelConfig] = {}
        for raw in self.load_raw():
            try:
                channel = ChannelConfig.from_dict(raw)
            except ValidationError as e:
                logging.warning(
                    f"⚠️ Skipping invalid channel record login={raw.get('login')}: "
                    f"{e.error_count()} error(s)"
                )
                continue
            channels[channel.login] = channel
        self._cached = channels
        self._file_mtime = mtime
        return channels

    def get(self, login: str) -> ChannelConfig | None:
        try:
            key = normalize_login(login)
        except ValueError:
            return None
        return self.load().get(key)

    def list_channels(self) -> list[ChannelConfig]:
        return sorted(self.load().values(), key=lambda c: c.login)
