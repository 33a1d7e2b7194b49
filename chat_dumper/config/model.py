from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator


def normalize_login(value: Any) -> str:
    """Lowercase a channel login and strip whitespace and a leading '#'."""
    if not isinstance(value, str):
        raise ValueError("channel login must be a string")
    login = value.strip().lstrip("#").lower()
    if not login:
        raise ValueError("channel login must not be empty")
    return login


class ChannelConfig(BaseModel):
    """A channel record from the channel registry.

    Attributes:
        login: Channel login (lowercase, no '#').
        channel_id: Numeric channel id, if known.
        download_chat: Whether chat should be captured for this channel.
    """

    login: str = Field(min_length=1, max_length=25)
    channel_id: str = ""
    download_chat: bool = True

    @field_validator("login", mode="before")
    @classmethod
    def validate_login(cls, v: Any) -> str:
        return normalize_login(v)

    @field_validator("channel_id", mode="before")
    @classmethod
    def validate_channel_id(cls, v: Any) -> str:
        if v is None:
            return ""
        value = str(v).strip()
        if value and not value.isdigit():
            raise ValueError("channel_id must be numeric")
        return value

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ChannelConfig:
        return cls.model_validate(dict(data))

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump()


class DumperConfig(BaseModel):
    """Options for one chat capture run."""

    channel: str
    output: Path | None = None
    channel_id: str = ""
    duration: float | None = Field(default=None, gt=0)
    recover: bool = False
    download_chat: bool = True

    @field_validator("channel", mode="before")
    @classmethod
    def validate_channel(cls, v: Any) -> str:
        return normalize_login(v)

    @model_validator(mode="after")
    def validate_output(self) -> DumperConfig:
        if self.recover and self.output is None:
            raise ValueError("recover requires an output path")
        return self

    def merged_with(self, channel: ChannelConfig | None) -> DumperConfig:
        """Apply a registry record.

        A missing channel id is filled in; ``download_chat`` is taken from the
        record, so a channel marked off is joined but never archived.
        """
        if channel is None:
            return self
        update: dict[str, Any] = {"download_chat": channel.download_chat}
        if not self.channel_id and channel.channel_id:
            update["channel_id"] = channel.channel_id
        return self.model_copy(update=update)
