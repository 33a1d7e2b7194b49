"""Archive document models.

Field names and ``_id`` aliases follow the VOD comment JSON consumed by
third-party chat renderers, so dumps can be fed to them unchanged.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class _ArchiveModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)


class EmoticonRef(_ArchiveModel):
    emoticon_id: str


class MessageFragment(_ArchiveModel):
    text: str
    emoticon: EmoticonRef | None = None


class Emoticon(_ArchiveModel):
    id: str = Field(alias="_id")
    begin: int
    end: int


class UserBadge(_ArchiveModel):
    id: str = Field(alias="_id")
    version: str | None = None


class Commenter(_ArchiveModel):
    id: str = Field(default="", alias="_id")
    bio: str = ""
    created_at: str
    display_name: str = ""
    logo: str = ""
    name: str = ""
    type: str = "user"
    updated_at: str


class CommentMessage(_ArchiveModel):
    body: str
    emoticons: list[Emoticon] = Field(default_factory=list)
    fragments: list[MessageFragment] = Field(default_factory=list)
    user_badges: list[UserBadge] = Field(default_factory=list)
    user_color: str = "#FFFFFF"
    is_action: bool = False


class ArchiveComment(_ArchiveModel):
    id: str = Field(alias="_id")
    channel_id: str = ""
    content_id: str = ""
    content_offset_seconds: float
    content_type: str = "video"
    commenter: Commenter
    message: CommentMessage
    created_at: str
    source: str = "chat"
    state: str = "published"
    updated_at: str
    more_replies: bool = False


class VideoMetadata(_ArchiveModel):
    created_at: str
    description: str = ""
    duration: str = ""
    id: str = ""
    language: str = ""
    published_at: str
    thumbnail_url: str = ""
    title: str = "Chat Dump"
    type: str = "archive"
    url: str = ""
    user_id: str = ""
    user_name: str = ""
    view_count: int = 0
    viewable: str = ""
    start: float = 0
    end: float = 0


class Streamer(_ArchiveModel):
    name: str
    id: int | None = None


class ArchiveDump(_ArchiveModel):
    comments: list[ArchiveComment] = Field(default_factory=list)
    video: VideoMetadata
    streamer: Streamer
