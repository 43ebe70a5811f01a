"""Pydantic models mirroring the Mattermost ``FileInfo`` and ``Post`` JSON.

Only the fields the hooks read or write are modelled; unknown keys coming from
the server are ignored.
"""
from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field


class FileInfo(BaseModel):
    """Metadata of a file stored by the platform.

    The hooks never mutate an instance they receive. The upload hook returns a
    modified copy which the platform then commits.
    """
    model_config = ConfigDict(extra="ignore")

    id: str = ""
    creator_id: str = ""
    post_id: str = ""
    channel_id: str = ""
    name: str = ""
    extension: str = ""
    size: int = 0
    mime_type: str = ""
    path: str = ""
    thumbnail_path: str = ""
    preview_path: str = ""
    has_preview_image: bool = False
    width: int = 0
    height: int = 0

    @property
    def normalized_extension(self) -> str:
        """Extension lower-cased and without a leading dot."""
        return self.extension.lower().lstrip(".")

    def with_extension(self, extension: str) -> str:
        """Return :attr:`name` with its last extension replaced by *extension*."""
        stem, dot, _ = self.name.rpartition(".")
        if not dot:
            stem = self.name
        return f"{stem}.{extension}"


class Post(BaseModel):
    """A message in a channel."""
    model_config = ConfigDict(extra="ignore")

    id: str = ""
    create_at: int = 0
    user_id: str = ""
    channel_id: str = ""
    root_id: str = ""
    parent_id: str = ""
    message: str = ""
    type: str = ""
    file_ids: List[str] = Field(default_factory=list)
    props: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def reply_to(cls, post: "Post", file_ids: List[str], message: str = "") -> "Post":
        """Build a reply in the same thread, channel and author as *post*."""
        return cls(
            root_id=post.id,
            parent_id=post.id,
            channel_id=post.channel_id,
            user_id=post.user_id,
            message=message,
            file_ids=list(file_ids),
        )
