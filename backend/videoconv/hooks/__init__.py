"""Pre-commit and post-commit hooks of the video converter."""
from .preview import (
    AnimatedPreviewProfile,
    PreviewProfile,
    StillFramePreviewProfile,
    get_profile,
    message_has_been_posted,
)
from .upload import file_will_be_uploaded

__all__ = [
    "AnimatedPreviewProfile",
    "PreviewProfile",
    "StillFramePreviewProfile",
    "file_will_be_uploaded",
    "get_profile",
    "message_has_been_posted",
]
