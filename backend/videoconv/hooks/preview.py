"""Post-commit hook: reply to video posts with preview media.

Once a message with attachments has been stored, each video attachment is
downloaded, run through a :class:`PreviewProfile` and the resulting images are
uploaded. A single reply referencing all of them is then posted in the
message's thread.

Failure Policy:
    One attachment failing is logged and skipped; the others still get a
    preview. A failure to create the reply is logged and not retried. Files
    already uploaded for it are left in place.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple, Union

from ..config import PluginConfiguration
from ..errors import PreviewError, StorageError
from ..platform.api import PluginAPI
from ..platform.schemas import FileInfo, Post
from ..transcoder import TranscodeOperation, Transcoder
from ..transcoder.profiles import THUMBNAIL_ARGS
from ..workspace import ScratchWorkspace

logger = logging.getLogger(__name__)

# Extensions a preview is generated for. ``mov`` is only seen here when the
# upload hook is disabled or skipped the file.
PREVIEW_EXTENSIONS = frozenset({"mp4", "m4v", "mov"})


@dataclass(frozen=True)
class PreviewArtifact:
    """One image a profile produces from a video.

    Attributes:
        operation: Transcoder operation producing the image.
        suffix: Suffix appended to the staged video path for the output file.
        upload_name: Filename the image is uploaded under.
        extra_args: Arguments appended to the operation's fixed ones.
    """
    operation: TranscodeOperation
    suffix: str
    upload_name: str
    extra_args: Tuple[str, ...] = ()


class PreviewProfile(ABC):
    """Strategy deciding which preview images are generated for a video."""

    name: str = ""

    @property
    @abstractmethod
    def artifacts(self) -> Tuple[PreviewArtifact, ...]:
        """Artifacts generated for every eligible attachment."""


class AnimatedPreviewProfile(PreviewProfile):
    """A single looping GIF. This is the default profile."""

    name = "animated"

    @property
    def artifacts(self) -> Tuple[PreviewArtifact, ...]:
        return (
            PreviewArtifact(TranscodeOperation.ANIMATED_PREVIEW, "_preview.gif", "preview.gif"),
        )


class StillFramePreviewProfile(PreviewProfile):
    """Two JPEGs of the frame one second into the video.

    The preview keeps the video's resolution, the thumbnail is scaled down
    to a fixed width.
    """

    name = "still"

    @property
    def artifacts(self) -> Tuple[PreviewArtifact, ...]:
        return (
            PreviewArtifact(TranscodeOperation.STILL_FRAME, "_thumb.jpg", "thumbnail.jpg", THUMBNAIL_ARGS),
            PreviewArtifact(TranscodeOperation.STILL_FRAME, "_preview.jpg", "preview.jpg"),
        )


_PROFILES = {
    AnimatedPreviewProfile.name: AnimatedPreviewProfile,
    StillFramePreviewProfile.name: StillFramePreviewProfile,
}


def get_profile(name: str) -> PreviewProfile:
    """Return the profile registered under *name*.

    Raises:
        ValueError: If no profile has that name.
    """
    try:
        return _PROFILES[name]()
    except KeyError:
        raise ValueError(f"Unknown preview profile: {name}") from None


def create_preview_uploads(
    api: PluginAPI,
    info: FileInfo,
    file_id: str,
    channel_id: str,
    *,
    transcoder: Transcoder,
    profile: PreviewProfile,
    scratch_dir: Optional[Union[str, Path]] = None,
) -> List[str]:
    """Generate the preview images of one video and upload them.

    Every artifact of the profile is generated before anything is uploaded,
    so a failing extraction leaves no partial uploads behind.

    Returns:
        IDs of the uploaded preview files.

    Raises:
        PreviewError: If fetching, staging, transcoding or uploading fails.
    """
    data = api.get_file(file_id)

    images: List[Tuple[str, bytes]] = []
    with ScratchWorkspace(scratch_dir) as workspace:
        source = workspace.stage(f"{Path(info.name).name}.*.{info.extension}", data)
        for artifact in profile.artifacts:
            target = workspace.reserve(f"{source}{artifact.suffix}")
            result = transcoder.run(artifact.operation, source, target, artifact.extra_args)
            result.raise_for_status()
            images.append((artifact.upload_name, workspace.read(target)))

    uploaded: List[str] = []
    for upload_name, image in images:
        uploaded_info = api.upload_file(image, channel_id, upload_name)
        logger.debug("Uploaded %s for file %s as %s", upload_name, file_id, uploaded_info.id)
        uploaded.append(uploaded_info.id)
    return uploaded


def message_has_been_posted(
    api: PluginAPI,
    post: Post,
    *,
    configuration: PluginConfiguration,
    transcoder: Transcoder,
    profile: PreviewProfile,
    scratch_dir: Optional[Union[str, Path]] = None,
) -> Optional[Post]:
    """Post a reply with preview images for the video attachments of *post*.

    Attachments are processed one after the other.

    Returns:
        The created reply, or None if nothing was posted.
    """
    logger.debug("Post: %s", post)

    if not configuration.create_preview_image:
        return None

    file_ids: List[str] = []
    for file_id in post.file_ids:
        try:
            info = api.get_file_info(file_id)
        except StorageError as exc:
            logger.warning("failed to get file info for %s: %s", file_id, exc)
            continue
        if info is None:
            logger.debug("Missing fileinfo, skipping...")
            continue

        if info.normalized_extension not in PREVIEW_EXTENSIONS:
            logger.debug("Unsupported extension '%s', skipping...", info.extension)
            continue

        try:
            file_ids.extend(create_preview_uploads(
                api,
                info,
                file_id,
                post.channel_id,
                transcoder=transcoder,
                profile=profile,
                scratch_dir=scratch_dir,
            ))
        except PreviewError as exc:
            logger.warning("failed to create preview file upload: %s", exc)
            continue

    if not file_ids:
        return None

    reply = Post.reply_to(post, file_ids)
    logger.debug("New post: %s", reply)

    try:
        return api.create_post(reply)
    except StorageError as exc:
        logger.warning("failed to create post: %s", exc)
        return None
