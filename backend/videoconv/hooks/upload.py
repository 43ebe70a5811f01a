"""Pre-commit upload hook: convert QuickTime uploads to MP4.

The hook runs before the platform stores an uploaded file. It either leaves
the upload alone, replaces it with remuxed MP4 bytes, or rejects it.

Return contract (same as Mattermost's ``FileWillBeUploaded``):
    (None, "")          -> keep the original bytes, output left unwritten
    (None, "message")   -> reject the upload and show *message* to the user
    (FileInfo, "")      -> commit the replacement bytes written to *output*
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import BinaryIO, Optional, Tuple, Union

from ..config import PluginConfiguration
from ..errors import PreviewError
from ..platform.schemas import FileInfo
from ..transcoder import TranscodeOperation, Transcoder
from ..workspace import ScratchWorkspace

logger = logging.getLogger(__name__)

SOURCE_EXTENSION = "mov"
TARGET_EXTENSION = "mp4"
TARGET_MIME_TYPE = "video/mp4"


def is_eligible(info: FileInfo, configuration: PluginConfiguration) -> bool:
    """Return True if *info* should be converted under *configuration*."""
    if not configuration.convert_mov_to_mp4:
        return False
    if info.normalized_extension != SOURCE_EXTENSION:
        return False
    if configuration.exceeds_size_limit(info.size):
        logger.debug(
            "Skipping conversion of %s: %d bytes exceeds limit of %d",
            info.name, info.size, configuration.conversion_file_size_limit,
        )
        return False
    return True


def file_will_be_uploaded(
    info: Optional[FileInfo],
    file: BinaryIO,
    output: BinaryIO,
    *,
    configuration: PluginConfiguration,
    transcoder: Transcoder,
    scratch_dir: Optional[Union[str, Path]] = None,
) -> Tuple[Optional[FileInfo], str]:
    """Convert an uploaded ``.mov`` file to ``.mp4``.

    Args:
        info: Metadata of the upload, as proposed by the platform.
        file: Stream of the uploaded bytes.
        output: Stream receiving the replacement bytes.
        configuration: Configuration snapshot for this invocation.
        transcoder: Transcoder used for the remux.
        scratch_dir: Directory for scratch files (system temp dir by default).

    Returns:
        The replacement FileInfo (or None) and an error message (or "").
    """
    if info is None or not is_eligible(info, configuration):
        return None, ""

    logger.debug("Received info: %s", info)

    try:
        data = file.read()
    except OSError as exc:
        return _reject(f"failed to read video: {exc}")

    # Size was unknown when the platform built the FileInfo.
    if info.size == 0 and configuration.exceeds_size_limit(len(data)):
        logger.debug("Skipping conversion of %s: %d bytes exceeds limit", info.name, len(data))
        return None, ""

    try:
        with ScratchWorkspace(scratch_dir) as workspace:
            source = workspace.stage(f"{Path(info.name).name}.*.{SOURCE_EXTENSION}", data)
            target = workspace.reserve(f"{source}.{TARGET_EXTENSION}")

            result = transcoder.run(TranscodeOperation.REMUX, source, target)
            result.raise_for_status()
            converted = workspace.read(target)
    except PreviewError as exc:
        return _reject(f"failed to convert video: {exc}")

    try:
        output.write(converted)
    except OSError as exc:
        return _reject(f"failed to write new video: {exc}")

    new_info = info.model_copy(update={
        "name": info.with_extension(TARGET_EXTENSION),
        "extension": TARGET_EXTENSION,
        "mime_type": TARGET_MIME_TYPE,
        "size": len(converted),
        "thumbnail_path": "",
        "preview_path": "",
        "has_preview_image": False,
    })
    logger.debug("Created new info: %s", new_info)
    return new_info, ""


def _reject(message: str) -> Tuple[None, str]:
    logger.warning("%s", message)
    return None, message
