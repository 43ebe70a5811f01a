"""Fixed ffmpeg argument profiles.

Three operations are supported:
    - REMUX: QuickTime to MP4 with H.264 video and MP2 audio
    - STILL_FRAME: one frame, one second into the video, as a JPEG
    - ANIMATED_PREVIEW: a looping, palette-optimized GIF

The parameters are deliberately not configurable so the same input always
produces the same command line.
"""
from enum import Enum
from pathlib import Path
from typing import List, Sequence, Union

# Remux
REMUX_VIDEO_CODEC = "h264"
REMUX_AUDIO_CODEC = "mp2"

# Still frame
STILL_FRAME_OFFSET = "00:00:01"
STILL_FRAME_QUALITY = 2
# Extra arguments that shrink a still frame to thumbnail size
THUMBNAIL_WIDTH = 120
THUMBNAIL_ARGS = ("-vf", f"scale={THUMBNAIL_WIDTH}:-1")

# Animated preview
ANIMATED_PREVIEW_FPS = 6
ANIMATED_PREVIEW_WIDTH = 320
ANIMATED_PREVIEW_FILTER = (
    f"fps={ANIMATED_PREVIEW_FPS},"
    f"scale={ANIMATED_PREVIEW_WIDTH}:-1:flags=lanczos,"
    "split[s0][s1];[s0]palettegen[p];[s1][p]paletteuse"
)
ANIMATED_PREVIEW_LOOP = 0  # loop forever


class TranscodeOperation(str, Enum):
    """Operations the transcoder knows how to run."""
    REMUX = "remux"
    STILL_FRAME = "still_frame"
    ANIMATED_PREVIEW = "animated_preview"


def build_command(
    binary: str,
    operation: TranscodeOperation,
    input_path: Union[str, Path],
    output_path: Union[str, Path],
    extra_args: Sequence[str] = (),
) -> List[str]:
    """Build the argument vector for *operation*.

    *extra_args* are inserted right before the output path.
    """
    src, dst = str(input_path), str(output_path)

    if operation == TranscodeOperation.REMUX:
        args = ["-i", src, "-vcodec", REMUX_VIDEO_CODEC, "-acodec", REMUX_AUDIO_CODEC]
    elif operation == TranscodeOperation.STILL_FRAME:
        args = [
            "-ss", STILL_FRAME_OFFSET,
            "-i", src,
            "-frames:v", "1",
            "-q:v", str(STILL_FRAME_QUALITY),
        ]
    elif operation == TranscodeOperation.ANIMATED_PREVIEW:
        args = [
            "-i", src,
            "-vf", ANIMATED_PREVIEW_FILTER,
            "-loop", str(ANIMATED_PREVIEW_LOOP),
        ]
    else:
        raise ValueError(f"Unknown transcode operation: {operation}")

    return [binary, *args, *extra_args, dst]
