"""ffmpeg invocation for the conversion and preview pipeline."""
from .invoker import TranscodeResult, Transcoder
from .profiles import TranscodeOperation, build_command

__all__ = ["TranscodeOperation", "TranscodeResult", "Transcoder", "build_command"]
