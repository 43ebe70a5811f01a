"""Exception hierarchy for the conversion and preview pipeline."""
from typing import Optional


class PreviewError(Exception):
    """Base class for every failure raised by the pipeline."""


class ScratchIOError(PreviewError):
    """A scratch file could not be created, written, read or closed."""


class TranscoderError(PreviewError):
    """The transcoder could not be spawned or exited with a non-zero status.

    Attributes:
        returncode: Exit status of the process, None if it never started.
        output: Captured stdout/stderr of the process.
    """

    def __init__(self, message: str, returncode: Optional[int] = None, output: str = ""):
        super().__init__(message)
        self.returncode = returncode
        self.output = output


class StorageError(PreviewError):
    """The platform's file or post API rejected a request."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
