"""Scratch files scoped to a single hook invocation.

Every path handed out by a :class:`ScratchWorkspace` is registered for removal
at the moment it is created, before anything else touches it. Leaving the
``with`` block removes all of them, whichever way the block is left.

Usage:
    with ScratchWorkspace() as workspace:
        source = workspace.stage("clip.*.mov", data)
        target = workspace.reserve(source.with_name(source.name + ".mp4"))
        ...
"""
from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import List, Optional, Union

from .errors import ScratchIOError

logger = logging.getLogger(__name__)

# Upload names can be as long as the filesystem allows, so the parts of a
# pattern around the random token are capped to keep room for derived names.
MAX_PREFIX_LENGTH = 64
MAX_SUFFIX_LENGTH = 16


class ScratchWorkspace:
    """Context manager owning the scratch files of one operation.

    Attributes:
        directory: Directory scratch files are created in. Defaults to the
            system temp directory.
    """

    def __init__(self, directory: Optional[Union[str, Path]] = None) -> None:
        self.directory = str(directory) if directory else None
        self._paths: List[Path] = []

    def __enter__(self) -> "ScratchWorkspace":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.cleanup()

    @property
    def paths(self) -> List[Path]:
        """Paths currently registered for removal."""
        return list(self._paths)

    def stage(self, name_pattern: str, data: bytes) -> Path:
        """Write *data* to a new, uniquely named scratch file.

        The last ``*`` in *name_pattern* is replaced by a random token. Without
        a ``*`` the token is appended. The text before the token keeps its
        first ``MAX_PREFIX_LENGTH`` bytes and the text after it its last
        ``MAX_SUFFIX_LENGTH`` bytes.

        Raises:
            ScratchIOError: If the file cannot be created, written or closed.
        """
        prefix, star, suffix = Path(name_pattern).name.rpartition("*")
        if not star:
            prefix, suffix = suffix, ""
        prefix = _truncate(prefix, MAX_PREFIX_LENGTH)
        suffix = _truncate(suffix, MAX_SUFFIX_LENGTH, keep_end=True)

        try:
            fd, name = tempfile.mkstemp(prefix=prefix, suffix=suffix, dir=self.directory)
        except OSError as exc:
            raise ScratchIOError(f"failed to create temp file: {exc}") from exc
        path = self.reserve(name)

        try:
            fh = os.fdopen(fd, "wb")
        except OSError as exc:
            os.close(fd)
            raise ScratchIOError(f"failed to open temp file: {exc}") from exc
        try:
            fh.write(data)
        except OSError as exc:
            fh.close()
            raise ScratchIOError(f"failed to write temp file: {exc}") from exc
        try:
            fh.close()
        except OSError as exc:
            raise ScratchIOError(f"failed to close temp file: {exc}") from exc

        logger.debug("Staged %d bytes at %s", len(data), path)
        return path

    def reserve(self, path: Union[str, Path]) -> Path:
        """Register *path* for removal on scope exit and return it.

        The path does not need to exist yet; it is typically the output file
        of a transcoder run.
        """
        path = Path(path)
        self._paths.append(path)
        return path

    @staticmethod
    def read(path: Union[str, Path]) -> bytes:
        """Read a file produced inside the workspace.

        Raises:
            ScratchIOError: If the file cannot be read.
        """
        try:
            return Path(path).read_bytes()
        except OSError as exc:
            raise ScratchIOError(f"failed to read {Path(path).name}: {exc}") from exc

    def cleanup(self) -> None:
        """Remove every registered path. Failures are logged, never raised."""
        while self._paths:
            path = self._paths.pop()
            try:
                path.unlink()
            except FileNotFoundError:
                continue
            except OSError as exc:
                logger.warning("Could not remove scratch file %s: %s", path, exc)


def _truncate(text: str, limit: int, keep_end: bool = False) -> str:
    """Cut *text* to at most *limit* UTF-8 bytes without splitting a character."""
    raw = text.encode("utf-8")
    if len(raw) <= limit:
        return text
    raw = raw[-limit:] if keep_end else raw[:limit]
    return raw.decode("utf-8", errors="ignore")
