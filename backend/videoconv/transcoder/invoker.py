"""Run ffmpeg and capture its outcome."""
import logging
import shlex
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence, Union

from ..errors import TranscoderError
from .profiles import TranscodeOperation, build_command

logger = logging.getLogger(__name__)

# ffmpeg prints a full banner and stream dump; keep error messages readable.
MAX_DIAGNOSTIC_CHARS = 2000


@dataclass
class TranscodeResult:
    """Outcome of one transcoder run.

    Attributes:
        operation: The operation that was run.
        returncode: Exit status of the process.
        output: Captured stdout and stderr.
    """
    operation: TranscodeOperation
    returncode: int
    output: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    def raise_for_status(self) -> None:
        """Raise :class:`TranscoderError` if the run failed."""
        if self.ok:
            return
        detail = self.output.strip()[-MAX_DIAGNOSTIC_CHARS:]
        message = f"{self.operation.value} exited with status {self.returncode}"
        if detail:
            message = f"{message}: {detail}"
        raise TranscoderError(message, returncode=self.returncode, output=self.output)


class Transcoder:
    """Invokes the ffmpeg binary for a :class:`TranscodeOperation`.

    There is no retry and no timeout: a run blocks until ffmpeg exits.
    """

    def __init__(self, binary: str = "ffmpeg") -> None:
        self.binary = binary

    def run(
        self,
        operation: TranscodeOperation,
        input_path: Union[str, Path],
        output_path: Union[str, Path],
        extra_args: Sequence[str] = (),
    ) -> TranscodeResult:
        """Run *operation* from *input_path* to *output_path*.

        Returns:
            TranscodeResult with the exit status and diagnostic output.

        Raises:
            TranscoderError: If the process cannot be started.
        """
        cmd = build_command(self.binary, operation, input_path, output_path, extra_args)
        logger.debug("Running command: %s", shlex.join(cmd))
        try:
            proc = subprocess.run(
                cmd,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                check=False,
            )
        except OSError as exc:
            raise TranscoderError(f"failed to start {self.binary}: {exc}") from exc

        output = (proc.stdout or b"").decode(errors="replace")
        if proc.returncode != 0:
            logger.debug("%s exited with status %s", self.binary, proc.returncode)
        return TranscodeResult(operation=operation, returncode=proc.returncode, output=output)
