import logging
import os
import tempfile
from pathlib import Path

from .errors import TempFileError
from .formats import DocumentFormat
from .interfaces import TempFilePair

logger = logging.getLogger(__name__)

TEMP_PREFIX = "document"


def _create_temp_file(fmt: DocumentFormat, directory: Path | None) -> Path:
    try:
        fd, name = tempfile.mkstemp(prefix=TEMP_PREFIX, suffix=f".{fmt.extension}", dir=directory)
    except OSError as e:
        raise TempFileError(f"could not create temporary .{fmt.extension} file: {e}") from e
    os.close(fd)
    return Path(name)


class TempWorkspace:
    """Input/output temp file pair scoped to one conversion request.

    Entering creates both files; leaving deletes them whatever the outcome.
    If the output file cannot be created, the input file is deleted before
    the error propagates. ``release`` is idempotent and never raises.
    """

    def __init__(
        self,
        input_format: DocumentFormat,
        output_format: DocumentFormat,
        *,
        directory: Path | None = None,
    ) -> None:
        self._input_format = input_format
        self._output_format = output_format
        self._directory = directory
        self._paths: list[Path] = []

    @property
    def paths(self) -> tuple[Path, ...]:
        return tuple(self._paths)

    def acquire(self) -> TempFilePair:
        try:
            input_path = _create_temp_file(self._input_format, self._directory)
            self._paths.append(input_path)
            output_path = _create_temp_file(self._output_format, self._directory)
            self._paths.append(output_path)
        except TempFileError:
            self.release()
            raise
        logger.debug("Acquired temp files %s and %s", input_path, output_path)
        return TempFilePair(input_path=input_path, output_path=output_path)

    def release(self) -> None:
        while self._paths:
            path = self._paths.pop()
            try:
                path.unlink(missing_ok=True)
            except OSError as e:
                logger.warning("Failed to delete temp file %s: %s", path, e)

    def __enter__(self) -> TempFilePair:
        return self.acquire()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()
