import logging
from pathlib import Path
from typing import BinaryIO

from .errors import (
    ConversionFailed,
    MissingParameter,
    UnsupportedFormat,
    UploadTooLarge,
    UploadWriteFailed,
)
from .formats import DocumentFormat, FormatRegistry
from .interfaces import ConversionRequest, ConverterGateway
from .workspace import TempWorkspace

logger = logging.getLogger(__name__)

CHUNK = 1024 * 1024


class ConversionService:
    """Core domain service for one-shot document conversion.

    This service is framework-agnostic. Its methods are the pipeline steps
    the HTTP controller composes: negotiate formats, open a temp workspace,
    persist the upload, convert. Blocking methods are meant to be run off
    the event loop.
    """

    def __init__(
        self,
        registry: FormatRegistry,
        converter: ConverterGateway,
        *,
        temp_dir: str | Path | None = None,
        max_upload_mb: int = 300,
    ) -> None:
        self._registry = registry
        self._converter = converter
        self._temp_dir = Path(temp_dir).resolve() if temp_dir is not None else None
        self._max_upload_bytes = max_upload_mb * 1024 * 1024
        self._max_upload_mb = max_upload_mb
        if self._temp_dir is not None:
            self._temp_dir.mkdir(parents=True, exist_ok=True)

    @property
    def registry(self) -> FormatRegistry:
        return self._registry

    @property
    def temp_dir(self) -> Path | None:
        return self._temp_dir

    def negotiate(
        self, input_mime: str | None, output_mime: str | None
    ) -> tuple[DocumentFormat, DocumentFormat]:
        input_format = self._resolve(input_mime, "input")
        output_format = self._resolve(output_mime, "output")
        return input_format, output_format

    def _resolve(self, mime: str | None, side: str) -> DocumentFormat:
        if mime is None or not mime.strip():
            raise MissingParameter(f"{side} mime-type not set in request")
        fmt = self._registry.by_media_type(mime)
        if fmt is None:
            raise UnsupportedFormat(f"unsupported {side} mime-type: {mime}")
        return fmt

    def workspace(self, input_format: DocumentFormat, output_format: DocumentFormat) -> TempWorkspace:
        return TempWorkspace(input_format, output_format, directory=self._temp_dir)

    def write_upload(self, upload: BinaryIO, input_path: Path) -> int:
        """Copy the uploaded stream into input_path and return the number of bytes written."""
        size_bytes = 0
        try:
            with input_path.open("wb") as f_out:
                while True:
                    chunk = upload.read(CHUNK)
                    if not chunk:
                        break
                    size_bytes += len(chunk)
                    if size_bytes > self._max_upload_bytes:
                        raise UploadTooLarge(f"upload exceeds {self._max_upload_mb} MB")
                    f_out.write(chunk)
        except OSError as e:
            raise UploadWriteFailed(f"error writing uploaded file: {e}") from e
        return size_bytes

    def convert(self, request: ConversionRequest, output_path: Path) -> None:
        logger.info(
            "Converting %s -> %s (%s)",
            request.input_format.extension,
            request.output_format.extension,
            request.input_path.name,
        )
        try:
            self._converter.convert(
                request.input_path, request.input_format, output_path, request.output_format
            )
        except Exception as e:
            raise ConversionFailed(f"conversion failed: {e}") from e
        try:
            produced = output_path.stat().st_size
        except OSError as e:
            raise ConversionFailed(f"conversion failed: output file unavailable: {e}") from e
        if produced == 0:
            raise ConversionFailed("conversion failed: engine produced no output")
