import logging
import os
import tempfile
from contextlib import AsyncExitStack
from pathlib import Path
from typing import Awaitable, Callable, Iterator

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse, StreamingResponse
from starlette.concurrency import run_in_threadpool
from starlette.types import Receive, Scope, Send

from doc_converter.conversion import (
    ConversionRequest,
    ConversionService,
    ServiceError,
    default_registry,
)
from doc_converter.conversion.adapters import DoclingConverter, LibreOfficeConverter, RoutingConverter
from doc_converter.conversion.service import CHUNK
from doc_converter.conversion.uploads import uploaded_file

logger = logging.getLogger(__name__)

# Global configuration defaults
VERSION = os.getenv("DOC_CONVERTER_VERSION", "0.1.0")
TEMP_DIR = Path(os.getenv("TEMP_DIR", tempfile.gettempdir())).resolve()
MAX_UPLOAD_MB = int(os.getenv("MAX_UPLOAD_MB", "300"))
SOFFICE_PATH = os.getenv("SOFFICE_PATH", "soffice")
CONVERSION_TIMEOUT_SEC = int(os.getenv("CONVERSION_TIMEOUT_SEC", "300"))
INPUT_MIME_HEADER = os.getenv("INPUT_MIME_HEADER", "inputMime")
OUTPUT_MIME_HEADER = os.getenv("OUTPUT_MIME_HEADER", "outputMime")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def parse_log_level(level: str) -> str:
    # Take just the first word so values like "DEBUG # verbose" still work
    words = level.split()
    name = words[0].upper() if words else "INFO"
    return name if name in VALID_LOG_LEVELS else "INFO"


def configure_logging(level: str = LOG_LEVEL) -> None:
    """Apply LOG_LEVEL to the package loggers.

    Runs at import so it also takes effect in server worker processes that
    import the app without going through run().
    """
    name = parse_log_level(level)
    logging.basicConfig(format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    logging.getLogger("doc_converter").setLevel(getattr(logging, name))


configure_logging()


def build_default_service() -> ConversionService:
    libreoffice = LibreOfficeConverter(SOFFICE_PATH, timeout_sec=CONVERSION_TIMEOUT_SEC)
    converter = RoutingConverter(libreoffice, {"text/markdown": DoclingConverter()})
    return ConversionService(
        registry=default_registry(),
        converter=converter,
        temp_dir=TEMP_DIR,
        max_upload_mb=MAX_UPLOAD_MB,
    )


async def get_service(request: Request) -> ConversionService:
    """Return the process-wide service, creating it on first use."""
    service = getattr(request.app.state, "service", None)
    if service is None:
        service = build_default_service()
        request.app.state.service = service
    return service


def _read_chunks(path: Path, chunk_size: int) -> Iterator[bytes]:
    with path.open("rb") as f:
        while True:
            chunk = f.read(chunk_size)
            if not chunk:
                break
            yield chunk


class ConvertedDocumentResponse(StreamingResponse):
    """Streams a converted file, then runs the cleanup callback.

    The cleanup runs when the response completes, fails, or the client
    disconnects mid-stream. No Content-Length is sent.
    """

    def __init__(
        self,
        path: Path,
        media_type: str,
        cleanup: Callable[[], Awaitable[object]],
        chunk_size: int = CHUNK,
    ) -> None:
        self._chunks = _read_chunks(path, chunk_size)
        self._cleanup = cleanup
        # An explicit header keeps Starlette from appending a charset to text/* types
        super().__init__(self._chunks, media_type=media_type, headers={"content-type": media_type})

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        try:
            await super().__call__(scope, receive, send)
        finally:
            self._chunks.close()
            await self._cleanup()


async def _service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    if exc.is_client_error:
        logger.info("Rejected %s %s: %s", request.method, request.url.path, exc)
    else:
        logger.error("Failed %s %s: %s", request.method, request.url.path, exc, exc_info=exc)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": {"code": exc.code, "message": exc.message}},
    )


def create_app(service: ConversionService | None = None) -> FastAPI:
    app = FastAPI(
        title="Document Converter Service",
        version=VERSION,
        description=(
            "Converts an uploaded document to the format named in the request "
            "headers and streams the result back."
        ),
    )
    app.state.service = service
    app.add_exception_handler(ServiceError, _service_error_handler)

    @app.get("/health")
    def health() -> dict[str, str]:
        """Basic health check endpoint."""
        return {"status": "ok"}

    @app.post("/service", response_class=StreamingResponse)
    async def convert_document(
        request: Request, service: ConversionService = Depends(get_service)
    ) -> StreamingResponse:
        """Convert the uploaded document and stream the result.

        The input and desired output MIME types come from the inputMime and
        outputMime headers; the document is the first file part of a
        multipart/form-data body.
        """
        input_format, output_format = service.negotiate(
            request.headers.get(INPUT_MIME_HEADER),
            request.headers.get(OUTPUT_MIME_HEADER),
        )

        async with AsyncExitStack() as stack:
            upload = await stack.enter_async_context(uploaded_file(request))
            paths = stack.enter_context(service.workspace(input_format, output_format))

            await run_in_threadpool(service.write_upload, upload.file, paths.input_path)
            conversion = ConversionRequest(input_format, output_format, paths.input_path)
            # The threadpool waits for the engine even if the request is cancelled,
            # so the workspace is never released under a running conversion.
            await run_in_threadpool(service.convert, conversion, paths.output_path)

            response = ConvertedDocumentResponse(
                paths.output_path,
                media_type=output_format.media_type,
                cleanup=stack.pop_all().aclose,
            )
        return response

    return app


app = create_app()


def run() -> None:
    """Run a development ASGI server using uvicorn.

    Exposes the app at host:port (default 0.0.0.0:8080). Set PORT env var to override.
    """
    import uvicorn

    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "8080"))
    # Enable reload in dev unless explicitly disabled
    reload = os.getenv("RELOAD", "true").lower() in {"1", "true", "yes", "on"}

    uvicorn.run(
        "doc_converter.webapi:app",
        host=host,
        port=port,
        reload=reload,
        log_level=parse_log_level(LOG_LEVEL).lower(),
    )


if __name__ == "__main__":
    run()
