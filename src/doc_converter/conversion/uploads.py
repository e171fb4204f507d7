from contextlib import asynccontextmanager
from typing import AsyncIterator, Iterable

from starlette.datastructures import UploadFile
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.formparsers import MultiPartException
from starlette.requests import Request

from .errors import MalformedUpload, NoFileFound


def first_file(items: Iterable[tuple[str, object]]) -> UploadFile:
    """Return the first file part; plain form fields and any later files are ignored."""
    for _, value in items:
        if isinstance(value, UploadFile):
            return value
    raise NoFileFound("no file found in multipart request body")


@asynccontextmanager
async def uploaded_file(request: Request) -> AsyncIterator[UploadFile]:
    """Parse the request body as multipart form data and yield its file part.

    The parsed form, including spooled upload files, is closed when the
    scope ends. The request body cannot be read again afterwards.
    """
    try:
        form = await request.form()
    except MultiPartException as e:
        raise MalformedUpload(f"malformed multipart body: {e.message}") from e
    except StarletteHTTPException as e:
        # Starlette converts parser errors to a 400 when running inside an app
        raise MalformedUpload(f"malformed multipart body: {e.detail}") from e
    try:
        yield first_file(form.multi_items())
    finally:
        await form.close()
