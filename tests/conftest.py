"""Shared pytest fixtures for the document converter tests."""

import threading
import time
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from doc_converter.conversion import ConversionService, DocumentFormat, default_registry
from doc_converter.webapi import create_app


class FakeConverter:
    """Stands in for the office engine: echoes the input with a format marker."""

    def __init__(self, delay: float = 0.0) -> None:
        self.delay = delay
        self.calls: list[tuple[Path, str, Path, str]] = []
        self._lock = threading.Lock()

    def convert(
        self,
        input_path: Path,
        input_format: DocumentFormat,
        output_path: Path,
        output_format: DocumentFormat,
    ) -> None:
        with self._lock:
            self.calls.append((input_path, input_format.extension, output_path, output_format.extension))
        if self.delay:
            time.sleep(self.delay)
        payload = input_path.read_bytes()
        output_path.write_bytes(f"[{output_format.extension}]".encode() + payload)


class FailingConverter:
    def __init__(self, message: str = "office process crashed") -> None:
        self.message = message
        self.calls = 0

    def convert(self, input_path, input_format, output_path, output_format) -> None:
        self.calls += 1
        raise RuntimeError(self.message)


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def temp_dir(tmp_path):
    path = tmp_path / "work"
    path.mkdir()
    return path


@pytest.fixture
def converter():
    return FakeConverter()


@pytest.fixture
def service(temp_dir, converter):
    return ConversionService(default_registry(), converter, temp_dir=temp_dir)


@pytest.fixture
def client(service):
    return TestClient(create_app(service))


@pytest.fixture
def conversion_headers():
    return {"inputMime": "text/plain", "outputMime": "application/pdf"}


@pytest.fixture
def hello_upload():
    return {"file": ("hello.txt", b"Hello world!", "text/plain")}
