from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from .formats import DocumentFormat


class ConverterGateway(Protocol):
    def convert(
        self,
        input_path: Path,
        input_format: DocumentFormat,
        output_path: Path,
        output_format: DocumentFormat,
    ) -> None:
        """Convert the file at input_path into output_format, writing output_path.

        This is a blocking call; callers should offload to threads if needed.
        Raises on failure with a message describing the engine's diagnosis.
        """


@dataclass(frozen=True)
class ConversionRequest:
    input_format: DocumentFormat
    output_format: DocumentFormat
    input_path: Path


@dataclass(frozen=True)
class TempFilePair:
    input_path: Path
    output_path: Path
