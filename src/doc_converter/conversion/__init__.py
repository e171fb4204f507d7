"""
Domain layer for document conversion.
Provides the format registry, the converter gateway and its adapters, the
temp workspace and a service exposing the conversion pipeline steps, so
front-ends (HTTP or others) can share the same core logic.
"""

from .errors import (
    ConversionFailed,
    MalformedUpload,
    MissingParameter,
    NoFileFound,
    ServiceError,
    TempFileError,
    UnsupportedFormat,
    UploadTooLarge,
    UploadWriteFailed,
)
from .formats import DocumentFormat, FormatRegistry, default_registry
from .interfaces import ConversionRequest, ConverterGateway, TempFilePair
from .service import ConversionService
from .workspace import TempWorkspace
