"""
Document Converter Service package.

This module provides a FastAPI application exposing a single conversion
endpoint at `/service`: POST a multipart upload with `inputMime` and
`outputMime` headers and receive the converted document.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"
