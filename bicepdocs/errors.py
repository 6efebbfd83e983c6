"""
Error types for bicep-docs.

Every failure raised by the pipeline is a BicepDocsError carrying the stage it
came from (its category) and, once known, the Bicep file being processed.
"""

from __future__ import annotations

from enum import Enum, auto
from typing import Any, Dict, Optional

__all__ = [
    "ErrorCategory",
    "BicepDocsError",
    "InputError",
    "ExternalToolError",
    "ScanError",
    "DecodeError",
    "RenderError",
    "FileWriteError",
]


class ErrorCategory(Enum):
    """Categories of pipeline errors."""

    INPUT = auto()
    EXTERNAL_TOOL = auto()
    SCAN = auto()
    DECODE = auto()
    RENDER = auto()
    FILE_IO = auto()
    CONFIGURATION = auto()


class BicepDocsError(Exception):
    """Base class for all bicep-docs errors."""

    category: ErrorCategory = ErrorCategory.INPUT

    def __init__(self, message: str, file_path: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.file_path = file_path

    def attach_file(self, file_path: str) -> "BicepDocsError":
        """Record the file being processed unless one is already attached."""
        if self.file_path is None:
            self.file_path = str(file_path)
        return self

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": self.category.name,
            "message": self.message,
            "file_path": self.file_path,
        }

    def __str__(self) -> str:
        if self.file_path:
            return f"error processing {self.file_path}: {self.message}"
        return self.message


class InputError(BicepDocsError):
    """Bad input path, extension or section identifier."""

    category = ErrorCategory.INPUT


class ExternalToolError(BicepDocsError):
    """The Bicep compiler is missing or failed."""

    category = ErrorCategory.EXTERNAL_TOOL


class ScanError(BicepDocsError):
    """The Bicep source could not be read or scanned."""

    category = ErrorCategory.SCAN


class DecodeError(BicepDocsError):
    """The compiled ARM template is malformed."""

    category = ErrorCategory.DECODE


class RenderError(BicepDocsError):
    """The Markdown document could not be rendered."""

    category = ErrorCategory.RENDER


class FileWriteError(BicepDocsError):
    """The Markdown file could not be inspected or written."""

    category = ErrorCategory.FILE_IO
