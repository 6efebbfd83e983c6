"""
Idempotent file writer.

A Markdown file is rewritten only when its content differs from the
rendered text, and always through a temp file that replaces the target, so a
failed write never leaves a partial document behind.
"""

from __future__ import annotations

import os
import uuid
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from ..errors import FileWriteError

__all__ = ["SyncStatus", "check_file_exists", "read_file_content", "sync_file"]


class SyncStatus(Enum):
    CREATED = "created"
    UPDATED = "updated"
    UNCHANGED = "unchanged"

    def message(self, filename: Union[str, Path]) -> str:
        if self is SyncStatus.CREATED:
            return f"Created {filename}"
        if self is SyncStatus.UPDATED:
            return f"Updated {filename}"
        return f"No changes to {filename}"


def check_file_exists(filename: Union[str, Path]) -> bool:
    """
    Return whether ``filename`` exists as a regular file.

    Raises:
        FileWriteError: if the path is a directory or cannot be inspected.
    """
    path = Path(filename)
    try:
        if path.is_dir():
            raise FileWriteError(f"output {str(filename)!r} is a directory")
        return path.exists()
    except OSError as e:
        raise FileWriteError(f"failed to stat file {str(filename)!r}: {e}") from e


def read_file_content(filename: Union[str, Path]) -> str:
    """Read a file with its line endings normalised to ``\\n``."""
    try:
        content = Path(filename).read_bytes().decode("utf-8", errors="replace")
    except OSError as e:
        raise FileWriteError(f"failed to read file {str(filename)!r}: {e}") from e
    return content.replace("\r\n", "\n")


def _atomic_write_text(path: Path, text: str) -> None:
    tmp = path.with_name(f".{path.name}.{uuid.uuid4().hex}.tmp")
    try:
        with open(tmp, "w", encoding="utf-8", newline="\n") as f:
            f.write(text)
        os.replace(tmp, path)
    except OSError as e:
        try:
            tmp.unlink()
        except OSError:
            pass
        raise FileWriteError(f"failed to write file {str(path)!r}: {e}") from e


def sync_file(filename: Union[str, Path], content: str, existing: Optional[bool] = None) -> SyncStatus:
    """
    Write ``content`` to ``filename`` unless the file already holds it.

    Args:
        filename: Target path.
        content: Text to write.
        existing: Precomputed result of check_file_exists, if known.

    Returns:
        Whether the file was created, updated or left unchanged.
    """
    exists = check_file_exists(filename) if existing is None else existing
    normalized = content.replace("\r\n", "\n")
    if exists and read_file_content(filename) == normalized:
        return SyncStatus.UNCHANGED

    _atomic_write_text(Path(filename), normalized)
    return SyncStatus.UPDATED if exists else SyncStatus.CREATED
