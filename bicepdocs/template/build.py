"""
Compile Bicep templates into ARM templates.

Either the standalone ``bicep`` CLI or the Azure CLI (``az bicep``) must be
installed. The compiled template is written to a uniquely named file in the
system temp directory so concurrent builds never collide.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import tempfile
import uuid
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Union

from ..errors import ExternalToolError, InputError

logger = logging.getLogger(__name__)

__all__ = ["BICEP_EXTENSION", "build_bicep_template", "compiled_template", "compiler_command"]

BICEP_EXTENSION = ".bicep"


def compiler_command(bicep_file: str, arm_file: str) -> List[str]:
    """
    Return the command line that compiles ``bicep_file`` into ``arm_file``.

    ``bicep`` is preferred; ``az bicep`` is the fallback.
    """
    if shutil.which("bicep"):
        return ["bicep", "build", bicep_file, "--outfile", arm_file]
    if shutil.which("az"):
        return ["az", "bicep", "build", "--file", bicep_file, "--outfile", arm_file]
    raise ExternalToolError("neither 'bicep' nor 'az' commands were found", file_path=bicep_file)


def build_bicep_template(bicep_file: Union[str, Path]) -> str:
    """
    Build a Bicep template into an ARM template in the temp directory.

    Returns:
        Path of the compiled template. The caller owns the file.

    Raises:
        InputError: if the file does not have the ``.bicep`` extension.
        ExternalToolError: if no compiler is found or the build fails.
    """
    bicep_path = Path(bicep_file)
    if bicep_path.suffix != BICEP_EXTENSION:
        raise InputError(f"file extension must be '{BICEP_EXTENSION}'", file_path=str(bicep_file))

    arm_file = os.path.join(tempfile.gettempdir(), f"{bicep_path.stem}_{uuid.uuid4()}.json")
    command = compiler_command(str(bicep_file), arm_file)
    logger.debug(f"Compiling {bicep_file} with: {' '.join(command)}")

    try:
        completed = subprocess.run(command, capture_output=True, text=True, check=False)
    except OSError as e:
        raise ExternalToolError(f"failed to run command: {e}", file_path=str(bicep_file)) from e

    if completed.returncode != 0:
        # The compiler may leave partial output behind on failure.
        _remove_temp_file(arm_file)
        raise ExternalToolError(_error_message(completed), file_path=str(bicep_file))
    return arm_file


def _error_message(completed: subprocess.CompletedProcess) -> str:
    """Prefer the first stderr line that mentions an error."""
    for line in (completed.stderr or "").splitlines():
        if "Error" in line:
            return line.strip()
    return f"failed to run command: exit status {completed.returncode}"


@contextmanager
def compiled_template(bicep_file: Union[str, Path]) -> Iterator[str]:
    """Build ``bicep_file`` and remove the compiled template afterwards."""
    arm_file = build_bicep_template(bicep_file)
    try:
        yield arm_file
    finally:
        _remove_temp_file(arm_file)


def _remove_temp_file(arm_file: str) -> None:
    try:
        os.remove(arm_file)
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning(f"Could not remove temporary file {arm_file}: {e}")
