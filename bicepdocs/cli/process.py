"""
Documentation generation for a single Bicep file or a directory tree.

In directory mode each trigger file (``main.bicep`` by default) is handled by
its own worker: compile, parse, render and sync its README. Workers share
nothing but a semaphore that bounds how many compiler processes run at once.
"""

from __future__ import annotations

import concurrent.futures
import logging
import os
import threading
from pathlib import Path
from typing import Callable, Iterator, List, Optional, Tuple, Union

from ..config import BicepDocsConfig
from ..errors import BicepDocsError, InputError
from ..markdown import SyncStatus, create_file
from ..template import compiled_template, parse_templates

logger = logging.getLogger(__name__)

__all__ = [
    "DocResult",
    "generate_docs",
    "generate_docs_from_directory",
    "generate_docs_from_bicep_file",
    "find_trigger_files",
]

PathLike = Union[str, Path]
DocResult = Tuple[str, SyncStatus]
ResultCallback = Callable[[str, SyncStatus], None]


def generate_docs(
    input_path: PathLike,
    output: Optional[PathLike] = None,
    config: Optional[BicepDocsConfig] = None,
    on_result: Optional[ResultCallback] = None,
) -> List[DocResult]:
    """
    Generate documentation for a Bicep file or for every trigger file in a directory.

    Args:
        input_path: Bicep file or directory.
        output: Markdown file for single-file input. Defaults to the configured
            output filename next to the Bicep file. Ignored for directories.
        config: Run settings; defaults are used when omitted.
        on_result: Called with (markdown path, status) after each file is synced.

    Returns:
        (markdown path, status) for every file processed.
    """
    config = config or BicepDocsConfig.default()
    path = Path(input_path)
    if not path.exists():
        raise InputError(f'no such file or directory "{input_path}"')

    if path.is_dir():
        return generate_docs_from_directory(path, config, on_result)

    markdown_file = Path(output) if output else path.parent / config.output_filename
    status = generate_docs_from_bicep_file(path, markdown_file, config)
    if on_result:
        on_result(str(markdown_file), status)
    return [(str(markdown_file), status)]


def find_trigger_files(dir_path: PathLike, trigger_filename: str) -> Iterator[Path]:
    """Walk ``dir_path`` in sorted order yielding every trigger file."""

    def _on_error(error: OSError) -> None:
        raise InputError(f"failed to walk directory {error.filename!r}: {error.strerror}") from error

    for root, dirs, files in os.walk(dir_path, onerror=_on_error):
        dirs.sort()
        if trigger_filename in files:
            candidate = Path(root) / trigger_filename
            if candidate.is_file():
                yield candidate


def generate_docs_from_directory(
    dir_path: PathLike,
    config: BicepDocsConfig,
    on_result: Optional[ResultCallback] = None,
) -> List[DocResult]:
    """
    Process every trigger file under ``dir_path`` concurrently.

    After the first failure no new work is started; workers already running
    are allowed to finish and then the first error is raised.
    """
    results: List[DocResult] = []
    errors: List[BaseException] = []
    lock = threading.Lock()
    slots = threading.BoundedSemaphore(config.max_workers)
    failed = threading.Event()

    def _worker(bicep_file: Path, markdown_file: Path) -> None:
        try:
            status = generate_docs_from_bicep_file(bicep_file, markdown_file, config)
            with lock:
                results.append((str(markdown_file), status))
            if on_result:
                on_result(str(markdown_file), status)
        except Exception as e:
            with lock:
                errors.append(e)
            failed.set()
        finally:
            slots.release()

    submitted = 0
    with concurrent.futures.ThreadPoolExecutor(max_workers=config.max_workers) as executor:
        for bicep_file in find_trigger_files(dir_path, config.trigger_filename):
            slots.acquire()
            if failed.is_set():
                slots.release()
                break
            markdown_file = bicep_file.parent / config.output_filename
            executor.submit(_worker, bicep_file, markdown_file)
            submitted += 1

    logger.debug(f"Processed {submitted} {config.trigger_filename} file(s) under {dir_path}")
    if errors:
        raise errors[0]
    return sorted(results)


def generate_docs_from_bicep_file(
    bicep_file: PathLike, markdown_file: PathLike, config: BicepDocsConfig
) -> SyncStatus:
    """Compile, parse, render and sync the documentation of one Bicep file."""
    try:
        with compiled_template(bicep_file) as arm_file:
            template = parse_templates(bicep_file, arm_file)
        return create_file(str(markdown_file), template, config.sections, config.show_all_decorators)
    except BicepDocsError as e:
        e.attach_file(str(bicep_file))
        raise
