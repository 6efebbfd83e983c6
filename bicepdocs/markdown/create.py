"""Assemble a full Markdown document and write it to disk when it changed."""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from ..errors import RenderError
from ..models import DEFAULT_SECTIONS, Section, Template
from .sections import SECTION_RENDERERS
from .sync import SyncStatus, sync_file

logger = logging.getLogger(__name__)

__all__ = ["build_markdown_string", "create_file"]


def build_markdown_string(
    template: Template,
    sections: Optional[Iterable[Section]] = None,
    show_all_decorators: bool = False,
) -> str:
    """
    Render a template as Markdown.

    The title comes first, followed by each requested section in the given
    order. Empty sections contribute nothing; the result ends with exactly
    one newline.

    Raises:
        RenderError: for an unknown section or an unencodable value.
    """
    if template is None:
        raise RenderError("invalid template (None)")
    if sections is None:
        sections = DEFAULT_SECTIONS

    parts = [f"# {template.title}\n"]
    for section in sections:
        renderer = SECTION_RENDERERS.get(section)
        if renderer is None:
            raise RenderError(f"invalid section: {section!r}")
        text = renderer(template, show_all_decorators)
        if text:
            parts.append(text)

    return "\n".join(parts).rstrip("\n") + "\n"


def create_file(
    filename: str,
    template: Template,
    sections: Optional[Iterable[Section]] = None,
    show_all_decorators: bool = False,
) -> SyncStatus:
    """Render ``template`` and sync it to ``filename``."""
    markdown = build_markdown_string(template, sections, show_all_decorators)
    status = sync_file(filename, markdown)
    logger.debug(f"{filename}: {status.value}")
    return status
