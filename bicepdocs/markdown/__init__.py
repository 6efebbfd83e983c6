"""
Markdown generation for Bicep templates.

This module turns a parsed Template into a Markdown document made of
section tables, and writes it to disk only when its content changed.
"""

from .create import build_markdown_string, create_file
from .helpers import extract_description, extract_type
from .sync import SyncStatus, sync_file
from .table import MarkdownTable

__all__ = [
    "build_markdown_string",
    "create_file",
    "extract_description",
    "extract_type",
    "SyncStatus",
    "sync_file",
    "MarkdownTable",
]
