"""Command-line support for bicep-docs."""

from .process import generate_docs, generate_docs_from_bicep_file, generate_docs_from_directory
from .rich_output import RichOutputManager
from .sections import compute_section_difference, convert_strings_to_sections, resolve_sections

__all__ = [
    "generate_docs",
    "generate_docs_from_bicep_file",
    "generate_docs_from_directory",
    "RichOutputManager",
    "compute_section_difference",
    "convert_strings_to_sections",
    "resolve_sections",
]
