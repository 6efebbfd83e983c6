"""Parsing of the --include-sections / --exclude-sections options."""

from typing import List, Optional

from ..errors import InputError
from ..models import DEFAULT_SECTIONS, Section

DEFAULT_SECTIONS_STRING = ",".join(s.value for s in DEFAULT_SECTIONS)


def convert_strings_to_sections(sections: List[str]) -> List[Section]:
    """Convert section identifiers to Section values, failing on the first unknown one."""
    return [Section.from_string(s) for s in sections if s.strip()]


def compute_section_difference(include_sections: str, exclude_sections: str) -> List[Section]:
    """Return the included sections, in order, minus the excluded ones."""
    included: List[Section] = []
    excluded: List[Section] = []
    if include_sections:
        included = convert_strings_to_sections(include_sections.split(","))
    if exclude_sections:
        excluded = convert_strings_to_sections(exclude_sections.split(","))

    excluded_set = set(excluded)
    return [s for s in included if s not in excluded_set]


def resolve_sections(
    include_sections: Optional[str], exclude_sections: Optional[str]
) -> Optional[List[Section]]:
    """
    Resolve the section options given on the command line.

    Returns None when neither option was given so that configuration files
    and environment variables still apply.

    Raises:
        InputError: if both options are given or a name is unknown.
    """
    if include_sections and exclude_sections:
        raise InputError("--include-sections and --exclude-sections are mutually exclusive")
    if include_sections:
        return compute_section_difference(include_sections, "")
    if exclude_sections:
        return compute_section_difference(DEFAULT_SECTIONS_STRING, exclude_sections)
    return None
