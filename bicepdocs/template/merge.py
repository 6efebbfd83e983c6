"""Merge scanner output into a decoded template."""

from __future__ import annotations

import logging

from ..models import Template
from .scanner import ScanResult

logger = logging.getLogger(__name__)

__all__ = ["merge_scan_result"]


def merge_scan_result(template: Template, scanned: ScanResult) -> Template:
    """
    Combine what the Bicep scanner found with the decoded ARM template.

    Modules and resources come only from the scanner. For variables the
    compiled template decides which ones exist: scanner descriptions are
    copied onto matching names, and scanner-only variables are dropped since
    the compiler may have optimised them away. When the compiled template has
    no variables at all, the scanner's list is used as is.
    """
    template.modules = list(scanned.modules)
    template.resources = list(scanned.resources)

    if not template.variables:
        template.variables = list(scanned.variables)
    elif scanned.variables:
        descriptions = {v.name: v.description for v in scanned.variables}
        for variable in template.variables:
            variable.description = descriptions.get(variable.name, variable.description)

        compiled_names = {v.name for v in template.variables}
        dropped = sorted(name for name in descriptions if name not in compiled_names)
        if dropped:
            logger.debug(f"Variables not present in the compiled template: {', '.join(dropped)}")

    template.sort()
    return template
