"""Turn a Bicep template and its compiled ARM template into a Template."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Union

from ..models import Template
from .decoder import decode_template, load_compiled_template
from .merge import merge_scan_result
from .scanner import scan_bicep_file

logger = logging.getLogger(__name__)

__all__ = ["parse_templates"]


def parse_templates(bicep_file: Union[str, Path], arm_file: Union[str, Path]) -> Template:
    """
    Parse a Bicep template together with its compiled ARM template.

    The Bicep source yields modules, resources and variable descriptions; the
    ARM template yields everything else.
    """
    template = Template(file_name=str(bicep_file))
    scanned = scan_bicep_file(bicep_file)
    decode_template(load_compiled_template(arm_file), template)
    merge_scan_result(template, scanned)
    logger.debug(
        f"Parsed {bicep_file}: {len(template.parameters)} parameters, "
        f"{len(template.outputs)} outputs, {len(template.variables)} variables"
    )
    return template
