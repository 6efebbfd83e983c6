"""
Bicep and ARM template handling: compiling, scanning, decoding and merging.
"""

from .build import build_bicep_template, compiled_template
from .decoder import decode_template, load_compiled_template
from .merge import merge_scan_result
from .parse import parse_templates
from .scanner import BicepScanner, ScanResult, scan_bicep_file, scan_bicep_text

__all__ = [
    "build_bicep_template",
    "compiled_template",
    "decode_template",
    "load_compiled_template",
    "merge_scan_result",
    "parse_templates",
    "BicepScanner",
    "ScanResult",
    "scan_bicep_file",
    "scan_bicep_text",
]
