"""
Line-oriented scanner for Bicep source templates.

The compiled ARM template drops module and resource declarations and the
descriptions attached to them, so they are recovered here by reading the
Bicep text directly. The scanner is not a Bicep parser: it only recognises
top-level declaration headers, comments and ``@description`` decorators.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum, auto
from pathlib import Path
from typing import Iterable, List, Optional, Union

from ..errors import ScanError
from ..models import Module, Resource, Variable

logger = logging.getLogger(__name__)

__all__ = ["ScanResult", "ScanState", "BicepScanner", "scan_bicep_text", "scan_bicep_file"]

MODULE_RE = re.compile(r"^module\s+(\S+)\s+'(\S+)'")
RESOURCE_RE = re.compile(r"^resource\s+(\S+)\s+'(\S+)'")
VARIABLE_RE = re.compile(r"^var\s+(\w+)\b(.*)$")
# Declarations whose descriptions are read from the compiled template.
CONSUMING_DECLARATION_RE = re.compile(r"^(param|output|type|var|func)\s+\S+")
INLINE_DESCRIPTION_RE = re.compile(r"^@(description|sys\.description)\(('''|')(.*?)('''|')\)")
MULTILINE_DESCRIPTION_START_RE = re.compile(r"^@(description|sys\.description)\('''(.*)")

TRIPLE_QUOTE = "'''"


class ScanState(Enum):
    NORMAL = auto()
    BLOCK_COMMENT = auto()
    MULTILINE_DESCRIPTION = auto()


@dataclass
class ScanResult:
    modules: List[Module] = field(default_factory=list)
    resources: List[Resource] = field(default_factory=list)
    variables: List[Variable] = field(default_factory=list)


class BicepScanner:
    """
    Scans Bicep source line by line.

    A single pending description is carried from an ``@description``
    decorator to the next declaration. Module and resource declarations take
    it; parameter, output, type, variable and function declarations discard
    it so it never leaks onto a later module or resource. When
    ``collect_variables`` is set, variable declarations take the description
    instead of discarding it.
    """

    def __init__(self, collect_variables: bool = True):
        self.collect_variables = collect_variables
        self._reset()

    def _reset(self) -> None:
        self.state = ScanState.NORMAL
        self.pending_description = ""
        self._description_parts: List[str] = []
        self._after_closing_quotes = False
        self._line_number = 0
        self._state_started_at = 0
        self.result = ScanResult()

    def scan(self, lines: Iterable[str]) -> ScanResult:
        """
        Scan the given lines and return the recovered declarations.

        Raises:
            ScanError: if a block comment or a multi-line description is
                still open at the end of the input.
        """
        self._reset()
        for raw_line in lines:
            self._line_number += 1
            line = raw_line.rstrip("\r\n")
            if self.state is ScanState.BLOCK_COMMENT:
                self._scan_block_comment(line)
            elif self.state is ScanState.MULTILINE_DESCRIPTION:
                self._scan_multiline_description(line)
            else:
                self._scan_normal(line)

        if self.state is ScanState.BLOCK_COMMENT:
            raise ScanError(
                f"multiline comment was not closed (opened on line {self._state_started_at})"
            )
        if self.state is ScanState.MULTILINE_DESCRIPTION:
            raise ScanError(
                f"multiline description was not closed (opened on line {self._state_started_at})"
            )

        result = self.result
        # sorted() is stable, so duplicates keep their source order
        result.modules = sorted(result.modules, key=lambda m: m.symbolic_name)
        result.resources = sorted(result.resources, key=lambda r: r.symbolic_name)
        logger.debug(
            f"Scanned {self._line_number} lines: {len(result.modules)} modules, "
            f"{len(result.resources)} resources, {len(result.variables)} variables"
        )
        return result

    def _scan_normal(self, line: str) -> None:
        stripped = line.strip()
        if not stripped or stripped.startswith("//"):
            return

        if stripped.startswith("/*"):
            if "*/" not in stripped[2:]:
                self.state = ScanState.BLOCK_COMMENT
                self._state_started_at = self._line_number
            return

        match = INLINE_DESCRIPTION_RE.match(line)
        if match:
            self.pending_description = match.group(3)
            return

        match = MULTILINE_DESCRIPTION_START_RE.match(line)
        if match:
            self._start_multiline_description(match.group(2))
            return

        if self.collect_variables:
            match = VARIABLE_RE.match(line)
            if match:
                self.result.variables.append(self._parse_variable(match))
                self.pending_description = ""
                return

        if CONSUMING_DECLARATION_RE.match(line):
            self.pending_description = ""
            return

        match = MODULE_RE.match(line)
        if match:
            self.result.modules.append(
                Module(
                    symbolic_name=match.group(1),
                    source=match.group(2).replace("'", ""),
                    description=self.pending_description,
                )
            )
            self.pending_description = ""
            return

        match = RESOURCE_RE.match(line)
        if match:
            resource_type = match.group(2).split("@", 1)[0].replace("'", "")
            self.result.resources.append(
                Resource(
                    symbolic_name=match.group(1),
                    type=resource_type,
                    description=self.pending_description,
                )
            )
            self.pending_description = ""

    def _scan_block_comment(self, line: str) -> None:
        if "*/" in line:
            self.state = ScanState.NORMAL

    def _start_multiline_description(self, first_text: str) -> None:
        self.state = ScanState.MULTILINE_DESCRIPTION
        self._state_started_at = self._line_number
        self._after_closing_quotes = False
        self._description_parts = []
        if TRIPLE_QUOTE in first_text:
            self._scan_multiline_description(first_text)
        elif first_text.strip():
            self._description_parts.append(first_text.strip())

    def _scan_multiline_description(self, line: str) -> None:
        # The closing ''' and the closing parenthesis may sit on different lines.
        if TRIPLE_QUOTE in line and not self._after_closing_quotes:
            before = line.split(TRIPLE_QUOTE, 1)[0].strip()
            if before:
                self._description_parts.append(before)
            if line.rstrip().endswith(")"):
                self._finish_multiline_description()
            else:
                self._after_closing_quotes = True
        elif self._after_closing_quotes:
            if line.rstrip().endswith(")"):
                self._finish_multiline_description()
        else:
            self._description_parts.append(line.strip())

    def _finish_multiline_description(self) -> None:
        self.pending_description = "\n".join(self._description_parts)
        self._description_parts = []
        self._after_closing_quotes = False
        self.state = ScanState.NORMAL

    def _parse_variable(self, match: "re.Match[str]") -> Variable:
        rest = match.group(2)
        value: Optional[str] = None
        if "=" in rest:
            value = rest.split("=", 1)[1].strip() or None
        return Variable(name=match.group(1), value=value, description=self.pending_description)


def scan_bicep_text(text: str, collect_variables: bool = True) -> ScanResult:
    """Scan Bicep source held in memory."""
    return BicepScanner(collect_variables=collect_variables).scan(text.splitlines())


def scan_bicep_file(path: Union[str, Path], collect_variables: bool = True) -> ScanResult:
    """
    Scan a Bicep file from disk.

    Raises:
        ScanError: if the file cannot be read or its comments are unbalanced.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            return BicepScanner(collect_variables=collect_variables).scan(f)
    except OSError as e:
        raise ScanError(f"failed to read Bicep file {str(path)!r}: {e}") from e
    except UnicodeDecodeError as e:
        raise ScanError(f"Bicep file {str(path)!r} is not valid UTF-8: {e}") from e
