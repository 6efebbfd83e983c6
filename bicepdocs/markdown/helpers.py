"""Formatting helpers shared by the Markdown section generators."""

from __future__ import annotations

import json
import re
from typing import Any, List, Optional

from ..errors import RenderError
from ..models import Constraints, Metadata, Parameter, TypeRef

LINE_BREAK = "<br>"
UDDT_SUFFIX = " (uddt)"
ARRAY_TYPE = "array"

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_BICEP_ESCAPES = str.maketrans({"\\": "\\\\", "'": "\\'", "\n": "\\n", "\r": "\\r", "\t": "\\t"})


def normalize_newlines(text: str) -> str:
    """Replace embedded newlines with inline line breaks for table cells."""
    return text.replace("\r\n", "\n").replace("\n", LINE_BREAK)


def extract_description(metadata: Optional[Metadata]) -> str:
    if metadata is None or metadata.description is None:
        return ""
    return normalize_newlines(metadata.description)


def extract_type(type_ref: TypeRef, items: Optional[TypeRef] = None) -> str:
    """
    Render a type for a table cell.

    ``#/definitions/Foo`` becomes ``Foo (uddt)``; an array with items becomes
    ``string[]`` or ``Foo[] (uddt)``.
    """
    if type_ref.is_reference:
        return type_ref.name + UDDT_SUFFIX
    if type_ref.value == ARRAY_TYPE and items is not None:
        if items.is_reference:
            return f"{items.name}[]{UDDT_SUFFIX}"
        return f"{items.value}[]"
    return type_ref.value


def encode_value(value: Any, owner: str) -> str:
    """JSON-encode a value with readable spacing and sorted keys."""
    try:
        return json.dumps(value, sort_keys=True, ensure_ascii=False, separators=(", ", ": "))
    except (TypeError, ValueError) as e:
        raise RenderError(f"failed to encode value of {owner}: {e}") from e


def format_default_value(parameter: Parameter) -> str:
    if parameter.default_value is None:
        return "null" if parameter.nullable else ""
    return normalize_newlines(encode_value(parameter.default_value, f"parameter {parameter.name!r}"))


def format_allowed_values(constraints: Constraints, owner: str) -> str:
    if not constraints.allowed_values:
        return ""
    return normalize_newlines(
        ", ".join(encode_value(v, owner) for v in constraints.allowed_values)
    )


def format_bound(value: Optional[int]) -> str:
    return "" if value is None else str(value)


def constraint_cells(constraints: Constraints, owner: str, with_allowed_values: bool = True) -> List[str]:
    cells = [format_allowed_values(constraints, owner)] if with_allowed_values else []
    cells.extend(
        format_bound(v)
        for v in (
            constraints.min_length,
            constraints.max_length,
            constraints.min_value,
            constraints.max_value,
        )
    )
    return cells


def format_bool(value: bool) -> str:
    return "Yes" if value else "No"


def to_bicep_literal(value: Any, owner: str, indent: str = "    ") -> str:
    """
    Render a value in Bicep notation for the usage example: identifier keys
    unquoted, single-quoted escaped strings, one element per line and no
    commas. Lines after the first are prefixed with ``indent``.
    """
    return _bicep_literal(value, owner, 0).replace("\n", "\n" + indent)


def _bicep_string(text: str) -> str:
    escaped = text.translate(_BICEP_ESCAPES).replace("${", "\\${")
    return f"'{escaped}'"


def _bicep_literal(value: Any, owner: str, depth: int) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return encode_value(value, owner)
    if isinstance(value, str):
        return _bicep_string(value)

    pad = "  " * (depth + 1)
    closing_pad = "  " * depth
    if isinstance(value, dict):
        if not value:
            return "{}"
        lines = []
        for key in sorted(value):
            if not isinstance(key, str):
                raise RenderError(f"failed to encode value of {owner}: non-string key {key!r}")
            name = key if _IDENTIFIER_RE.match(key) else _bicep_string(key)
            lines.append(f"{pad}{name}: {_bicep_literal(value[key], owner, depth + 1)}")
        return "{\n" + "\n".join(lines) + f"\n{closing_pad}}}"
    if isinstance(value, (list, tuple)):
        if not value:
            return "[]"
        lines = [f"{pad}{_bicep_literal(item, owner, depth + 1)}" for item in value]
        return "[\n" + "\n".join(lines) + f"\n{closing_pad}]"

    raise RenderError(
        f"failed to encode value of {owner}: unsupported type {type(value).__name__}"
    )
