"""
Decoder for compiled (ARM JSON) templates.

The compiled form stores parameters, outputs, definitions and function
members as name -> definition mappings. They are projected into lists of
model objects whose ``name`` comes from the mapping key, and sorted, so that
nothing downstream depends on mapping order.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Type, TypeVar, Union

from ..errors import DecodeError
from ..models import (
    Constraints,
    Metadata,
    Output,
    Parameter,
    Template,
    TypedEntity,
    TypeRef,
    UserDefinedDataType,
    UserDefinedDataTypeProperty,
    UserDefinedFunction,
    Variable,
)

logger = logging.getLogger(__name__)

__all__ = ["RESERVED_VARIABLE_PREFIX", "load_compiled_template", "decode_template"]

RESERVED_VARIABLE_PREFIX = "$fxv#"
COPY_VARIABLE_KEY = "copy"
EXPORT_METADATA_KEY = "__bicep_export!"

_BOUND_FIELDS = {
    "minLength": "min_length",
    "maxLength": "max_length",
    "minValue": "min_value",
    "maxValue": "max_value",
}

E = TypeVar("E", bound=TypedEntity)


def load_compiled_template(path: Union[str, Path]) -> Dict[str, Any]:
    """Read a compiled template from disk."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            document = json.load(f)
    except OSError as e:
        raise DecodeError(f"failed to open compiled template {str(path)!r}: {e}") from e
    except json.JSONDecodeError as e:
        raise DecodeError(f"compiled template {str(path)!r} is not valid JSON: {e}") from e
    return _require_mapping(document, "template")


def decode_template(document: Mapping[str, Any], template: Optional[Template] = None) -> Template:
    """
    Populate a Template from a compiled template document.

    Args:
        document: The parsed JSON document.
        template: Template to fill in; a new one is created when omitted.

    Returns:
        The populated template, with every collection sorted by name.

    Raises:
        DecodeError: if a section or a type-bearing field has the wrong shape.
    """
    if template is None:
        template = Template()
    document = _require_mapping(document, "template")

    for name, definition in _mapping_items(document, "parameters"):
        template.parameters.append(
            _decode_parameter(name, definition, f"parameters.{name}")
        )

    for name, definition in _mapping_items(document, "definitions"):
        template.user_defined_data_types.append(
            _decode_data_type(name, definition, f"definitions.{name}")
        )

    template.variables.extend(_decode_variables(document.get("variables")))

    for name, definition in _mapping_items(document, "outputs"):
        template.outputs.append(
            _decode_entity(Output, name, definition, f"outputs.{name}")
        )

    template.user_defined_functions.extend(_decode_functions(document.get("functions")))

    if "metadata" in document:
        template.metadata = _decode_metadata(document["metadata"], "metadata")

    template.sort()
    return template


def _require_mapping(value: Any, field_name: str) -> Dict[str, Any]:
    if not isinstance(value, dict):
        raise DecodeError(f"{field_name}: expected an object, got {type(value).__name__}")
    return value


def _mapping_items(document: Mapping[str, Any], key: str) -> List[tuple]:
    value = document.get(key)
    if value is None:
        return []
    return list(_require_mapping(value, key).items())


def _decode_type(definition: Mapping[str, Any], field_name: str) -> TypeRef:
    """Resolve the ``$ref`` / ``type`` ambiguity; an untyped entry means ``any``."""
    ref = definition.get("$ref")
    if isinstance(ref, str):
        return TypeRef.reference(ref)
    type_name = definition.get("type")
    if isinstance(type_name, str):
        return TypeRef.plain(type_name)
    if ref is None and type_name is None:
        return TypeRef.any()
    raise DecodeError(f"{field_name}: type field could not be decoded")


def _decode_items(definition: Mapping[str, Any], field_name: str) -> Optional[TypeRef]:
    items = definition.get("items")
    # Tuple types carry "items": false alongside "prefixItems".
    if items is None or isinstance(items, bool):
        return None
    items = _require_mapping(items, f"{field_name}.items")
    return _decode_type(items, f"{field_name}.items")


def _decode_constraints(definition: Mapping[str, Any], field_name: str) -> Constraints:
    constraints = Constraints()
    allowed = definition.get("allowedValues")
    if allowed is not None:
        if not isinstance(allowed, list):
            raise DecodeError(f"{field_name}.allowedValues: expected a list")
        constraints.allowed_values = allowed
    for key, attr in _BOUND_FIELDS.items():
        value = definition.get(key)
        if value is None:
            continue
        if isinstance(value, bool) or not isinstance(value, int):
            raise DecodeError(f"{field_name}.{key}: expected an integer")
        setattr(constraints, attr, value)
    return constraints


def _decode_metadata(value: Any, field_name: str) -> Optional[Metadata]:
    if value is None:
        return None
    raw = _require_mapping(value, field_name)
    metadata = Metadata()
    if isinstance(raw.get("name"), str):
        metadata.name = raw["name"]
    if isinstance(raw.get("description"), str):
        metadata.description = raw["description"]
    if EXPORT_METADATA_KEY in raw:
        metadata.exportable = bool(raw[EXPORT_METADATA_KEY])
    return metadata


def _decode_entity(cls: Type[E], name: str, value: Any, field_name: str) -> E:
    definition = _require_mapping(value, field_name)
    return cls(
        name=name,
        type=_decode_type(definition, field_name),
        items=_decode_items(definition, field_name),
        nullable=bool(definition.get("nullable", False)),
        constraints=_decode_constraints(definition, field_name),
        metadata=_decode_metadata(definition.get("metadata"), f"{field_name}.metadata"),
    )


def _decode_parameter(name: str, value: Any, field_name: str) -> Parameter:
    parameter = _decode_entity(Parameter, name, value, field_name)
    parameter.default_value = value.get("defaultValue")
    return parameter


def _decode_data_type(name: str, value: Any, field_name: str) -> UserDefinedDataType:
    data_type = _decode_entity(UserDefinedDataType, name, value, field_name)
    for prop_name, prop in _mapping_items(value, "properties"):
        data_type.properties.append(
            _decode_entity(
                UserDefinedDataTypeProperty,
                prop_name,
                prop,
                f"{field_name}.properties.{prop_name}",
            )
        )
    return data_type


def _decode_variables(value: Any) -> List[Variable]:
    if value is None:
        return []
    variables: List[Variable] = []
    for name, body in _require_mapping(value, "variables").items():
        if name == COPY_VARIABLE_KEY and isinstance(body, list):
            variables.extend(_expand_copy_variables(body))
            continue
        if name.startswith(RESERVED_VARIABLE_PREFIX):
            continue
        if name.startswith("$"):
            # Not a valid Bicep identifier, so the compiler injected it.
            logger.warning(f"Skipping unrecognized compiler-generated variable {name!r}")
            continue
        variables.append(Variable(name=name, value=body))
    return variables


def _expand_copy_variables(entries: List[Any]) -> List[Variable]:
    """Expand the ``copy`` array that holds loop-generated variables."""
    variables = []
    for index, entry in enumerate(entries):
        entry = _require_mapping(entry, f"variables.copy[{index}]")
        name = entry.get("name")
        if not isinstance(name, str):
            raise DecodeError(f"variables.copy[{index}].name: expected a string")
        variables.append(Variable(name=name, value=entry.get("input")))
    return variables


def _decode_functions(value: Any) -> List[UserDefinedFunction]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise DecodeError("functions: expected a list of namespaces")

    functions: List[UserDefinedFunction] = []
    for index, namespace in enumerate(value):
        namespace = _require_mapping(namespace, f"functions[{index}]")
        namespace_name = namespace.get("namespace", index)
        for name, member in _mapping_items(namespace, "members"):
            field_name = f"functions.{namespace_name}.{name}"
            functions.append(_decode_function(name, member, field_name))
    return functions


def _decode_function(name: str, value: Any, field_name: str) -> UserDefinedFunction:
    member = _require_mapping(value, field_name)

    parameters = []
    raw_parameters = member.get("parameters") or []
    if not isinstance(raw_parameters, list):
        raise DecodeError(f"{field_name}.parameters: expected a list")
    for index, raw in enumerate(raw_parameters):
        raw = _require_mapping(raw, f"{field_name}.parameters[{index}]")
        param_name = raw.get("name", "")
        parameters.append(
            _decode_parameter(param_name, raw, f"{field_name}.parameters.{param_name or index}")
        )

    output = Output()
    if member.get("output") is not None:
        output = _decode_entity(Output, "", member["output"], f"{field_name}.output")

    return UserDefinedFunction(
        name=name,
        parameters=parameters,
        output=output,
        metadata=_decode_metadata(member.get("metadata"), f"{field_name}.metadata"),
    )
