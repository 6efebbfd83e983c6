"""
Generators for the individual sections of a Markdown document.

Each generator takes the template and the "show all decorators" flag and
returns the section text ending in a newline, or an empty string when there
is nothing to document.
"""

from __future__ import annotations

from typing import Callable, Dict

from ..models import Section, Template, UserDefinedDataType
from .helpers import (
    constraint_cells,
    extract_description,
    extract_type,
    format_bool,
    format_default_value,
    normalize_newlines,
    to_bicep_literal,
)
from .table import MarkdownTable

RESOURCE_REFERENCE_URL = "https://learn.microsoft.com/en-us/azure/templates/"

USAGE_NOTE = (
    "> Note: In the default values, strings enclosed in square brackets "
    "(e.g. '[resourceGroup().location]' or '[__bicep.function_name(args...)]') "
    "represent function calls or references."
)

ALLOWED_VALUES_HEADER = "Allowed Values"
BOUND_HEADERS = ["Min Length", "Max Length", "Min Value", "Max Value"]

SectionRenderer = Callable[[Template, bool], str]


def generate_description_section(template: Template, show_all_decorators: bool = False) -> str:
    description = extract_description(template.metadata)
    if not description:
        return ""
    return f"## Description\n\n{description}\n"


def generate_usage_section(template: Template, show_all_decorators: bool = False) -> str:
    """Build a module-reference example listing required parameters first."""
    lines = [
        "## Usage",
        "",
        "Here is a basic example of how to use this Bicep module:",
        "",
        "```bicep",
        "module reference_name 'path_to_module | container_registry_reference' = {",
        "  name: 'deployment_name'",
        "  params: {",
        "    // Required parameters",
    ]
    for parameter in template.parameters:
        if parameter.is_required():
            lines.append(f"    {parameter.name}:")

    lines.append("")
    lines.append("    // Optional parameters")
    for parameter in template.parameters:
        if parameter.is_required():
            continue
        if parameter.default_value is None:
            value = "null"
        else:
            value = to_bicep_literal(parameter.default_value, f"parameter {parameter.name!r}")
        lines.append(f"    {parameter.name}: {value}")

    lines.extend(["  }", "}", "```", "", USAGE_NOTE, ""])
    return "\n".join(lines)


def generate_modules_section(template: Template, show_all_decorators: bool = False) -> str:
    if not template.modules:
        return ""
    table = MarkdownTable("Modules", ["Symbolic Name", "Source", "Description"])
    for module in template.modules:
        table.add_row(module.symbolic_name, module.source, normalize_newlines(module.description))
    return str(table)


def generate_resources_section(template: Template, show_all_decorators: bool = False) -> str:
    if not template.resources:
        return ""
    table = MarkdownTable("Resources", ["Symbolic Name", "Type", "Description"])
    for resource in template.resources:
        type_link = f"[{resource.type}]({RESOURCE_REFERENCE_URL}{resource.type.lower()})"
        table.add_row(resource.symbolic_name, type_link, normalize_newlines(resource.description))
    return str(table)


def generate_parameters_section(template: Template, show_all_decorators: bool = False) -> str:
    if not template.parameters:
        return ""
    headers = ["Name", "Status", "Type", "Description", "Default"]
    if show_all_decorators:
        headers += [ALLOWED_VALUES_HEADER] + BOUND_HEADERS

    table = MarkdownTable("Parameters", headers)
    for parameter in template.parameters:
        cells = [
            parameter.name,
            parameter.get_status(),
            extract_type(parameter.type, parameter.items),
            extract_description(parameter.metadata),
            format_default_value(parameter),
        ]
        if show_all_decorators:
            cells += constraint_cells(parameter.constraints, f"parameter {parameter.name!r}")
        table.add_row(*cells)
    return str(table)


def generate_user_defined_data_types_section(
    template: Template, show_all_decorators: bool = False
) -> str:
    if not template.user_defined_data_types:
        return ""
    headers = ["Name", "Type", "Description"]
    if show_all_decorators:
        headers += ["Exportable", ALLOWED_VALUES_HEADER] + BOUND_HEADERS
    headers.append("Properties")

    table = MarkdownTable("User Defined Data Types (UDDTs)", headers)
    for data_type in template.user_defined_data_types:
        cells = [
            data_type.name,
            extract_type(data_type.type, data_type.items),
            extract_description(data_type.metadata),
        ]
        if show_all_decorators:
            cells.append(format_bool(data_type.exportable))
            cells += constraint_cells(data_type.constraints, f"type {data_type.name!r}")
        cells.append(
            f"[View Properties](#{data_type.name.lower()})" if data_type.properties else ""
        )
        table.add_row(*cells)

    parts = [str(table)]
    for data_type in template.user_defined_data_types:
        if data_type.properties:
            parts.append(_properties_table(data_type, show_all_decorators))
    return "\n".join(parts)


def _properties_table(data_type: UserDefinedDataType, show_all_decorators: bool) -> str:
    headers = ["Name", "Type", "Description"]
    if show_all_decorators:
        headers += [ALLOWED_VALUES_HEADER] + BOUND_HEADERS

    table = MarkdownTable(data_type.name, headers, level=3)
    for prop in data_type.properties:
        cells = [prop.name, extract_type(prop.type, prop.items), extract_description(prop.metadata)]
        if show_all_decorators:
            cells += constraint_cells(
                prop.constraints, f"property {prop.name!r} of type {data_type.name!r}"
            )
        table.add_row(*cells)
    return str(table)


def generate_user_defined_functions_section(
    template: Template, show_all_decorators: bool = False
) -> str:
    if not template.user_defined_functions:
        return ""
    headers = ["Name", "Description", "Output Type"]
    if show_all_decorators:
        headers.append("Exportable")

    table = MarkdownTable("User Defined Functions (UDFs)", headers)
    for function in template.user_defined_functions:
        cells = [
            function.name,
            extract_description(function.metadata),
            extract_type(function.output.type, function.output.items),
        ]
        if show_all_decorators:
            cells.append(format_bool(function.exportable))
        table.add_row(*cells)
    return str(table)


def generate_variables_section(template: Template, show_all_decorators: bool = False) -> str:
    if not template.variables:
        return ""
    table = MarkdownTable("Variables", ["Name", "Description"])
    for variable in template.variables:
        table.add_row(variable.name, normalize_newlines(variable.description))
    return str(table)


def generate_outputs_section(template: Template, show_all_decorators: bool = False) -> str:
    if not template.outputs:
        return ""
    headers = ["Name", "Type", "Description"]
    if show_all_decorators:
        headers += BOUND_HEADERS

    table = MarkdownTable("Outputs", headers)
    for output in template.outputs:
        cells = [output.name, extract_type(output.type, output.items), extract_description(output.metadata)]
        if show_all_decorators:
            cells += constraint_cells(
                output.constraints, f"output {output.name!r}", with_allowed_values=False
            )
        table.add_row(*cells)
    return str(table)


SECTION_RENDERERS: Dict[Section, SectionRenderer] = {
    Section.DESCRIPTION: generate_description_section,
    Section.USAGE: generate_usage_section,
    Section.MODULES: generate_modules_section,
    Section.RESOURCES: generate_resources_section,
    Section.PARAMETERS: generate_parameters_section,
    Section.USER_DEFINED_DATA_TYPES: generate_user_defined_data_types_section,
    Section.USER_DEFINED_FUNCTIONS: generate_user_defined_functions_section,
    Section.VARIABLES: generate_variables_section,
    Section.OUTPUTS: generate_outputs_section,
}

__all__ = [
    "SECTION_RENDERERS",
    "USAGE_NOTE",
    "RESOURCE_REFERENCE_URL",
    "generate_description_section",
    "generate_usage_section",
    "generate_modules_section",
    "generate_resources_section",
    "generate_parameters_section",
    "generate_user_defined_data_types_section",
    "generate_user_defined_functions_section",
    "generate_variables_section",
    "generate_outputs_section",
]
