"""
Document model for bicep-docs.

These dataclasses are the contract between the Bicep scanner, the ARM
template decoder and the Markdown renderer. A Template is built fresh for
every Bicep file, rendered once and then discarded.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional

from .errors import InputError

__all__ = [
    "ANY_TYPE",
    "DEFINITIONS_PREFIX",
    "Section",
    "DEFAULT_SECTIONS",
    "TypeKind",
    "TypeRef",
    "Constraints",
    "Metadata",
    "Module",
    "Resource",
    "TypedEntity",
    "Parameter",
    "Output",
    "UserDefinedDataTypeProperty",
    "UserDefinedDataType",
    "UserDefinedFunction",
    "Variable",
    "Template",
]

ANY_TYPE = "any"
DEFINITIONS_PREFIX = "#/definitions/"


class Section(Enum):
    """Sections that can be rendered in a Markdown document."""

    DESCRIPTION = "description"
    USAGE = "usage"
    MODULES = "modules"
    RESOURCES = "resources"
    PARAMETERS = "parameters"
    USER_DEFINED_DATA_TYPES = "udt"
    USER_DEFINED_FUNCTIONS = "udf"
    VARIABLES = "variables"
    OUTPUTS = "outputs"

    @classmethod
    def from_string(cls, value: str) -> "Section":
        """Parse a section identifier such as ``"udt"``."""
        normalized = value.strip().lower()
        for section in cls:
            if section.value == normalized:
                return section
        raise InputError(f'invalid section: "{value}"')

    @classmethod
    def parse_list(cls, values: List[str]) -> List["Section"]:
        return [cls.from_string(v) for v in values]


DEFAULT_SECTIONS: List[Section] = list(Section)


class TypeKind(Enum):
    PLAIN = "plain"
    REFERENCE = "reference"


@dataclass(frozen=True)
class TypeRef:
    """
    Either a primitive type name or a reference to a user defined data type.

    The compiled template stores these as ``{"type": "string"}`` or
    ``{"$ref": "#/definitions/Foo"}``; the raw value is kept and turned into a
    display string only when rendering.
    """

    kind: TypeKind
    value: str

    @classmethod
    def plain(cls, name: str) -> "TypeRef":
        return cls(TypeKind.PLAIN, name)

    @classmethod
    def reference(cls, ref: str) -> "TypeRef":
        return cls(TypeKind.REFERENCE, ref)

    @classmethod
    def any(cls) -> "TypeRef":
        return cls(TypeKind.PLAIN, ANY_TYPE)

    @classmethod
    def parse(cls, value: str) -> "TypeRef":
        """Build a TypeRef from a raw string, detecting definition references."""
        if value.startswith(DEFINITIONS_PREFIX):
            return cls.reference(value)
        return cls.plain(value)

    @property
    def is_reference(self) -> bool:
        return self.kind is TypeKind.REFERENCE

    @property
    def name(self) -> str:
        """Type name without the reference path."""
        if self.is_reference:
            return self.value.rsplit("/", 1)[-1]
        return self.value

    def __str__(self) -> str:
        return self.value


@dataclass
class Constraints:
    """Validation decorators attached to a parameter, output or type."""

    allowed_values: Optional[List[Any]] = None
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    min_value: Optional[int] = None
    max_value: Optional[int] = None


@dataclass
class Metadata:
    """Name, description and export flag of an entity or of the template."""

    name: Optional[str] = None
    description: Optional[str] = None
    exportable: Optional[bool] = None


@dataclass
class Module:
    """
    A module declaration recovered from the Bicep source.

    Example: ``module network './modules/network/main.bicep'`` has the
    symbolic name ``network`` and the source ``./modules/network/main.bicep``.
    """

    symbolic_name: str
    source: str
    description: str = ""


@dataclass
class Resource:
    """A resource declaration, with the API version stripped from its type."""

    symbolic_name: str
    type: str
    description: str = ""


@dataclass
class TypedEntity:
    """Common shape of everything that carries a type in the compiled template."""

    name: str = ""
    type: TypeRef = field(default_factory=TypeRef.any)
    items: Optional[TypeRef] = None
    nullable: bool = False
    constraints: Constraints = field(default_factory=Constraints)
    metadata: Optional[Metadata] = None

    @property
    def description(self) -> Optional[str]:
        if self.metadata is None:
            return None
        return self.metadata.description


@dataclass
class Parameter(TypedEntity):
    default_value: Any = None

    def is_required(self) -> bool:
        """A parameter is required when it has no default and is not nullable."""
        return self.default_value is None and not self.nullable

    def get_status(self) -> str:
        return "Required" if self.is_required() else "Optional"


@dataclass
class Output(TypedEntity):
    pass


@dataclass
class UserDefinedDataTypeProperty(TypedEntity):
    pass


@dataclass
class UserDefinedDataType(TypedEntity):
    properties: List[UserDefinedDataTypeProperty] = field(default_factory=list)

    @property
    def exportable(self) -> bool:
        return bool(self.metadata and self.metadata.exportable)


@dataclass
class UserDefinedFunction:
    name: str = ""
    parameters: List[Parameter] = field(default_factory=list)
    output: Output = field(default_factory=Output)
    metadata: Optional[Metadata] = None

    @property
    def exportable(self) -> bool:
        return bool(self.metadata and self.metadata.exportable)


@dataclass
class Variable:
    """
    A template variable.

    The value is opaque and only kept when the variable comes from the Bicep
    source alone; the description always comes from the source.
    """

    name: str
    value: Any = None
    description: str = ""


@dataclass
class Template:
    """Everything known about one Bicep template."""

    file_name: str = ""
    modules: List[Module] = field(default_factory=list)
    resources: List[Resource] = field(default_factory=list)
    parameters: List[Parameter] = field(default_factory=list)
    user_defined_data_types: List[UserDefinedDataType] = field(default_factory=list)
    user_defined_functions: List[UserDefinedFunction] = field(default_factory=list)
    variables: List[Variable] = field(default_factory=list)
    outputs: List[Output] = field(default_factory=list)
    metadata: Optional[Metadata] = None

    @property
    def title(self) -> str:
        if self.metadata is not None and self.metadata.name:
            return self.metadata.name
        return self.file_name

    def sort(self) -> None:
        """Sort every named collection (and type properties) by name."""
        self.parameters.sort(key=lambda p: p.name)
        self.user_defined_data_types.sort(key=lambda t: t.name)
        for data_type in self.user_defined_data_types:
            data_type.properties.sort(key=lambda p: p.name)
        self.variables.sort(key=lambda v: v.name)
        self.outputs.sort(key=lambda o: o.name)
        self.user_defined_functions.sort(key=lambda f: f.name)
