"""
bicep-docs - Markdown documentation for Bicep templates

Scans a Bicep template and its compiled ARM template, merges what both
sides know about modules, resources, parameters, types, functions, variables
and outputs, and renders the result as a diffable Markdown document.
"""

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "BicepDocsConfig",
    "Template",
    "Section",
    "parse_templates",
    "build_markdown_string",
    "create_file",
    "generate_docs",
]


def __getattr__(name):
    """Lazy loading of the public API to keep ``import bicepdocs`` light."""
    if name == "BicepDocsConfig":
        from .config import BicepDocsConfig
        return BicepDocsConfig

    if name in {"Template", "Section"}:
        from .models import Section, Template
        return {"Template": Template, "Section": Section}[name]

    if name == "parse_templates":
        from .template import parse_templates
        return parse_templates

    if name in {"build_markdown_string", "create_file"}:
        from .markdown import build_markdown_string, create_file
        return {"build_markdown_string": build_markdown_string, "create_file": create_file}[name]

    if name == "generate_docs":
        from .cli.process import generate_docs
        return generate_docs

    raise AttributeError(f"module 'bicepdocs' has no attribute '{name}'")
