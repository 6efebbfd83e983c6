"""
Tests for Markdown rendering.
"""

import pytest

from bicepdocs.errors import RenderError
from bicepdocs.markdown import MarkdownTable, build_markdown_string, extract_type
from bicepdocs.markdown.helpers import encode_value, format_default_value, to_bicep_literal
from bicepdocs.markdown.sections import (
    generate_outputs_section,
    generate_parameters_section,
    generate_usage_section,
    generate_user_defined_data_types_section,
    generate_user_defined_functions_section,
)
from bicepdocs.models import Metadata, Parameter, Section, Template, TypeRef
from bicepdocs.template import parse_templates


@pytest.fixture
def extended_template(extended_dir):
    return parse_templates(extended_dir / "main.bicep", extended_dir / "main.json")


class TestHelpers:
    """Cell formatting helpers."""

    @pytest.mark.parametrize("type_ref, items, expected", [
        (TypeRef.plain("string"), None, "string"),
        (TypeRef.reference("#/definitions/Foo"), None, "Foo (uddt)"),
        (TypeRef.plain("array"), TypeRef.plain("string"), "string[]"),
        (TypeRef.plain("array"), TypeRef.reference("#/definitions/Foo"), "Foo[] (uddt)"),
        (TypeRef.plain("array"), None, "array"),
    ])
    def test_extract_type(self, type_ref, items, expected):
        assert extract_type(type_ref, items) == expected

    def test_encode_value_spacing_and_key_order(self):
        assert encode_value({"b": 1, "a": [1, 2]}, "x") == '{"a": [1, 2], "b": 1}'

    def test_encode_value_keeps_string_contents(self):
        assert encode_value("a,b:c", "x") == '"a,b:c"'

    def test_default_of_nullable_parameter(self):
        assert format_default_value(Parameter(name="p", nullable=True)) == "null"
        assert format_default_value(Parameter(name="p")) == ""

    def test_default_false_is_rendered(self):
        assert format_default_value(Parameter(name="p", default_value=False)) == "false"

    def test_unencodable_value(self):
        with pytest.raises(RenderError, match="parameter 'p'"):
            format_default_value(Parameter(name="p", default_value=object()))

    def test_bicep_literal(self):
        literal = to_bicep_literal({"name": "x", "tags": {"env": "dev"}}, "x", indent="")
        assert literal == "{\n  name: 'x'\n  tags: {\n    env: 'dev'\n  }\n}"

    def test_bicep_literal_escapes_quotes_and_backslashes(self):
        assert to_bicep_literal("it's", "x") == "'it\\'s'"
        assert to_bicep_literal({"note": "it's a\\b"}, "x", indent="") == (
            "{\n  note: 'it\\'s a\\\\b'\n}"
        )

    def test_bicep_literal_escapes_newlines_and_interpolation(self):
        assert to_bicep_literal(["a\nb", "${x}"], "x", indent="") == "[\n  'a\\nb'\n  '\\${x}'\n]"

    def test_bicep_literal_quotes_non_identifier_keys(self):
        assert to_bicep_literal({"my-key": 1, "ok": None}, "x", indent="") == (
            "{\n  'my-key': 1\n  ok: null\n}"
        )

    def test_bicep_literal_empty_containers(self):
        assert to_bicep_literal({"a": [], "b": {}}, "x", indent="") == "{\n  a: []\n  b: {}\n}"

    def test_usage_escapes_apostrophe_in_default(self):
        template = Template(parameters=[Parameter(name="greeting", default_value="it's")])
        assert "    greeting: 'it\\'s'\n" in generate_usage_section(template)


class TestMarkdownTable:
    """Table rendering."""

    def test_render(self):
        table = MarkdownTable("Things", ["A", "B"])
        table.add_row("1", "")
        assert str(table) == "## Things\n\n| A | B |\n| --- | --- |\n| 1 |  |\n"

    def test_level(self):
        assert str(MarkdownTable("Sub", ["A"], level=3)).startswith("### Sub\n")

    def test_pipes_in_cells_are_escaped(self):
        table = MarkdownTable("Things", ["A", "B"])
        table.add_row("a | b", "c")
        assert "| a \\| b | c |" in str(table)

    def test_pipe_in_parameter_description(self):
        template = Template(parameters=[
            Parameter(name="p", metadata=Metadata(description="a | b")),
        ])
        row = generate_parameters_section(template).splitlines()[-1]
        assert row == "| p | Required | any | a \\| b |  |"


class TestBuildMarkdownString:
    """Whole-document rendering."""

    def test_basic_fixture_matches_expected(self, basic_dir):
        template = parse_templates(basic_dir / "main.bicep", basic_dir / "main.json")
        expected = (basic_dir / "README.expected.md").read_text(encoding="utf-8")

        assert build_markdown_string(template) == expected

    def test_empty_sections_are_omitted(self):
        template = Template(file_name="main.bicep")
        markdown = build_markdown_string(
            template, [Section.DESCRIPTION, Section.MODULES, Section.OUTPUTS]
        )
        assert markdown == "# main.bicep\n"

    def test_sections_follow_requested_order(self, extended_template):
        markdown = build_markdown_string(
            extended_template, [Section.OUTPUTS, Section.DESCRIPTION]
        )
        assert markdown.index("## Outputs") < markdown.index("## Description")
        assert "## Parameters" not in markdown

    def test_multiline_description_uses_line_breaks(self, extended_template):
        markdown = build_markdown_string(extended_template, [Section.DESCRIPTION, Section.MODULES])
        assert "An extended template<br>with a multi-line description." in markdown
        assert "| network | br/public:avm/res/network/virtual-network:0.1.0 | " \
               "Network module.<br>Deploys the virtual network. |" in markdown

    def test_ends_with_single_newline(self, extended_template):
        markdown = build_markdown_string(extended_template)
        assert markdown.endswith("\n")
        assert not markdown.endswith("\n\n")

    def test_unknown_section(self):
        with pytest.raises(RenderError, match="invalid section"):
            build_markdown_string(Template(), ["bogus"])

    def test_none_template(self):
        with pytest.raises(RenderError):
            build_markdown_string(None)

    def test_deterministic(self, extended_template):
        first = build_markdown_string(extended_template, show_all_decorators=True)
        second = build_markdown_string(extended_template, show_all_decorators=True)
        assert first == second


class TestSections:
    """Individual section generators on the extended template."""

    def test_parameters(self, extended_template):
        text = generate_parameters_section(extended_template)
        assert "| Name | Status | Type | Description | Default |" in text
        assert "| config | Required | storageConfig (uddt) | The storage configuration. |  |" in text
        assert "| counts | Optional | positiveInt[] (uddt) | Replica counts. | [1, 2] |" in text
        assert "| suffix | Optional | string | Optional suffix. | null |" in text

    def test_parameters_with_all_decorators(self, extended_template):
        text = generate_parameters_section(extended_template, show_all_decorators=True)
        assert (
            "| Name | Status | Type | Description | Default | Allowed Values | "
            "Min Length | Max Length | Min Value | Max Value |"
        ) in text
        assert (
            '| location | Optional | string | Where to deploy. | "westeurope" | '
            '"westeurope", "northeurope" |  |  |  |  |'
        ) in text

    def test_usage_lists_required_then_optional(self, extended_template):
        text = generate_usage_section(extended_template)
        assert "    // Required parameters\n    config:\n\n    // Optional parameters\n" in text
        assert "    counts: [\n      1\n      2\n    ]\n" in text
        assert "    location: 'westeurope'\n" in text
        assert "    suffix: null\n" in text

    def test_user_defined_data_types(self, extended_template):
        text = generate_user_defined_data_types_section(extended_template)
        assert "## User Defined Data Types (UDDTs)" in text
        assert "| positiveInt | int | A positive integer. |  |" in text
        assert (
            "| storageConfig | object | A storage account configuration. | "
            "[View Properties](#storageconfig) |"
        ) in text
        assert "### storageConfig" in text
        assert "| sizes | positiveInt[] (uddt) |  |" in text

    def test_user_defined_data_types_with_all_decorators(self, extended_template):
        text = generate_user_defined_data_types_section(extended_template, show_all_decorators=True)
        assert "| positiveInt | int | A positive integer. | Yes |  |  |  | 1 |  |  |" in text
        assert "| name | string | Name of the account. |  | 3 | 24 |  |  |" in text

    def test_user_defined_functions(self, extended_template):
        assert "| buildUrl | Builds a URL. | string |" in generate_user_defined_functions_section(
            extended_template
        )
        assert "| buildUrl | Builds a URL. | string | Yes |" in generate_user_defined_functions_section(
            extended_template, show_all_decorators=True
        )

    def test_outputs_with_all_decorators(self, extended_template):
        text = generate_outputs_section(extended_template, show_all_decorators=True)
        assert "| Name | Type | Description | Min Length | Max Length | Min Value | Max Value |" in text
        assert "| sizes | positiveInt[] (uddt) | The sizes. |  |  |  |  |" in text
        assert "| storageId | string | The storage account id. | 1 |  |  |  |" in text

    def test_title_from_file_name_without_metadata(self):
        template = Template(file_name="infra/main.bicep", metadata=Metadata(description="d"))
        assert build_markdown_string(template, [Section.DESCRIPTION]) == (
            "# infra/main.bicep\n\n## Description\n\nd\n"
        )
