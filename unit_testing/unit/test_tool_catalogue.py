"""
Unit tests for the tool catalogue advertised to the model.
"""

import pytest

from aiconic.agent import ToolName, UnknownToolError, tool_definitions
from aiconic.agent.tool_catalogue import (
    ToolArgumentError,
    parse_tool_arguments,
    parse_tool_name,
)


class TestToolDefinitions:

    def test_all_tools_advertised(self, registry):
        names = [d["function"]["name"] for d in tool_definitions(registry)]
        assert names == [tool.value for tool in ToolName]
        assert len(names) == 7

    def test_definitions_are_function_tools(self, registry):
        for definition in tool_definitions(registry):
            assert definition["type"] == "function"
            assert definition["function"]["description"]
            assert definition["function"]["parameters"]["type"] == "object"

    def test_schema_has_no_titles(self, registry):
        definition = tool_definitions(registry)[0]
        parameters = definition["function"]["parameters"]
        assert "title" not in parameters
        assert "title" not in parameters["properties"]["userPrompt"]
        assert parameters["required"] == ["userPrompt"]

    def test_single_icon_style_restricted_to_registry(self, registry):
        by_name = {d["function"]["name"]: d for d in tool_definitions(registry)}
        style = by_name["generate_icon_by_main_body"]["function"]["parameters"]["properties"]["style"]
        assert style["enum"] == registry.ids()

    def test_without_registry_style_is_free_text(self):
        by_name = {d["function"]["name"]: d for d in tool_definitions()}
        style = by_name["generate_icon_by_main_body"]["function"]["parameters"]["properties"]["style"]
        assert "enum" not in style

    def test_recent_limit_is_optional(self, registry):
        by_name = {d["function"]["name"]: d for d in tool_definitions(registry)}
        parameters = by_name["get_recent_icons"]["function"]["parameters"]
        assert parameters["properties"]["limit"]["default"] == 5
        assert "limit" not in parameters.get("required", [])


class TestParsing:

    def test_parse_known_name(self):
        assert parse_tool_name("generate_icon_set") is ToolName.GENERATE_ICON_SET

    def test_parse_unknown_name(self):
        with pytest.raises(UnknownToolError) as excinfo:
            parse_tool_name("draw_banner")
        assert str(excinfo.value) == "Unknown tool: draw_banner"

    def test_parse_arguments(self):
        assert parse_tool_arguments('{"mainBody": "盾牌"}') == {"mainBody": "盾牌"}

    def test_empty_arguments(self):
        assert parse_tool_arguments("") == {}
        assert parse_tool_arguments(None) == {}

    @pytest.mark.parametrize("raw", ["{mainBody: 盾牌", '["盾牌"]', "42"])
    def test_invalid_arguments(self, raw):
        with pytest.raises(ToolArgumentError):
            parse_tool_arguments(raw)
