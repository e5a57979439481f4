import pytest
from pydantic import ValidationError

from tools.schemas import (
    AgentToolRef,
    ApiCallTool,
    BuiltInTool,
    ObjectSchema,
    parse_tool,
    tool_to_wire,
)


def test_bare_string_is_built_in_tool():
    assert parse_tool("web_search") == BuiltInTool(name="web_search")


def test_agent_prefix_is_agent_reference():
    assert parse_tool("agent_billing") == AgentToolRef(agent_id="billing")


def test_api_call_object_without_type_tag():
    tool = parse_tool({"name": "weather", "api_config": {"url": "https://w.test", "method": "GET"}})
    assert isinstance(tool, ApiCallTool)
    assert tool.api_config.url == "https://w.test"


def test_built_in_object_keeps_vector_store():
    tool = parse_tool({"type": "built-in", "name": "file_search", "vector_store_id": "vs_1"})
    assert tool == BuiltInTool(name="file_search", vector_store_id="vs_1")


def test_unrecognised_entry_rejected():
    with pytest.raises(ValueError):
        parse_tool({"foo": "bar"})
    with pytest.raises(ValueError):
        parse_tool(42)


def test_wire_format():
    assert tool_to_wire(AgentToolRef(agent_id="billing")) == "agent_billing"
    assert tool_to_wire(BuiltInTool(name="web_search")) == "web_search"
    assert tool_to_wire(BuiltInTool(name="file_search", vector_store_id="vs_1")) == {
        "type": "built-in",
        "name": "file_search",
        "vector_store_id": "vs_1",
    }
    wire = tool_to_wire(parse_tool({"name": "weather", "api_config": {"url": "https://w.test"}}))
    assert "type" not in wire
    assert wire["api_config"]["method"] == "GET"
    assert "description" not in wire


def test_api_call_requires_name_and_url():
    with pytest.raises(ValidationError, match="Tool name is required"):
        ApiCallTool(name=" ", api_config={"url": "https://w.test"})
    with pytest.raises(ValidationError, match="API URL is required"):
        ApiCallTool(name="weather", api_config={"url": ""})


def test_object_schema_alias_and_required_check():
    schema = ObjectSchema.model_validate(
        {"properties": {"city": {"type": "string"}}, "required": ["city"], "additionalProperties": False}
    )
    assert schema.additional_properties is False
    assert schema.model_dump()["additionalProperties"] is False

    with pytest.raises(ValidationError, match="unknown properties"):
        ObjectSchema(properties={}, required=["missing"])
