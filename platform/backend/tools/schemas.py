"""Pydantic models for agent tools and JSON-schema-like object schemas.

Tools are stored and sent to the execution API in a loose wire format:
bare strings for built-in tools (``"web_search"``) and agent tools
(``"agent_<id>"``), and objects for API-call tools. Inside the backend they
are always one of the three tagged models below; ``parse_tool`` and
``tool_to_wire`` convert at the boundary.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    PlainSerializer,
    model_validator,
)

AGENT_TOOL_PREFIX = "agent_"
BUILT_IN_TOOLS = ["web_search", "file_search"]
PARAMETER_TYPES = ["string", "number", "integer", "boolean", "array", "object"]
HTTP_METHODS = ["GET", "POST", "PUT", "DELETE"]

ParameterType = Literal["string", "number", "integer", "boolean", "array", "object"]


class PropertySpec(BaseModel):
    """One property of an object schema."""

    type: ParameterType = "string"
    description: str = ""
    enum: list[str] | None = None


class ObjectSchema(BaseModel):
    """Subset of JSON Schema used for tool parameters and output types."""

    model_config = ConfigDict(populate_by_name=True, serialize_by_alias=True)

    type: Literal["object"] = "object"
    properties: dict[str, PropertySpec] = {}
    required: list[str] = []
    additional_properties: bool | None = Field(default=None, alias="additionalProperties")

    @model_validator(mode="after")
    def _required_are_properties(self) -> "ObjectSchema":
        unknown = [name for name in self.required if name not in self.properties]
        if unknown:
            raise ValueError(
                f"required lists unknown properties: {', '.join(unknown)}"
            )
        return self


class ApiConfig(BaseModel):
    """HTTP call performed when an API-call tool is invoked."""

    method: Literal["GET", "POST", "PUT", "DELETE"] = "GET"
    url: str
    headers: dict[str, str] = {}
    query_params: dict[str, str] = {}
    body_template: dict[str, Any] = {}
    response_template: dict[str, Any] = {}


class BuiltInTool(BaseModel):
    type: Literal["built-in"] = "built-in"
    name: str = Field(..., min_length=1)
    vector_store_id: str | None = None


class AgentToolRef(BaseModel):
    """Another agent of the same configuration, callable as a tool."""

    type: Literal["agent"] = "agent"
    agent_id: str = Field(..., min_length=1)


class ApiCallTool(BaseModel):
    type: Literal["api-call"] = "api-call"
    name: str
    description: str | None = None
    parameters: ObjectSchema | None = None
    api_config: ApiConfig

    @model_validator(mode="after")
    def _check_required_fields(self) -> "ApiCallTool":
        if not self.name.strip():
            raise ValueError("Tool name is required")
        if not self.api_config.url.strip():
            raise ValueError("API URL is required")
        return self


ToolDescriptor = Union[BuiltInTool, AgentToolRef, ApiCallTool]


def parse_tool(raw: Any) -> ToolDescriptor:
    """Normalize one wire-format tool entry into a tagged model."""
    if isinstance(raw, (BuiltInTool, AgentToolRef, ApiCallTool)):
        return raw
    if isinstance(raw, str):
        if raw.startswith(AGENT_TOOL_PREFIX):
            return AgentToolRef(agent_id=raw[len(AGENT_TOOL_PREFIX):])
        return BuiltInTool(name=raw)
    if isinstance(raw, dict):
        kind = raw.get("type")
        if kind == "built-in":
            return BuiltInTool.model_validate(raw)
        if kind == "agent":
            return AgentToolRef.model_validate(raw)
        if kind == "api-call" or "api_config" in raw:
            return ApiCallTool.model_validate({**raw, "type": "api-call"})
    raise ValueError(f"Unrecognised tool entry: {raw!r}")


def tool_to_wire(tool: ToolDescriptor) -> str | dict[str, Any]:
    """Render a tool in the format the document store and execution API expect."""
    if isinstance(tool, AgentToolRef):
        return f"{AGENT_TOOL_PREFIX}{tool.agent_id}"
    if isinstance(tool, BuiltInTool):
        if tool.vector_store_id is None:
            return tool.name
        return tool.model_dump(mode="json")
    return tool.model_dump(mode="json", exclude={"type"}, exclude_none=True)


# Field type for tool lists: accepts wire or model input, dumps back to wire format
WireTool = Annotated[
    ToolDescriptor,
    BeforeValidator(parse_tool),
    PlainSerializer(tool_to_wire, return_type=Union[str, dict[str, Any]]),
]


class BuiltInToolSummary(BaseModel):
    """Catalog entry for a built-in tool."""

    name: str
    description: str
    requires_vector_store: bool = False


class FileUploadResponse(BaseModel):
    """Result of uploading a knowledge file for the file_search tool."""

    vector_store_id: str
    tool: BuiltInTool


class ParameterField(BaseModel):
    """One parameter row of the API-call form; enum values are comma separated."""

    name: str
    type: ParameterType = "string"
    description: str = ""
    required: bool = True
    enum_values: str = ""


class ApiCallForm(BaseModel):
    """Raw API-call tool form input; templates are JSON text."""

    name: str = ""
    description: str | None = None
    method: str = "GET"
    url: str = ""
    parameters: ObjectSchema | None = None
    parameter_fields: list[ParameterField] = []
    headers: dict[str, str] = {}
    query_params: dict[str, str] = {}
    body_template: str = "{}"
    response_template: str = "{}"
