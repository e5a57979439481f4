"""Tool service: built-in catalog, tool drafts, API-call form validation, file uploads."""

from __future__ import annotations

import json
import logging
from typing import Any, Literal

from pydantic import ValidationError as SchemaError

from exceptions import ValidationError
from execution_client import ExecutionApiClient
from tools.schemas import (
    BUILT_IN_TOOLS,
    AgentToolRef,
    ApiCallTool,
    ApiConfig,
    BuiltInTool,
    BuiltInToolSummary,
    FileUploadResponse,
    ObjectSchema,
    ParameterField,
    PropertySpec,
    ToolDescriptor,
)

logger = logging.getLogger(__name__)

ToolType = Literal["built-in", "api-call", "agent"]

_BUILT_IN_DESCRIPTIONS = {
    "web_search": "Search the web for up-to-date information",
    "file_search": "Search uploaded knowledge files",
}


def list_built_in_tools() -> list[BuiltInToolSummary]:
    """Return the built-in tools an agent can use."""
    return [
        BuiltInToolSummary(
            name=name,
            description=_BUILT_IN_DESCRIPTIONS.get(name, ""),
            requires_vector_store=name == "file_search",
        )
        for name in BUILT_IN_TOOLS
    ]


def agent_tool(agent_id: str) -> AgentToolRef:
    """Wrap another agent of the same config as a tool."""
    if not agent_id:
        raise ValidationError("Agent id is required")
    return AgentToolRef(agent_id=agent_id)


def built_in_tool(name: str, vector_store_id: str | None = None) -> BuiltInTool:
    if name not in BUILT_IN_TOOLS:
        raise ValidationError(
            f"Unknown built-in tool '{name}'. Must be one of: {', '.join(BUILT_IN_TOOLS)}"
        )
    return BuiltInTool(name=name, vector_store_id=vector_store_id)


def blank_api_call_draft() -> dict[str, Any]:
    """Starting point for the API-call form; not yet a valid tool."""
    return {
        "name": "",
        "description": "",
        "parameters": {
            "type": "object",
            "properties": {},
            "required": [],
            "additionalProperties": False,
        },
        "api_config": {
            "method": "GET",
            "url": "",
            "headers": {},
            "query_params": {},
            "body_template": {},
            "response_template": {},
        },
    }


def new_tool_draft(tool_type: ToolType) -> ToolDescriptor | dict[str, Any] | None:
    """Draft shown when a tool of the given type is being added.

    Built-in and agent tools are picked from a list, so they start empty.
    """
    if tool_type == "api-call":
        return blank_api_call_draft()
    if tool_type in ("built-in", "agent"):
        return None
    raise ValidationError(f"Unknown tool type '{tool_type}'")


def parse_template(text: str, label: str) -> dict[str, Any]:
    """Parse a JSON template typed into the API-call form."""
    try:
        value = json.loads(text or "{}")
    except json.JSONDecodeError as exc:
        raise ValidationError(f"Invalid JSON for {label} template: {exc.msg}") from exc
    if not isinstance(value, dict):
        raise ValidationError(f"Invalid JSON for {label} template: expected an object")
    return value


def add_parameter(
    parameters: ObjectSchema,
    name: str,
    type: str = "string",
    description: str = "",
    required: bool = True,
    enum_values: str = "",
) -> ObjectSchema:
    """Return parameters with one more property; a blank name is ignored."""
    name = name.strip()
    if not name:
        return parameters
    enum = [v.strip() for v in enum_values.split(",") if v.strip()] if type == "string" else []
    prop = PropertySpec(type=type, description=description, enum=enum or None)
    req = list(parameters.required)
    if required and name not in req:
        req.append(name)
    return parameters.model_copy(
        update={"properties": {**parameters.properties, name: prop}, "required": req}
    )


def form_parameters(
    parameters: ObjectSchema | None, fields: list[ParameterField]
) -> ObjectSchema | None:
    """Fold the form's parameter rows into the tool's parameter schema."""
    if not fields:
        return parameters
    schema = parameters or ObjectSchema(additional_properties=False)
    for field in fields:
        schema = add_parameter(
            schema,
            field.name,
            type=field.type,
            description=field.description,
            required=field.required,
            enum_values=field.enum_values,
        )
    return schema


def build_api_call_tool(
    name: str,
    url: str,
    method: str = "GET",
    description: str | None = None,
    parameters: ObjectSchema | None = None,
    headers: dict[str, str] | None = None,
    query_params: dict[str, str] | None = None,
    body_template: str = "{}",
    response_template: str = "{}",
) -> ApiCallTool:
    """Validate the API-call form and build the tool entry."""
    if not name.strip():
        raise ValidationError("Tool name is required")
    if not url.strip():
        raise ValidationError("API URL is required")

    body = parse_template(body_template, "body")
    response = parse_template(response_template, "response")

    try:
        return ApiCallTool(
            name=name,
            description=description or None,
            parameters=parameters,
            api_config=ApiConfig(
                method=method.upper(),
                url=url,
                headers=headers or {},
                query_params=query_params or {},
                body_template=body,
                response_template=response,
            ),
        )
    except SchemaError as exc:
        raise ValidationError(f"Invalid API call tool: {exc.errors()[0]['msg']}") from exc


def upload_knowledge_file(
    client: ExecutionApiClient,
    chatbot_id: str,
    filename: str,
    content: bytes,
    content_type: str = "application/octet-stream",
) -> FileUploadResponse:
    """Upload a file to the execution API and build the matching file_search tool."""
    if not content:
        raise ValidationError("Uploaded file is empty")
    vector_store_id = client.upload_file(chatbot_id, filename, content, content_type)
    logger.info(
        "Uploaded '%s' for chatbot '%s' into vector store %s",
        filename,
        chatbot_id,
        vector_store_id,
    )
    return FileUploadResponse(
        vector_store_id=vector_store_id,
        tool=BuiltInTool(name="file_search", vector_store_id=vector_store_id),
    )
