"""Pydantic models for the agent configuration and its editing API."""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SerializerFunctionWrapHandler,
    computed_field,
    model_serializer,
    model_validator,
)

from tools.schemas import ObjectSchema, WireTool

ATTRIBUTE_TYPES = ["str", "int", "float", "bool", "list", "dict", "List[str]", "Dict[str, Any]"]
MODEL_OPTIONS = ["gpt-4o-mini", "gpt-4o", "gpt-3.5-turbo", "claude-3-opus", "claude-3-sonnet"]

WorkflowType = Literal["simple_router", "judge_loop"]


class AttributeSpec(BaseModel):
    """A typed field of the conversation context."""

    name: str = ""
    type: Literal["str", "int", "float", "bool", "list", "dict", "List[str]", "Dict[str, Any]"] = "str"
    default: str | None = None


class ContextClass(BaseModel):
    name: str
    attributes: list[AttributeSpec] = []


class OutputTypeSchema(BaseModel):
    """Structured output contract for an agent's response."""

    model_config = ConfigDict(populate_by_name=True, serialize_by_alias=True)

    name: str
    json_schema: ObjectSchema = Field(alias="schema")


class AgentDefinition(BaseModel):
    """One node of the multi-agent graph."""

    id: str = Field(..., min_length=1)
    name: str
    instructions: str
    model: str | None = None
    handoff_description: str | None = None
    tools: list[WireTool] = []
    handoffs: list[str] = []
    output_type: OutputTypeSchema | None = None

    @model_serializer(mode="wrap")
    def _serialize(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        # A cleared output type is an explicit null; one that was never set is omitted
        data = handler(self)
        if self.output_type is None:
            if "output_type" in self.model_fields_set:
                data["output_type"] = None
            else:
                data.pop("output_type", None)
        return data


class JudgeLoopSettings(BaseModel):
    """Generator/evaluator refinement loop settings."""

    generator_agent_id: str = ""
    evaluator_agent_id: str = ""
    max_iterations: int = Field(5, ge=1, le=10)
    pass_field: str = "score"
    pass_value: str = "pass"
    feedback_field: str = "feedback"


class AgentConfig(BaseModel):
    """Root configuration of a chatbot's agent system."""

    model_config = ConfigDict(extra="ignore")

    system_name: str
    context_class: ContextClass
    agents: list[AgentDefinition] = Field(..., min_length=1)
    router_agent_id: str
    default_model: str = "gpt-4o-mini"
    workflow_type: WorkflowType = "simple_router"
    judge_loop_settings: JudgeLoopSettings | None = None

    @model_validator(mode="after")
    def _check_structure(self) -> "AgentConfig":
        ids = [agent.id for agent in self.agents]
        duplicates = sorted({i for i in ids if ids.count(i) > 1})
        if duplicates:
            raise ValueError(f"Duplicate agent ids: {', '.join(duplicates)}")
        if self.router_agent_id not in ids:
            raise ValueError(f"router_agent_id '{self.router_agent_id}' is not an agent id")
        if self.workflow_type == "judge_loop" and self.judge_loop_settings is None:
            raise ValueError("judge_loop_settings are required for the judge_loop workflow")
        return self

    def get_agent(self, agent_id: str) -> AgentDefinition | None:
        for agent in self.agents:
            if agent.id == agent_id:
                return agent
        return None

    @property
    def agent_ids(self) -> list[str]:
        return [agent.id for agent in self.agents]

    def to_document(self) -> dict[str, Any]:
        """Serialize for the document store and the execution API (no undefined values)."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def default_agent_config() -> AgentConfig:
    return AgentConfig(
        system_name="AssistantSystem",
        context_class=ContextClass(
            name="UserContext",
            attributes=[
                AttributeSpec(name="user_id", type="str"),
                AttributeSpec(name="conversation_history", type="str", default=""),
            ],
        ),
        agents=[
            AgentDefinition(
                id="main_assistant",
                name="Main Assistant",
                instructions=(
                    "You are a helpful assistant. "
                    "Answer the user's questions clearly and concisely."
                ),
            )
        ],
        router_agent_id="main_assistant",
        default_model="gpt-4o-mini",
        workflow_type="simple_router",
    )


# ===== Editing actions =====

class AgentUpdate(BaseModel):
    """Partial fields for update_agent; only fields that are set are merged."""

    name: str | None = None
    instructions: str | None = None
    model: str | None = None
    handoff_description: str | None = None
    tools: list[WireTool] | None = None
    handoffs: list[str] | None = None


class UpdateSystemName(BaseModel):
    op: Literal["update_system_name"]
    name: str


class UpdateDefaultModel(BaseModel):
    op: Literal["update_default_model"]
    model: str


class UpdateContextClassName(BaseModel):
    op: Literal["update_context_class_name"]
    name: str


class AddContextAttribute(BaseModel):
    op: Literal["add_context_attribute"]


class UpdateContextAttribute(BaseModel):
    op: Literal["update_context_attribute"]
    index: int
    attribute: AttributeSpec


class RemoveContextAttribute(BaseModel):
    op: Literal["remove_context_attribute"]
    index: int


class UpdateWorkflowType(BaseModel):
    op: Literal["update_workflow_type"]
    workflow_type: WorkflowType


class UpdateJudgeLoop(BaseModel):
    op: Literal["update_judge_loop_settings"]
    settings: JudgeLoopSettings


class AddAgent(BaseModel):
    op: Literal["add_agent"]
    agent_id: str | None = None


class UpdateAgent(BaseModel):
    op: Literal["update_agent"]
    agent_id: str
    fields: AgentUpdate


class RemoveAgent(BaseModel):
    op: Literal["remove_agent"]
    agent_id: str


class UpdateRouterAgent(BaseModel):
    op: Literal["update_router_agent_id"]
    agent_id: str


class AddTool(BaseModel):
    op: Literal["add_tool"]
    agent_id: str
    tool: WireTool


class UpdateTool(BaseModel):
    op: Literal["update_tool"]
    agent_id: str
    index: int
    tool: WireTool


class RemoveTool(BaseModel):
    op: Literal["remove_tool"]
    agent_id: str
    index: int


class UpdateOutputType(BaseModel):
    op: Literal["update_output_type"]
    agent_id: str
    output_type: OutputTypeSchema | None = None


ConfigAction = Annotated[
    Union[
        UpdateSystemName,
        UpdateDefaultModel,
        UpdateContextClassName,
        AddContextAttribute,
        UpdateContextAttribute,
        RemoveContextAttribute,
        UpdateWorkflowType,
        UpdateJudgeLoop,
        AddAgent,
        UpdateAgent,
        RemoveAgent,
        UpdateRouterAgent,
        AddTool,
        UpdateTool,
        RemoveTool,
        UpdateOutputType,
    ],
    Field(discriminator="op"),
]


class ActionRequest(BaseModel):
    """Apply one action to a posted config without persisting it."""

    config: AgentConfig
    action: ConfigAction


class ActionResponse(BaseModel):
    config: AgentConfig
    issues: list[str] = []


class ValidationReport(BaseModel):
    valid: bool
    issues: list[str] = []
    warnings: list[str] = []


class SaveResult(BaseModel):
    """Outcome of the two-phase save: store write, then execution API registration."""

    stored: bool = False
    registered: bool = False
    error: str | None = None

    @computed_field
    @property
    def saved(self) -> bool:
        return self.stored and self.registered


class EditorOptions(BaseModel):
    """Choices offered by the config editor."""

    models: list[str]
    attribute_types: list[str]
    workflow_types: list[str]
    parameter_types: list[str]
    http_methods: list[str]
