"""Pure transforms over AgentConfig.

Every function returns a new config and leaves its input untouched. Guarded
cases (unknown agent, bad index, removing the last agent) return the config
unchanged instead of raising.
"""

from __future__ import annotations

import secrets
import string
from collections.abc import Callable, Iterable

from agents.schemas import (
    AddAgent,
    AddContextAttribute,
    AddTool,
    AgentConfig,
    AgentDefinition,
    AgentUpdate,
    AttributeSpec,
    JudgeLoopSettings,
    OutputTypeSchema,
    RemoveAgent,
    RemoveContextAttribute,
    RemoveTool,
    UpdateAgent,
    UpdateContextAttribute,
    UpdateContextClassName,
    UpdateDefaultModel,
    UpdateJudgeLoop,
    UpdateOutputType,
    UpdateRouterAgent,
    UpdateSystemName,
    UpdateTool,
    UpdateWorkflowType,
    WorkflowType,
)
from agents.workflow import (
    default_evaluator_id,
    default_generator_id,
    default_judge_loop_settings,
    reconcile_evaluator_fields,
)
from tools.schemas import AgentToolRef, ToolDescriptor

_ID_ALPHABET = string.ascii_letters + string.digits + "_-"


def new_agent_id(existing: Iterable[str] = ()) -> str:
    taken = set(existing)
    while True:
        candidate = "agent_" + "".join(secrets.choice(_ID_ALPHABET) for _ in range(6))
        if candidate not in taken:
            return candidate


# ===== System settings =====

def update_system_name(config: AgentConfig, name: str) -> AgentConfig:
    return config.model_copy(update={"system_name": name})


def update_default_model(config: AgentConfig, model: str) -> AgentConfig:
    return config.model_copy(update={"default_model": model})


def update_context_class_name(config: AgentConfig, name: str) -> AgentConfig:
    context = config.context_class.model_copy(update={"name": name})
    return config.model_copy(update={"context_class": context})


def _with_attributes(config: AgentConfig, attributes: list[AttributeSpec]) -> AgentConfig:
    context = config.context_class.model_copy(update={"attributes": attributes})
    return config.model_copy(update={"context_class": context})


def add_context_attribute(config: AgentConfig) -> AgentConfig:
    attributes = [*config.context_class.attributes, AttributeSpec(name="", type="str")]
    return _with_attributes(config, attributes)


def update_context_attribute(
    config: AgentConfig, index: int, attribute: AttributeSpec
) -> AgentConfig:
    attributes = list(config.context_class.attributes)
    if not 0 <= index < len(attributes):
        return config
    attributes[index] = attribute
    return _with_attributes(config, attributes)


def remove_context_attribute(config: AgentConfig, index: int) -> AgentConfig:
    attributes = list(config.context_class.attributes)
    if not 0 <= index < len(attributes):
        return config
    del attributes[index]
    return _with_attributes(config, attributes)


# ===== Workflow =====

def update_workflow_type(config: AgentConfig, workflow_type: WorkflowType) -> AgentConfig:
    update: dict = {"workflow_type": workflow_type}
    if workflow_type == "judge_loop" and config.judge_loop_settings is None:
        update["judge_loop_settings"] = default_judge_loop_settings(config)
    return config.model_copy(update=update)


def update_judge_loop_settings(
    config: AgentConfig, settings: JudgeLoopSettings
) -> AgentConfig:
    previous = config.judge_loop_settings
    evaluator_changed = (
        previous is None or previous.evaluator_agent_id != settings.evaluator_agent_id
    )
    if evaluator_changed and settings.evaluator_agent_id:
        settings = reconcile_evaluator_fields(config, settings)
    return config.model_copy(update={"judge_loop_settings": settings})


# ===== Agents =====

def add_agent(config: AgentConfig, agent_id: str | None = None) -> AgentConfig:
    """Append a new agent; the new agent is always the last entry."""
    if agent_id is None or agent_id in config.agent_ids:
        agent_id = new_agent_id(config.agent_ids)
    agent = AgentDefinition(
        id=agent_id,
        name="New Agent",
        instructions="You are a helpful assistant.",
        tools=[],
        handoffs=[],
    )
    return config.model_copy(update={"agents": [*config.agents, agent]})


def _replace_agent(config: AgentConfig, agent_id: str, **update) -> AgentConfig:
    if config.get_agent(agent_id) is None:
        return config
    agents = [
        agent.model_copy(update=update) if agent.id == agent_id else agent
        for agent in config.agents
    ]
    return config.model_copy(update={"agents": agents})


def update_agent(config: AgentConfig, agent_id: str, fields: AgentUpdate) -> AgentConfig:
    """Merge the explicitly set fields into one agent. Handoffs are not cross-checked."""
    update = {name: getattr(fields, name) for name in fields.model_fields_set}
    if not update:
        return config
    return _replace_agent(config, agent_id, **update)


def remove_agent(config: AgentConfig, agent_id: str) -> AgentConfig:
    """Remove an agent and every reference to it.

    Refuses to remove the last agent. The router falls back to the first
    remaining agent, and judge-loop roles fall back to their defaults.
    """
    if len(config.agents) <= 1 or config.get_agent(agent_id) is None:
        return config

    ref = AgentToolRef(agent_id=agent_id)
    agents = [
        agent.model_copy(
            update={
                "handoffs": [h for h in agent.handoffs if h != agent_id],
                "tools": [t for t in agent.tools if t != ref],
            }
        )
        for agent in config.agents
        if agent.id != agent_id
    ]
    update: dict = {"agents": agents}
    if config.router_agent_id == agent_id:
        update["router_agent_id"] = agents[0].id

    new_config = config.model_copy(update=update)
    settings = config.judge_loop_settings
    if settings is not None:
        roles = {}
        if settings.generator_agent_id == agent_id:
            roles["generator_agent_id"] = default_generator_id(new_config)
        if settings.evaluator_agent_id == agent_id:
            roles["evaluator_agent_id"] = default_evaluator_id(new_config)
        if roles:
            settings = reconcile_evaluator_fields(
                new_config, settings.model_copy(update=roles)
            )
            new_config = new_config.model_copy(update={"judge_loop_settings": settings})
    return new_config


def update_router_agent_id(config: AgentConfig, agent_id: str) -> AgentConfig:
    if config.get_agent(agent_id) is None:
        return config
    return config.model_copy(update={"router_agent_id": agent_id})


# ===== Tools =====

def add_tool(config: AgentConfig, agent_id: str, tool: ToolDescriptor) -> AgentConfig:
    agent = config.get_agent(agent_id)
    if agent is None:
        return config
    return _replace_agent(config, agent_id, tools=[*agent.tools, tool])


def update_tool(
    config: AgentConfig, agent_id: str, index: int, tool: ToolDescriptor
) -> AgentConfig:
    agent = config.get_agent(agent_id)
    if agent is None or not 0 <= index < len(agent.tools):
        return config
    tools = list(agent.tools)
    tools[index] = tool
    return _replace_agent(config, agent_id, tools=tools)


def remove_tool(config: AgentConfig, agent_id: str, index: int) -> AgentConfig:
    agent = config.get_agent(agent_id)
    if agent is None or not 0 <= index < len(agent.tools):
        return config
    tools = list(agent.tools)
    del tools[index]
    return _replace_agent(config, agent_id, tools=tools)


# ===== Output types =====

def update_output_type(
    config: AgentConfig, agent_id: str, output_type: OutputTypeSchema | None
) -> AgentConfig:
    """Set an agent's output type, or clear it with an explicit null.

    When the agent is the judge-loop evaluator, the pass and feedback fields
    are pointed at the new schema.
    """
    new_config = _replace_agent(config, agent_id, output_type=output_type)
    settings = new_config.judge_loop_settings
    if new_config is config or settings is None or settings.evaluator_agent_id != agent_id:
        return new_config
    settings = reconcile_evaluator_fields(new_config, settings)
    return new_config.model_copy(update={"judge_loop_settings": settings})


# ===== Reducer =====

_HANDLERS: dict[type, Callable[[AgentConfig, object], AgentConfig]] = {
    UpdateSystemName: lambda c, a: update_system_name(c, a.name),
    UpdateDefaultModel: lambda c, a: update_default_model(c, a.model),
    UpdateContextClassName: lambda c, a: update_context_class_name(c, a.name),
    AddContextAttribute: lambda c, a: add_context_attribute(c),
    UpdateContextAttribute: lambda c, a: update_context_attribute(c, a.index, a.attribute),
    RemoveContextAttribute: lambda c, a: remove_context_attribute(c, a.index),
    UpdateWorkflowType: lambda c, a: update_workflow_type(c, a.workflow_type),
    UpdateJudgeLoop: lambda c, a: update_judge_loop_settings(c, a.settings),
    AddAgent: lambda c, a: add_agent(c, a.agent_id),
    UpdateAgent: lambda c, a: update_agent(c, a.agent_id, a.fields),
    RemoveAgent: lambda c, a: remove_agent(c, a.agent_id),
    UpdateRouterAgent: lambda c, a: update_router_agent_id(c, a.agent_id),
    AddTool: lambda c, a: add_tool(c, a.agent_id, a.tool),
    UpdateTool: lambda c, a: update_tool(c, a.agent_id, a.index, a.tool),
    RemoveTool: lambda c, a: remove_tool(c, a.agent_id, a.index),
    UpdateOutputType: lambda c, a: update_output_type(c, a.agent_id, a.output_type),
}


def apply_action(config: AgentConfig, action) -> AgentConfig:
    """Apply one editing action (see agents.schemas.ConfigAction)."""
    handler = _HANDLERS.get(type(action))
    if handler is None:
        raise TypeError(f"Unsupported action: {type(action).__name__}")
    return handler(config, action)
