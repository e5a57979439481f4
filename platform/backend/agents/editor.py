"""Stateful editing session over one chatbot's agent config."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from agents import mutations, service
from agents.output_types import blank_output_type, default_evaluator_output_type
from agents.schemas import (
    AgentConfig,
    AgentUpdate,
    AttributeSpec,
    JudgeLoopSettings,
    OutputTypeSchema,
    SaveResult,
    WorkflowType,
    default_agent_config,
)
from agents.workflow import EVALUATOR_OUTPUT_NOTICE, evaluator_needs_output_type
from chatbots.store import ChatbotStore
from exceptions import ValidationError
from execution_client import ExecutionApiClient
from tools.schemas import AgentToolRef, ApiCallTool, BuiltInTool, ToolDescriptor, parse_tool
from tools.service import ToolType, agent_tool, built_in_tool, new_tool_draft

logger = logging.getLogger(__name__)


@dataclass
class ToolDraft:
    """A tool being added (index is None) or edited in place."""

    agent_id: str
    tool_type: ToolType
    index: int | None = None
    tool: ToolDescriptor | dict[str, Any] | None = None


def _tool_type(tool: ToolDescriptor) -> ToolType:
    if isinstance(tool, AgentToolRef):
        return "agent"
    if isinstance(tool, ApiCallTool):
        return "api-call"
    return "built-in"


class ConfigEditor:
    """Holds the working copy of a config plus selection and save state.

    Every edit goes through the pure transforms in ``agents.mutations``,
    marks the session dirty and hands the new config to ``on_preview``.
    """

    def __init__(
        self,
        config: AgentConfig | None = None,
        chatbot_id: str | None = None,
        on_preview: Callable[[AgentConfig], None] | None = None,
    ):
        self.chatbot_id = chatbot_id
        self.on_preview = on_preview
        self.config = config if config is not None else default_agent_config()
        self.active_agent_id = self.config.agents[0].id
        self.has_unsaved_changes = False
        # A config handed in at construction came from storage
        self.config_saved = config is not None
        self.last_save: SaveResult | None = None
        self.notices: list[str] = []
        self.tool_draft: ToolDraft | None = None

    @classmethod
    def load(cls, store: ChatbotStore, chatbot_id: str, **kwargs: Any) -> "ConfigEditor":
        editor = cls(service.load_config(store, chatbot_id), chatbot_id=chatbot_id, **kwargs)
        editor.config_saved = service.is_registered(store, chatbot_id)
        return editor

    @property
    def active_agent(self):
        return self.config.get_agent(self.active_agent_id)

    @property
    def can_test(self) -> bool:
        return self.config_saved and self.chatbot_id is not None

    def _commit(self, config: AgentConfig) -> None:
        self.config = config
        self.has_unsaved_changes = True
        if config.get_agent(self.active_agent_id) is None:
            self.active_agent_id = config.agents[0].id
        if self.on_preview is not None:
            self.on_preview(config)

    def select_agent(self, agent_id: str) -> None:
        if self.config.get_agent(agent_id) is not None:
            self.active_agent_id = agent_id

    def apply(self, action) -> None:
        self._commit(mutations.apply_action(self.config, action))

    # ----- system settings -----

    def update_system_name(self, name: str) -> None:
        self._commit(mutations.update_system_name(self.config, name))

    def update_default_model(self, model: str) -> None:
        self._commit(mutations.update_default_model(self.config, model))

    def update_context_class_name(self, name: str) -> None:
        self._commit(mutations.update_context_class_name(self.config, name))

    def add_context_attribute(self) -> None:
        self._commit(mutations.add_context_attribute(self.config))

    def update_context_attribute(self, index: int, attribute: AttributeSpec) -> None:
        self._commit(mutations.update_context_attribute(self.config, index, attribute))

    def remove_context_attribute(self, index: int) -> None:
        self._commit(mutations.remove_context_attribute(self.config, index))

    # ----- workflow -----

    def update_workflow_type(self, workflow_type: WorkflowType) -> None:
        self._commit(mutations.update_workflow_type(self.config, workflow_type))

    def update_judge_loop_settings(self, settings: JudgeLoopSettings) -> None:
        self._commit(mutations.update_judge_loop_settings(self.config, settings))
        if evaluator_needs_output_type(self.config):
            self.notices.append(EVALUATOR_OUTPUT_NOTICE)

    # ----- agents -----

    def add_agent(self) -> str:
        config = mutations.add_agent(self.config)
        agent_id = config.agents[-1].id
        self._commit(config)
        self.active_agent_id = agent_id
        return agent_id

    def update_agent(self, agent_id: str, **fields: Any) -> None:
        self._commit(mutations.update_agent(self.config, agent_id, AgentUpdate(**fields)))

    def remove_agent(self, agent_id: str) -> None:
        config = mutations.remove_agent(self.config, agent_id)
        if config is self.config:
            return
        self._commit(config)
        self.active_agent_id = config.agents[0].id

    def update_router_agent_id(self, agent_id: str) -> None:
        self._commit(mutations.update_router_agent_id(self.config, agent_id))

    # ----- tools -----

    def add_tool(self, agent_id: str, tool_type: ToolType) -> ToolDraft:
        self.tool_draft = ToolDraft(agent_id, tool_type, tool=new_tool_draft(tool_type))
        return self.tool_draft

    def edit_tool(self, agent_id: str, index: int) -> ToolDraft:
        agent = self.config.get_agent(agent_id)
        if agent is None or not 0 <= index < len(agent.tools):
            raise ValidationError(f"No tool {index} on agent '{agent_id}'")
        tool = agent.tools[index]
        self.tool_draft = ToolDraft(agent_id, _tool_type(tool), index=index, tool=tool)
        return self.tool_draft

    def cancel_tool(self) -> None:
        self.tool_draft = None

    def commit_tool(self, tool: ToolDescriptor | str | dict[str, Any]) -> None:
        """Append the open draft's tool, or replace the entry being edited."""
        draft = self.tool_draft
        if draft is None:
            raise ValidationError("No tool is being edited")
        tool = self._check_tool(draft, tool)
        if draft.index is None:
            self._commit(mutations.add_tool(self.config, draft.agent_id, tool))
        else:
            self._commit(mutations.update_tool(self.config, draft.agent_id, draft.index, tool))
        self.tool_draft = None

    def _check_tool(
        self, draft: ToolDraft, raw: ToolDescriptor | str | dict[str, Any]
    ) -> ToolDescriptor:
        """Validate a picked or typed tool against the kind of draft that is open.

        A bare string names a built-in tool for built-in drafts and an agent id
        for agent drafts.
        """
        if isinstance(raw, str) and draft.tool_type == "built-in":
            return built_in_tool(raw)
        if isinstance(raw, str) and draft.tool_type == "agent":
            tool = agent_tool(raw)
        else:
            try:
                tool = parse_tool(raw)
            except ValueError as exc:
                raise ValidationError(str(exc)) from exc

        kind = _tool_type(tool)
        if kind != draft.tool_type:
            raise ValidationError(
                f"Expected a tool of type '{draft.tool_type}', got '{kind}'"
            )
        if isinstance(tool, BuiltInTool):
            return built_in_tool(tool.name, tool.vector_store_id)
        if isinstance(tool, AgentToolRef):
            if tool.agent_id == draft.agent_id:
                raise ValidationError("An agent cannot use itself as a tool")
            if self.config.get_agent(tool.agent_id) is None:
                raise ValidationError(f"Unknown agent '{tool.agent_id}'")
        return tool

    def update_tool(self, agent_id: str, index: int, tool: ToolDescriptor) -> None:
        self._commit(mutations.update_tool(self.config, agent_id, index, tool))

    def remove_tool(self, agent_id: str, index: int) -> None:
        self._commit(mutations.remove_tool(self.config, agent_id, index))

    # ----- output types -----

    def output_type_draft(self, agent_id: str) -> OutputTypeSchema:
        """Output type to show in the editor: the agent's own, else a starting template."""
        agent = self.config.get_agent(agent_id)
        if agent is not None and agent.output_type is not None:
            return agent.output_type
        settings = self.config.judge_loop_settings
        is_evaluator = (
            self.config.workflow_type == "judge_loop"
            and settings is not None
            and settings.evaluator_agent_id == agent_id
        )
        return default_evaluator_output_type() if is_evaluator else blank_output_type()

    def update_output_type(self, agent_id: str, output_type: OutputTypeSchema | None) -> None:
        self._commit(mutations.update_output_type(self.config, agent_id, output_type))

    # ----- persistence -----

    def save(self, store: ChatbotStore, client: ExecutionApiClient) -> SaveResult:
        if self.chatbot_id is None:
            raise ValidationError("Cannot save a config that is not attached to a chatbot")
        result = service.save_config(store, client, self.chatbot_id, self.config)
        self.last_save = result
        if result.saved:
            self.config_saved = True
            self.has_unsaved_changes = False
        return result
