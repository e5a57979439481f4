import pytest
from pydantic import TypeAdapter

from agents import mutations
from agents.schemas import (
    AgentConfig,
    AgentUpdate,
    AttributeSpec,
    ConfigAction,
    JudgeLoopSettings,
    default_agent_config,
)
from agents.workflow import validate_config
from conftest import evaluation_output_type
from tools.schemas import AgentToolRef, BuiltInTool


def test_transforms_do_not_touch_input(two_agent_config):
    before = two_agent_config.to_document()
    mutations.update_system_name(two_agent_config, "Renamed")
    mutations.remove_agent(two_agent_config, "billing")
    mutations.add_tool(two_agent_config, "triage", BuiltInTool(name="file_search"))
    assert two_agent_config.to_document() == before


def test_system_fields():
    config = default_agent_config()
    config = mutations.update_system_name(config, "Helpdesk")
    config = mutations.update_default_model(config, "gpt-4o")
    config = mutations.update_context_class_name(config, "HelpdeskContext")
    assert config.system_name == "Helpdesk"
    assert config.default_model == "gpt-4o"
    assert config.context_class.name == "HelpdeskContext"


def test_context_attributes():
    config = mutations.add_context_attribute(default_agent_config())
    assert config.context_class.attributes[-1] == AttributeSpec(name="", type="str")

    config = mutations.update_context_attribute(config, 2, AttributeSpec(name="plan", type="int"))
    assert config.context_class.attributes[2].name == "plan"

    config = mutations.remove_context_attribute(config, 0)
    assert [a.name for a in config.context_class.attributes] == ["conversation_history", "plan"]


def test_context_attribute_bad_index_is_noop():
    config = default_agent_config()
    assert mutations.update_context_attribute(config, 9, AttributeSpec(name="x")) is config
    assert mutations.remove_context_attribute(config, -1) is config


def test_add_agent_appends_unique_agent():
    config = default_agent_config()
    config = mutations.add_agent(config)
    config = mutations.add_agent(config)
    new = config.agents[1]
    assert new.id.startswith("agent_") and len(new.id) == len("agent_") + 6
    assert new.name == "New Agent"
    assert new.instructions == "You are a helpful assistant."
    assert new.tools == [] and new.handoffs == []
    assert len(set(config.agent_ids)) == 3


def test_add_agent_with_taken_id_gets_fresh_one():
    config = mutations.add_agent(default_agent_config(), "main_assistant")
    assert config.agents[1].id != "main_assistant"


def test_update_agent_merges_only_set_fields(two_agent_config):
    config = mutations.update_agent(
        two_agent_config, "billing", AgentUpdate(name="Billing Desk", handoffs=["nobody"])
    )
    billing = config.get_agent("billing")
    assert billing.name == "Billing Desk"
    assert billing.handoffs == ["nobody"]
    assert billing.instructions == "Help the user."
    assert mutations.update_agent(config, "ghost", AgentUpdate(name="x")) is config


def test_remove_agent_strips_references(two_agent_config):
    config = mutations.update_router_agent_id(two_agent_config, "billing")
    config = mutations.remove_agent(config, "billing")
    assert config.agent_ids == ["triage"]
    assert config.router_agent_id == "triage"
    triage = config.get_agent("triage")
    assert triage.handoffs == []
    assert triage.tools == [BuiltInTool(name="web_search")]


def test_remove_last_agent_is_noop():
    config = default_agent_config()
    assert mutations.remove_agent(config, "main_assistant") is config


def test_remove_agent_reassigns_judge_roles(judge_config):
    config = mutations.add_agent(judge_config, "editor")
    config = mutations.remove_agent(config, "critic")
    settings = config.judge_loop_settings
    assert settings.generator_agent_id == "writer"
    assert settings.evaluator_agent_id == "editor"


def test_router_unknown_id_is_noop(two_agent_config):
    assert mutations.update_router_agent_id(two_agent_config, "ghost") is two_agent_config


def test_add_then_remove_tool_restores_list(two_agent_config):
    tool = BuiltInTool(name="file_search", vector_store_id="vs_1")
    config = mutations.add_tool(two_agent_config, "triage", tool)
    assert config.get_agent("triage").tools[-1] == tool
    config = mutations.remove_tool(config, "triage", 2)
    assert config.get_agent("triage").tools == two_agent_config.get_agent("triage").tools


def test_update_tool_and_guards(two_agent_config):
    config = mutations.update_tool(two_agent_config, "triage", 0, AgentToolRef(agent_id="billing"))
    assert config.get_agent("triage").tools[0] == AgentToolRef(agent_id="billing")
    assert mutations.update_tool(config, "triage", 5, BuiltInTool(name="x")) is config
    assert mutations.add_tool(config, "ghost", BuiltInTool(name="x")) is config
    assert mutations.remove_tool(config, "billing", 0) is config


def test_switch_to_judge_loop_initialises_settings(two_agent_config):
    config = mutations.update_workflow_type(two_agent_config, "judge_loop")
    settings = config.judge_loop_settings
    assert settings.generator_agent_id == "triage"
    assert settings.evaluator_agent_id == "billing"
    assert settings.max_iterations == 5
    assert (settings.pass_field, settings.pass_value, settings.feedback_field) == (
        "score",
        "pass",
        "feedback",
    )

    back = mutations.update_workflow_type(config, "simple_router")
    assert back.workflow_type == "simple_router"
    assert back.judge_loop_settings == settings


def test_judge_loop_single_agent_uses_it_for_both_roles():
    config = mutations.update_workflow_type(default_agent_config(), "judge_loop")
    settings = config.judge_loop_settings
    assert settings.generator_agent_id == settings.evaluator_agent_id == "main_assistant"


def test_changing_evaluator_reconciles_fields(two_agent_config):
    config = mutations.update_output_type(two_agent_config, "billing", evaluation_output_type())
    config = mutations.update_workflow_type(config, "judge_loop")
    settings = config.judge_loop_settings
    assert settings.pass_field == "verdict"
    assert settings.feedback_field == "notes"
    assert settings.pass_value == "good"


def test_same_evaluator_keeps_user_fields(judge_config):
    settings = judge_config.judge_loop_settings.model_copy(update={"pass_value": "reject"})
    config = mutations.update_judge_loop_settings(judge_config, settings)
    assert config.judge_loop_settings.pass_value == "reject"


def test_clear_output_type_serializes_null(judge_config):
    config = mutations.update_output_type(judge_config, "critic", None)
    doc = config.to_document()
    assert doc["agents"][1]["output_type"] is None
    assert "output_type" not in doc["agents"][0]


def test_cleared_output_type_survives_document_round_trip(judge_config):
    doc = mutations.update_output_type(judge_config, "critic", None).to_document()
    reloaded = AgentConfig.model_validate(doc)
    assert reloaded.to_document()["agents"][1]["output_type"] is None
    assert "output_type" not in reloaded.to_document()["agents"][0]


def test_default_config_grow_judge_and_remove_router():
    config = default_agent_config()
    router_id = config.router_agent_id
    config = mutations.add_agent(config)
    config = mutations.add_agent(config)
    assert len(config.agents) == 3
    assert config.router_agent_id == router_id

    second, third = config.agent_ids[1:]
    config = mutations.update_agent(config, second, AgentUpdate(handoffs=[router_id, third]))
    config = mutations.update_agent(config, third, AgentUpdate(handoffs=[router_id]))

    judged = mutations.update_workflow_type(config, "judge_loop")
    assert judged.judge_loop_settings.generator_agent_id == router_id
    assert judged.judge_loop_settings.evaluator_agent_id == second

    config = mutations.remove_agent(config, router_id)
    assert config.agent_ids == [second, third]
    assert config.router_agent_id == second
    assert all(router_id not in agent.handoffs for agent in config.agents)
    assert config.get_agent(second).handoffs == [third]
    assert validate_config(config) == []


def test_apply_action_dispatches_on_op(two_agent_config):
    adapter = TypeAdapter(ConfigAction)
    action = adapter.validate_python({"op": "add_tool", "agent_id": "billing", "tool": "agent_triage"})
    config = mutations.apply_action(two_agent_config, action)
    assert config.get_agent("billing").tools == [AgentToolRef(agent_id="triage")]

    config = mutations.apply_action(
        config,
        adapter.validate_python(
            {"op": "update_judge_loop_settings", "settings": JudgeLoopSettings().model_dump()}
        ),
    )
    assert config.judge_loop_settings is not None


def test_apply_action_rejects_unknown_type(two_agent_config):
    with pytest.raises(TypeError):
        mutations.apply_action(two_agent_config, object())
