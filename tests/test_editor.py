import pytest

from agents.editor import ConfigEditor
from agents.schemas import JudgeLoopSettings
from agents.workflow import EVALUATOR_OUTPUT_NOTICE
from conftest import evaluation_output_type
from exceptions import ValidationError
from tools.schemas import AgentToolRef, BuiltInTool


def test_new_editor_starts_from_default():
    editor = ConfigEditor()
    assert editor.config.agent_ids == ["main_assistant"]
    assert editor.active_agent_id == "main_assistant"
    assert not editor.has_unsaved_changes
    assert not editor.config_saved
    assert not editor.can_test


def test_loaded_config_counts_as_saved(two_agent_config):
    editor = ConfigEditor(two_agent_config, chatbot_id="bot-1")
    assert editor.config_saved
    assert not editor.has_unsaved_changes
    assert editor.can_test


def test_edits_mark_dirty_and_preview(two_agent_config):
    previews = []
    editor = ConfigEditor(two_agent_config, on_preview=previews.append)
    editor.update_system_name("Helpdesk")
    assert editor.has_unsaved_changes
    assert previews[-1].system_name == "Helpdesk"
    assert two_agent_config.system_name == "Support"


def test_add_and_remove_agent_move_selection(two_agent_config):
    editor = ConfigEditor(two_agent_config)
    new_id = editor.add_agent()
    assert editor.active_agent_id == new_id
    assert editor.config.agent_ids[-1] == new_id

    editor.select_agent("billing")
    editor.remove_agent("billing")
    assert editor.active_agent_id == "triage"
    assert "billing" not in editor.config.agent_ids


def test_removing_last_agent_leaves_session_clean():
    editor = ConfigEditor()
    editor.remove_agent("main_assistant")
    assert editor.config.agent_ids == ["main_assistant"]
    assert not editor.has_unsaved_changes


def test_tool_draft_add_and_edit(two_agent_config):
    editor = ConfigEditor(two_agent_config)
    draft = editor.add_tool("billing", "built-in")
    assert draft.index is None and draft.tool is None
    editor.commit_tool("file_search")
    assert editor.config.get_agent("billing").tools == [BuiltInTool(name="file_search")]
    assert editor.tool_draft is None

    draft = editor.edit_tool("triage", 1)
    assert draft.tool_type == "agent"
    assert draft.tool == AgentToolRef(agent_id="billing")
    editor.cancel_tool()

    draft = editor.edit_tool("triage", 0)
    assert draft.tool_type == "built-in"
    editor.commit_tool({"type": "built-in", "name": "file_search", "vector_store_id": "vs_9"})
    assert editor.config.get_agent("triage").tools[0].vector_store_id == "vs_9"


def test_agent_draft_takes_agent_ids(two_agent_config):
    editor = ConfigEditor(two_agent_config)
    editor.add_tool("billing", "agent")
    editor.commit_tool("triage")
    assert editor.config.get_agent("billing").tools == [AgentToolRef(agent_id="triage")]


@pytest.mark.parametrize(
    "tool_type, tool, message",
    [
        ("agent", "not_a_real_builtin", "Unknown agent 'not_a_real_builtin'"),
        ("agent", "billing", "cannot use itself"),
        ("agent", "web_search", "Unknown agent 'web_search'"),
        ("agent", {"type": "built-in", "name": "web_search"}, "Expected a tool of type 'agent'"),
        ("built-in", "code_interpreter", "Unknown built-in tool 'code_interpreter'"),
        ("built-in", {"type": "agent", "agent_id": "triage"}, "Expected a tool of type 'built-in'"),
        ("api-call", "web_search", "Expected a tool of type 'api-call'"),
    ],
)
def test_commit_checks_tool_against_draft_type(two_agent_config, tool_type, tool, message):
    editor = ConfigEditor(two_agent_config)
    editor.add_tool("billing", tool_type)
    with pytest.raises(ValidationError, match=message):
        editor.commit_tool(tool)
    assert editor.config.get_agent("billing").tools == []
    assert not editor.has_unsaved_changes


def test_api_call_draft_commit(two_agent_config):
    editor = ConfigEditor(two_agent_config)
    draft = editor.add_tool("billing", "api-call")
    form = {**draft.tool, "name": "invoices"}
    form["api_config"] = {**form["api_config"], "url": "https://billing.test/invoices"}
    editor.commit_tool(form)
    tool = editor.config.get_agent("billing").tools[0]
    assert tool.name == "invoices"


def test_commit_without_draft_or_bad_tool(two_agent_config):
    editor = ConfigEditor(two_agent_config)
    with pytest.raises(ValidationError):
        editor.commit_tool("web_search")
    editor.add_tool("billing", "api-call")
    with pytest.raises(ValidationError):
        editor.commit_tool({"name": "x", "api_config": {"url": ""}})
    with pytest.raises(ValidationError):
        editor.edit_tool("billing", 3)


def test_judge_loop_notice_for_evaluator_without_output_type(two_agent_config):
    editor = ConfigEditor(two_agent_config)
    editor.update_workflow_type("judge_loop")
    editor.update_judge_loop_settings(
        JudgeLoopSettings(generator_agent_id="triage", evaluator_agent_id="billing")
    )
    assert editor.notices == [EVALUATOR_OUTPUT_NOTICE]


def test_output_type_draft_for_evaluator(two_agent_config, judge_config):
    editor = ConfigEditor(two_agent_config)
    editor.update_workflow_type("judge_loop")
    assert editor.output_type_draft("billing").name == "EvaluationFeedback"
    assert editor.output_type_draft("triage").name == "Output"
    assert ConfigEditor(judge_config).output_type_draft("critic").name == "Review"


def test_save_success_and_failure(store, chatbot, execution_api, execution_client):
    editor = ConfigEditor.load(store, chatbot.id)
    assert not editor.can_test

    editor.update_system_name("Helpdesk")
    execution_api.on("POST", f"/api/chatbots/{chatbot.id}", status=500, body={"detail": "boom"})
    result = editor.save(store, execution_client)
    assert result.stored and not result.registered
    assert editor.has_unsaved_changes
    assert not editor.can_test

    execution_api.on("POST", f"/api/chatbots/{chatbot.id}", body={"status": "registered"})
    result = editor.save(store, execution_client)
    assert result.saved
    assert not editor.has_unsaved_changes
    assert editor.can_test
    assert ConfigEditor.load(store, chatbot.id).config.system_name == "Helpdesk"


def test_evaluator_output_type_set_in_editor_can_be_saved(store, chatbot, execution_api, execution_client):
    execution_api.on("POST", f"/api/chatbots/{chatbot.id}", body={"status": "registered"})
    editor = ConfigEditor.load(store, chatbot.id)
    evaluator_id = editor.add_agent()
    editor.update_workflow_type("judge_loop")
    editor.update_output_type(evaluator_id, evaluation_output_type())

    settings = editor.config.judge_loop_settings
    assert settings.evaluator_agent_id == evaluator_id
    assert (settings.pass_field, settings.feedback_field) == ("verdict", "notes")
    assert editor.save(store, execution_client).saved
