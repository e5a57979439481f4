"""Test and live-preview invocations of a chatbot's registered agent system."""

from __future__ import annotations

import logging
from typing import Any

from agents import service as agents_service
from agents.schemas import JudgeLoopSettings
from chat.schemas import Evaluation, IterationTrace, TestReply
from chatbots.store import ChatbotStore
from exceptions import ValidationError
from execution_client import ExecutionApiClient

logger = logging.getLogger(__name__)


def _as_text(value: Any) -> str | None:
    if value is None:
        return None
    return value if isinstance(value, str) else str(value)


def _parse_evaluation(raw: Any, settings: JudgeLoopSettings | None) -> Evaluation | None:
    if not isinstance(raw, dict):
        return None
    score = raw.get("score")
    feedback = raw.get("feedback")
    # Evaluators with a custom output type report under the configured field names
    if settings is not None:
        if score is None:
            score = raw.get(settings.pass_field)
        if feedback is None:
            feedback = raw.get(settings.feedback_field)
    return Evaluation(score=_as_text(score), feedback=_as_text(feedback))


def _passed(evaluation: Evaluation | None, settings: JudgeLoopSettings | None) -> bool | None:
    if settings is None or evaluation is None or evaluation.score is None:
        return None
    return evaluation.score.lower() == settings.pass_value.lower()


def parse_reply(data: Any, settings: JudgeLoopSettings | None = None) -> TestReply:
    """Normalize an execution API reply into the final response plus iteration trace."""
    if isinstance(data, str):
        return TestReply(response=data)
    if not isinstance(data, dict):
        return TestReply(response="" if data is None else str(data))

    response = data.get("response")
    if response is None:
        response = data.get("content")

    iterations = []
    for i, item in enumerate(data.get("iterations") or []):
        if not isinstance(item, dict):
            continue
        content = item.get("content")
        if content is None:
            content = item.get("generated_content")
        evaluation = _parse_evaluation(item.get("evaluation"), settings)
        iterations.append(
            IterationTrace(
                index=i + 1,
                content=_as_text(content) or "",
                evaluation=evaluation,
                passed=_passed(evaluation, settings),
            )
        )
    return TestReply(response=_as_text(response) or "", iterations=iterations)


def test_agent(
    store: ChatbotStore,
    client: ExecutionApiClient,
    chatbot_id: str,
    message: str,
    context: dict[str, Any] | None = None,
) -> TestReply:
    """Send a test message to a chatbot whose config has been saved at least once."""
    if not message.strip():
        raise ValidationError("Message is required")
    if not agents_service.is_registered(store, chatbot_id):
        raise ValidationError("Save the agent configuration before testing it")

    config = agents_service.load_config(store, chatbot_id)
    settings = config.judge_loop_settings if config.workflow_type == "judge_loop" else None

    data = client.send_chatbot_message(chatbot_id, message, context or {})
    reply = parse_reply(data, settings)
    logger.info(
        "Test message for chatbot '%s' answered after %d iteration(s)",
        chatbot_id,
        len(reply.iterations),
    )
    return reply


def preview_message(
    store: ChatbotStore,
    client: ExecutionApiClient,
    chatbot_id: str,
    message: str,
    user_id: str | None = None,
) -> TestReply:
    """Send a message the way the embedded widget does, for the live preview."""
    if not message.strip():
        raise ValidationError("Message is required")
    if not agents_service.is_registered(store, chatbot_id):
        raise ValidationError("Save the agent configuration before previewing it")

    data = client.send_message(chatbot_id, message, user_id=user_id)
    return parse_reply(data)
