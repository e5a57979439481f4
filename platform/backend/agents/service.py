"""Agent configuration service: load, validate, edit and save (store + execution API)."""

from __future__ import annotations

import logging

from pydantic import ValidationError as SchemaError

from agents.mutations import apply_action
from agents.schemas import (
    ActionRequest,
    ActionResponse,
    AgentConfig,
    SaveResult,
    ValidationReport,
    default_agent_config,
)
from agents.workflow import config_warnings, validate_config
from chatbots.service import get_document
from chatbots.store import ChatbotStore, utc_now
from exceptions import AppException, ValidationError
from execution_client import ExecutionApiClient

logger = logging.getLogger(__name__)


def load_config(store: ChatbotStore, chatbot_id: str) -> AgentConfig:
    """Stored agent config of a chatbot, or the default one if it has none yet."""
    doc = get_document(store, chatbot_id)
    raw = (doc.get("settings") or {}).get("agent")
    if not raw:
        return default_agent_config()
    try:
        return AgentConfig.model_validate(raw)
    except SchemaError as exc:
        logger.error("Stored agent config for chatbot '%s' is invalid: %s", chatbot_id, exc)
        raise ValidationError(f"Stored agent config is invalid: {exc.errors()[0]['msg']}") from exc


def is_registered(store: ChatbotStore, chatbot_id: str) -> bool:
    """True once the chatbot's config has been registered with the execution API."""
    return bool(get_document(store, chatbot_id).get("agentRegisteredAt"))


def validate(config: AgentConfig) -> ValidationReport:
    issues = validate_config(config)
    return ValidationReport(valid=not issues, issues=issues, warnings=config_warnings(config))


def apply(body: ActionRequest) -> ActionResponse:
    """Apply one editing action to a config; nothing is persisted."""
    config = apply_action(body.config, body.action)
    return ActionResponse(config=config, issues=validate_config(config))


def save_config(
    store: ChatbotStore,
    client: ExecutionApiClient,
    chatbot_id: str,
    config: AgentConfig,
) -> SaveResult:
    """Persist the config, then register it with the execution API.

    The two phases are independent: a registration failure leaves the stored
    copy in place and is reported, not raised.
    """
    issues = validate_config(config)
    if issues:
        raise ValidationError("; ".join(issues))

    document = config.to_document()

    get_document(store, chatbot_id)
    try:
        store.update_settings(chatbot_id, "agent", document)
    except AppException as exc:
        logger.error("Failed to store agent config for chatbot '%s': %s", chatbot_id, exc.detail)
        return SaveResult(stored=False, registered=False, error=exc.detail)

    try:
        client.register_chatbot(chatbot_id, document)
    except AppException as exc:
        logger.error("Failed to register agent for chatbot '%s': %s", chatbot_id, exc.detail)
        return SaveResult(stored=True, registered=False, error=exc.detail)

    try:
        store.update(chatbot_id, {"agentRegisteredAt": utc_now()})
    except AppException as exc:
        logger.error(
            "Registered chatbot '%s' but failed to record it: %s", chatbot_id, exc.detail
        )
        return SaveResult(stored=True, registered=True, error=exc.detail)
    logger.info("Saved and registered agent config for chatbot '%s'", chatbot_id)
    return SaveResult(stored=True, registered=True)
