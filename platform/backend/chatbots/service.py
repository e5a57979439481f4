"""Chatbot management service."""

from __future__ import annotations

import logging
from typing import Any

from pydantic import TypeAdapter
from pydantic import ValidationError as SchemaError

from agents.schemas import AgentConfig
from chatbots.schemas import (
    SETTING_TYPES,
    Appearance,
    Chatbot,
    ChatbotCreate,
    ChatbotUpdate,
    Rule,
    Suggestion,
    default_settings,
)
from chatbots.store import ChatbotStore
from exceptions import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

_SECTION_ADAPTERS: dict[str, TypeAdapter] = {
    "appearance": TypeAdapter(Appearance),
    "rules": TypeAdapter(list[Rule]),
    "suggestions": TypeAdapter(list[Suggestion]),
    "agent": TypeAdapter(AgentConfig),
}


def _first_error(exc: SchemaError) -> str:
    err = exc.errors()[0]
    loc = ".".join(str(p) for p in err.get("loc", ()))
    return f"{loc}: {err['msg']}" if loc else err["msg"]


def get_document(store: ChatbotStore, chatbot_id: str) -> dict[str, Any]:
    doc = store.get(chatbot_id)
    if doc is None:
        raise NotFoundError(f"Chatbot '{chatbot_id}' not found")
    return doc


def create_chatbot(store: ChatbotStore, body: ChatbotCreate) -> Chatbot:
    doc = store.create(body.user_id, body.name, default_settings())
    return Chatbot.model_validate(doc)


def list_chatbots(store: ChatbotStore, user_id: str) -> list[Chatbot]:
    return [Chatbot.model_validate(doc) for doc in store.list_for_user(user_id)]


def get_chatbot(store: ChatbotStore, chatbot_id: str) -> Chatbot:
    return Chatbot.model_validate(get_document(store, chatbot_id))


def update_chatbot(store: ChatbotStore, chatbot_id: str, body: ChatbotUpdate) -> Chatbot:
    fields = body.model_dump(exclude_unset=True, exclude_none=True)
    doc = store.update(chatbot_id, fields)
    if doc is None:
        raise NotFoundError(f"Chatbot '{chatbot_id}' not found")
    return Chatbot.model_validate(doc)


def normalize_section(setting_type: str, settings: Any) -> Any:
    """Validate one settings section and return it in document form."""
    if setting_type not in SETTING_TYPES:
        raise ValidationError(
            f"Unknown setting type '{setting_type}'. Must be one of: {', '.join(SETTING_TYPES)}"
        )
    adapter = _SECTION_ADAPTERS[setting_type]
    try:
        value = adapter.validate_python(settings)
    except SchemaError as exc:
        raise ValidationError(f"Invalid {setting_type} settings: {_first_error(exc)}") from exc
    if isinstance(value, AgentConfig):
        return value.to_document()
    return adapter.dump_python(value, mode="json", by_alias=True)


def update_settings(
    store: ChatbotStore, chatbot_id: str, setting_type: str, settings: Any
) -> Chatbot:
    section = normalize_section(setting_type, settings)
    doc = store.update_settings(chatbot_id, setting_type, section)
    if doc is None:
        raise NotFoundError(f"Chatbot '{chatbot_id}' not found")
    logger.info("Updated %s settings for chatbot '%s'", setting_type, chatbot_id)
    return Chatbot.model_validate(doc)


def delete_chatbot(store: ChatbotStore, chatbot_id: str) -> None:
    if not store.delete(chatbot_id):
        raise NotFoundError(f"Chatbot '{chatbot_id}' not found")
