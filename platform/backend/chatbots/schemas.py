"""Pydantic models for chatbot documents and their settings sections."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from agents.schemas import AgentConfig, default_agent_config

SETTING_TYPES = ("appearance", "rules", "suggestions", "agent")
SettingType = Literal["appearance", "rules", "suggestions", "agent"]


class Appearance(BaseModel):
    """Widget look and feel. Unknown keys are kept as-is."""

    model_config = ConfigDict(populate_by_name=True, serialize_by_alias=True, extra="allow")

    header_text: str = Field("Chat with us", alias="headerText")
    primary_color: str = Field("#3b82f6", alias="primaryColor")
    secondary_color: str = Field("#1e3a8a", alias="secondaryColor")
    button_color: str = Field("#3b82f6", alias="buttonColor")
    button_text_color: str = Field("#ffffff", alias="buttonTextColor")
    placement: Literal["left", "right"] = "right"
    size: Literal["small", "medium", "large"] = "medium"


class Rule(BaseModel):
    id: str
    text: str
    enabled: bool = True


class Suggestion(BaseModel):
    """Suggested question shown in the widget when enabled."""

    id: str
    text: str
    enabled: bool = True


class ChatbotSettings(BaseModel):
    appearance: Appearance = Appearance()
    rules: list[Rule] = []
    suggestions: list[Suggestion] = []
    agent: AgentConfig | None = None


class Chatbot(BaseModel):
    """A stored chatbot document."""

    model_config = ConfigDict(populate_by_name=True, serialize_by_alias=True)

    id: str
    name: str
    user_id: str = Field(alias="userId")
    created_at: str = Field(alias="createdAt")
    updated_at: str = Field(alias="updatedAt")
    agent_registered_at: str | None = Field(None, alias="agentRegisteredAt")
    settings: ChatbotSettings = ChatbotSettings()


class ChatbotCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(..., min_length=1, alias="userId")
    name: str = "New Chatbot"


class ChatbotUpdate(BaseModel):
    """General chatbot fields; settings sections have their own endpoint."""

    name: str | None = Field(None, min_length=1)


def default_settings() -> dict[str, Any]:
    """Settings given to every new chatbot, in document form."""
    settings = ChatbotSettings(
        rules=[
            Rule(id="1", text="Be friendly and helpful"),
            Rule(id="2", text="Do not share personal information"),
            Rule(id="3", text="Keep responses concise"),
        ],
        suggestions=[
            Suggestion(id="1", text="How can I get started?"),
            Suggestion(id="2", text="What are your business hours?"),
            Suggestion(id="3", text="Do you offer support?"),
        ],
        agent=default_agent_config(),
    )
    return {
        "appearance": settings.appearance.model_dump(mode="json"),
        "rules": [r.model_dump(mode="json") for r in settings.rules],
        "suggestions": [s.model_dump(mode="json") for s in settings.suggestions],
        "agent": settings.agent.to_document(),
    }
