"""Pydantic models for the embeddable chat widget."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_API_URL = "http://localhost:8234"
ERROR_REPLY = "Sorry, I encountered an error processing your request."


class WidgetConfig(BaseModel):
    """Response of the widget-config lookup."""

    model_config = ConfigDict(populate_by_name=True, serialize_by_alias=True)

    chatbot_id: str = Field(alias="chatbotId")
    api_url: str = Field(alias="apiUrl")
    version: str


class WidgetMessage(BaseModel):
    text: str
    sender: Literal["user", "bot"]
    timestamp: datetime = Field(default_factory=datetime.now)


class SuggestionChip(BaseModel):
    id: str
    text: str
