"""Headless model of the embeddable chat widget.

Mirrors what the injected script does on a host page: discover the execution
API URL, load suggestion chips, toggle the panel and exchange messages. It
holds no rendering code; ``on_render`` is called whenever the visible state
changes.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, Literal

import httpx

from chatbots.schemas import Appearance
from widget.schemas import DEFAULT_API_URL, ERROR_REPLY, SuggestionChip, WidgetMessage

logger = logging.getLogger(__name__)

ExchangeState = Literal["idle", "waiting"]


class WidgetRuntime:
    def __init__(
        self,
        chatbot_id: str,
        script_origin: str | None = None,
        appearance: dict[str, Any] | None = None,
        user_id: str | None = None,
        on_render: Callable[["WidgetRuntime"], None] | None = None,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ):
        self.chatbot_id = chatbot_id
        self.script_origin = script_origin.rstrip("/") if script_origin else None
        self.user_id = user_id
        self.appearance = Appearance.model_validate(
            {**Appearance().model_dump(), **(appearance or {})}
        )
        self.on_render = on_render
        self.api_url: str | None = None
        self.questions: list[SuggestionChip] = []
        self.messages: list[WidgetMessage] = []
        self.is_open = False
        self.exchange: ExchangeState = "idle"
        self._http = httpx.Client(timeout=timeout, transport=transport)

    def close(self) -> None:
        self._http.close()

    def _render(self) -> None:
        if self.on_render is not None:
            self.on_render(self)

    # ----- startup -----

    def _resolve_api_url(self) -> str:
        if not self.script_origin:
            return DEFAULT_API_URL
        try:
            resp = self._http.get(
                f"{self.script_origin}/api/widget-config",
                params={"chatbotId": self.chatbot_id},
                headers={"Accept": "application/json"},
            )
            resp.raise_for_status()
            api_url = resp.json().get("apiUrl")
        except (httpx.HTTPError, ValueError, AttributeError) as exc:
            logger.warning("Error fetching widget config, using default API URL: %s", exc)
            return DEFAULT_API_URL
        return api_url or DEFAULT_API_URL

    def _fetch_suggestions(self) -> list[SuggestionChip]:
        try:
            resp = self._http.get(
                f"{self.api_url}/api/agents/{self.chatbot_id}",
                headers={"Accept": "application/json"},
            )
            if resp.is_error:
                logger.warning("Failed to fetch agent details for suggestions (%s)", resp.status_code)
                return []
            config = resp.json().get("config") or {}
            return [
                SuggestionChip(id=str(s.get("id", "")), text=s.get("text", ""))
                for s in config.get("suggestions") or []
                if isinstance(s, dict) and s.get("enabled")
            ]
        except (httpx.HTTPError, ValueError, AttributeError) as exc:
            logger.warning("Error fetching agent details for suggestions: %s", exc)
            return []

    def initialize(self) -> None:
        self.api_url = self._resolve_api_url()
        logger.info("Widget for chatbot '%s' using API URL %s", self.chatbot_id, self.api_url)
        self.questions = self._fetch_suggestions()
        self._render()

    # ----- interaction -----

    def toggle(self) -> bool:
        self.is_open = not self.is_open
        self._render()
        return self.is_open

    def send_message(self, text: str) -> WidgetMessage | None:
        """Send one user message and append the bot's reply (or the fallback error reply)."""
        if not text.strip():
            return None

        self.messages.append(WidgetMessage(text=text, sender="user"))
        self.exchange = "waiting"
        self._render()

        try:
            resp = self._http.post(
                f"{self.api_url or DEFAULT_API_URL}/api/message",
                json={
                    "agent_id": self.chatbot_id,
                    "user_id": self.user_id,
                    "message": text,
                    "stream": False,
                },
            )
            resp.raise_for_status()
            reply = WidgetMessage(text=str(resp.json()["response"]), sender="bot")
        except (httpx.HTTPError, ValueError, KeyError, TypeError) as exc:
            logger.error("Error sending message: %s", exc)
            reply = WidgetMessage(text=ERROR_REPLY, sender="bot")
        finally:
            self.exchange = "idle"

        self.messages.append(reply)
        self._render()
        return reply
