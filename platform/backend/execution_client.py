"""HTTP client for the external agent execution API."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from exceptions import ExecutionApiError

logger = logging.getLogger(__name__)


def _error_detail(resp: httpx.Response) -> str | None:
    """Pull the server-provided ``detail`` out of an error response when there is one."""
    try:
        body = resp.json()
    except ValueError:
        return None
    if not isinstance(body, dict):
        return None
    detail = body.get("detail") or body.get("message")
    if not detail:
        return None
    return detail if isinstance(detail, str) else str(detail)


class ExecutionApiClient:
    """Thin sync wrapper over the execution API endpoints.

    Every failure, whether a non-2xx status or a transport error, is raised
    as ``ExecutionApiError``.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._http = httpx.Client(base_url=self.base_url, timeout=timeout, transport=transport)

    def __enter__(self) -> "ExecutionApiClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        self._http.close()

    def _request(self, method: str, path: str, action: str, **kwargs: Any) -> Any:
        try:
            resp = self._http.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            logger.error("Execution API unreachable while trying to %s: %s", action, exc)
            raise ExecutionApiError(f"Failed to {action}: {exc}") from exc

        if resp.is_error:
            detail = _error_detail(resp) or f"Failed to {action}"
            logger.error(
                "Execution API returned %s while trying to %s: %s",
                resp.status_code,
                action,
                detail,
            )
            raise ExecutionApiError(detail)

        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError:
            return resp.text

    def register_chatbot(self, chatbot_id: str, config: dict[str, Any]) -> Any:
        """Register or update the runnable agent system for a chatbot."""
        return self._request(
            "POST",
            f"/api/chatbots/{chatbot_id}",
            "register agent",
            json={"config": config},
        )

    def send_chatbot_message(
        self, chatbot_id: str, message: str, context: dict[str, Any] | None = None
    ) -> Any:
        return self._request(
            "POST",
            f"/api/chatbots/{chatbot_id}/message",
            "get response from agent",
            json={"message": message, "context": context or {}},
        )

    def send_message(self, agent_id: str, message: str, user_id: str | None = None) -> Any:
        """Widget / live-preview endpoint."""
        payload: dict[str, Any] = {"agent_id": agent_id, "message": message, "stream": False}
        if user_id:
            payload["user_id"] = user_id
        return self._request("POST", "/api/message", "send message", json=payload)

    def upload_file(
        self,
        chatbot_id: str,
        filename: str,
        content: bytes,
        content_type: str = "application/octet-stream",
    ) -> str:
        """Upload a knowledge file and return the vector store it was indexed into."""
        data = self._request(
            "POST",
            f"/api/agents/{chatbot_id}/files",
            "upload file",
            files={"file": (filename, content, content_type)},
        )
        if not isinstance(data, dict) or not data.get("vector_store_id"):
            raise ExecutionApiError("Upload response did not include a vector_store_id")
        return data["vector_store_id"]

    def get_agent(self, agent_id: str) -> dict[str, Any]:
        data = self._request("GET", f"/api/agents/{agent_id}", "get agent")
        return data if isinstance(data, dict) else {}
