"""
Mock Execution API: FastAPI stand-in for the agent execution service.

Lets the builder backend and the widget run locally without the real
service. Registered configs are kept in memory.

Endpoints:
    POST /api/chatbots/{chatbot_id}            register / update an agent config
    POST /api/chatbots/{chatbot_id}/message    test message (judge loop returns iterations)
    POST /api/message                          widget / live-preview message
    POST /api/agents/{chatbot_id}/files        knowledge file upload
    GET  /api/agents/{chatbot_id}              registered agent lookup
"""

import uuid
from typing import Any

from fastapi import FastAPI, File, HTTPException, UploadFile
from pydantic import BaseModel

app = FastAPI(
    title="Mock Execution API",
    description="In-memory stand-in for the agent execution service.",
    version="1.0.0",
)

_registry: dict[str, dict[str, Any]] = {}
_uploads: dict[str, list[str]] = {}

DEFAULT_SUGGESTIONS = [
    {"id": "1", "text": "How can I get started?", "enabled": True},
    {"id": "2", "text": "What are your business hours?", "enabled": True},
    {"id": "3", "text": "Do you offer support?", "enabled": False},
]


class RegisterRequest(BaseModel):
    config: dict[str, Any]


class ChatbotMessage(BaseModel):
    message: str
    context: dict[str, Any] = {}


class WidgetMessage(BaseModel):
    agent_id: str
    message: str
    stream: bool = False
    user_id: str | None = None


def _get_config(chatbot_id: str) -> dict[str, Any]:
    config = _registry.get(chatbot_id)
    if config is None:
        raise HTTPException(status_code=404, detail=f"Chatbot '{chatbot_id}' is not registered")
    return config


def _router_name(config: dict[str, Any]) -> str:
    for agent in config.get("agents", []):
        if agent.get("id") == config.get("router_agent_id"):
            return agent.get("name") or agent["id"]
    return "Assistant"


def _judge_loop(config: dict[str, Any], message: str) -> dict[str, Any]:
    """Pretend the evaluator approves the second draft (or the last allowed one)."""
    settings = config.get("judge_loop_settings") or {}
    max_iterations = int(settings.get("max_iterations", 5))
    pass_value = settings.get("pass_value", "pass")
    passing_round = min(2, max_iterations)

    iterations = []
    for i in range(1, passing_round + 1):
        passed = i == passing_round
        iterations.append(
            {
                "generated_content": f"Draft {i}: {message}",
                "evaluation": {
                    "score": pass_value if passed else "needs_improvement",
                    "feedback": "Looks good." if passed else "Add more detail.",
                },
            }
        )
    return {"response": iterations[-1]["generated_content"], "iterations": iterations}


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------

@app.post(
    "/api/chatbots/{chatbot_id}",
    summary="Register agent config",
    operation_id="registerChatbot",
)
def register_chatbot(chatbot_id: str, body: RegisterRequest):
    if not body.config.get("agents"):
        raise HTTPException(status_code=422, detail="Config must define at least one agent")
    _registry[chatbot_id] = body.config
    return {"status": "registered", "chatbot_id": chatbot_id}


@app.get(
    "/api/agents/{chatbot_id}",
    summary="Get registered agent",
    operation_id="getAgent",
)
def get_agent(chatbot_id: str):
    config = _get_config(chatbot_id)
    return {
        "agent_id": chatbot_id,
        "config": {**config, "suggestions": config.get("suggestions", DEFAULT_SUGGESTIONS)},
    }


# ---------------------------------------------------------------------------
# Messages
# ---------------------------------------------------------------------------

@app.post(
    "/api/chatbots/{chatbot_id}/message",
    summary="Send a test message",
    operation_id="sendChatbotMessage",
)
def send_chatbot_message(chatbot_id: str, body: ChatbotMessage):
    config = _get_config(chatbot_id)
    if config.get("workflow_type") == "judge_loop":
        return _judge_loop(config, body.message)
    return {"response": f"[{_router_name(config)}] You said: {body.message}"}


@app.post(
    "/api/message",
    summary="Send a widget message",
    operation_id="sendMessage",
)
def send_message(body: WidgetMessage):
    config = _get_config(body.agent_id)
    return {"response": f"[{_router_name(config)}] You said: {body.message}"}


# ---------------------------------------------------------------------------
# Files
# ---------------------------------------------------------------------------

@app.post(
    "/api/agents/{chatbot_id}/files",
    summary="Upload a knowledge file",
    operation_id="uploadFile",
)
def upload_file(chatbot_id: str, file: UploadFile = File(...)):
    content = file.file.read()
    if not content:
        raise HTTPException(status_code=400, detail="Uploaded file is empty")
    vector_store_id = f"vs_{uuid.uuid4().hex[:12]}"
    _uploads.setdefault(vector_store_id, []).append(file.filename or "upload")
    return {"vector_store_id": vector_store_id, "filename": file.filename}
