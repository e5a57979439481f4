"""Agent configuration API routes."""

from fastapi import APIRouter, Request

from agents import service
from agents.schemas import (
    ATTRIBUTE_TYPES,
    MODEL_OPTIONS,
    ActionRequest,
    ActionResponse,
    AgentConfig,
    EditorOptions,
    SaveResult,
    ValidationReport,
)
from tools.schemas import HTTP_METHODS, PARAMETER_TYPES

router = APIRouter(prefix="/api/chatbots/{chatbot_id}/agent", tags=["agents"])


@router.get("", response_model=AgentConfig)
def get_agent_config(chatbot_id: str, request: Request):
    return service.load_config(request.app.state.store, chatbot_id)


@router.put("", response_model=SaveResult)
def save_agent_config(chatbot_id: str, body: AgentConfig, request: Request):
    return service.save_config(
        request.app.state.store,
        request.app.state.execution_client,
        chatbot_id,
        body,
    )


@router.post("/actions", response_model=ActionResponse)
def apply_action(chatbot_id: str, body: ActionRequest):
    return service.apply(body)


@router.post("/validate", response_model=ValidationReport)
def validate_agent_config(chatbot_id: str, body: AgentConfig):
    return service.validate(body)


options_router = APIRouter(prefix="/api/agent-options", tags=["agents"])


@options_router.get("", response_model=EditorOptions)
def get_editor_options():
    return EditorOptions(
        models=MODEL_OPTIONS,
        attribute_types=ATTRIBUTE_TYPES,
        workflow_types=["simple_router", "judge_loop"],
        parameter_types=PARAMETER_TYPES,
        http_methods=HTTP_METHODS,
    )
