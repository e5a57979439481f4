"""Agent test and live preview API routes."""

from fastapi import APIRouter, Request

from chat import service
from chat.schemas import PreviewRequest, TestReply, TestRequest

router = APIRouter(prefix="/api/chatbots", tags=["chat"])


@router.post("/{chatbot_id}/test", response_model=TestReply)
def test_agent(chatbot_id: str, body: TestRequest, request: Request):
    return service.test_agent(
        request.app.state.store,
        request.app.state.execution_client,
        chatbot_id,
        body.message,
        body.context,
    )


@router.post("/{chatbot_id}/preview", response_model=TestReply)
def preview_message(chatbot_id: str, body: PreviewRequest, request: Request):
    return service.preview_message(
        request.app.state.store,
        request.app.state.execution_client,
        chatbot_id,
        body.message,
        body.user_id,
    )
