"""Chatbot CRUD API routes."""

from typing import Any

from fastapi import APIRouter, Body, Request, Response

from chatbots import service
from chatbots.schemas import Chatbot, ChatbotCreate, ChatbotUpdate

router = APIRouter(prefix="/api/chatbots", tags=["chatbots"])


@router.post("", response_model=Chatbot, status_code=201)
def create_chatbot(body: ChatbotCreate, request: Request):
    return service.create_chatbot(request.app.state.store, body)


@router.get("", response_model=list[Chatbot])
def list_chatbots(user_id: str, request: Request):
    return service.list_chatbots(request.app.state.store, user_id)


@router.get("/{chatbot_id}", response_model=Chatbot)
def get_chatbot(chatbot_id: str, request: Request):
    return service.get_chatbot(request.app.state.store, chatbot_id)


@router.patch("/{chatbot_id}", response_model=Chatbot)
def update_chatbot(chatbot_id: str, body: ChatbotUpdate, request: Request):
    return service.update_chatbot(request.app.state.store, chatbot_id, body)


@router.patch("/{chatbot_id}/settings/{setting_type}", response_model=Chatbot)
def update_settings(
    chatbot_id: str, setting_type: str, request: Request, settings: Any = Body(...)
):
    return service.update_settings(request.app.state.store, chatbot_id, setting_type, settings)


@router.delete("/{chatbot_id}", status_code=204)
def delete_chatbot(chatbot_id: str, request: Request):
    service.delete_chatbot(request.app.state.store, chatbot_id)
    return Response(status_code=204)
