"""Widget config lookup route. Open to every origin since widgets run on third-party pages."""

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse

from config import get_settings
from widget.schemas import WidgetConfig

router = APIRouter(prefix="/api/widget-config", tags=["widget"])

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


@router.get("")
def get_widget_config(chatbot_id: str | None = Query(None, alias="chatbotId")):
    if not chatbot_id:
        return JSONResponse(
            status_code=400,
            content={"error": "Missing chatbotId parameter"},
            headers=CORS_HEADERS,
        )
    settings = get_settings()
    config = WidgetConfig(
        chatbot_id=chatbot_id,
        api_url=settings.public_api_url,
        version=settings.widget_version,
    )
    return JSONResponse(content=config.model_dump(), headers=CORS_HEADERS)


@router.options("")
def widget_config_preflight():
    return JSONResponse(content={}, headers=CORS_HEADERS)
