"""Tool catalog, API-call tool validation and knowledge file upload routes."""

from fastapi import APIRouter, File, Request, UploadFile

from tools import service
from tools.schemas import ApiCallForm, BuiltInToolSummary, FileUploadResponse, WireTool

router = APIRouter(prefix="/api/tools", tags=["tools"])
files_router = APIRouter(prefix="/api/chatbots", tags=["tools"])


@router.get("/built-in", response_model=list[BuiltInToolSummary])
def list_built_in_tools():
    return service.list_built_in_tools()


@router.post("/api-call", response_model=WireTool)
def build_api_call_tool(body: ApiCallForm):
    fields = body.model_dump(exclude={"parameters", "parameter_fields"})
    parameters = service.form_parameters(body.parameters, body.parameter_fields)
    return service.build_api_call_tool(parameters=parameters, **fields)


@files_router.post("/{chatbot_id}/files", response_model=FileUploadResponse, status_code=201)
def upload_file(chatbot_id: str, request: Request, file: UploadFile = File(...)):
    content = file.file.read()
    return service.upload_knowledge_file(
        request.app.state.execution_client,
        chatbot_id,
        file.filename or "upload",
        content,
        file.content_type or "application/octet-stream",
    )
