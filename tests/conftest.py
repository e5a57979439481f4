import json

import httpx
import pytest
from fastapi.testclient import TestClient

from agents.schemas import (
    AgentConfig,
    AgentDefinition,
    ContextClass,
    JudgeLoopSettings,
    OutputTypeSchema,
)
from chatbots.schemas import ChatbotCreate
from chatbots import service as chatbots_service
from chatbots.store import ChatbotStore
from execution_client import ExecutionApiClient
from tools.schemas import ObjectSchema, PropertySpec


class FakeExecutionApi:
    """Routes keyed by (method, path) -> (status, body). Records every request."""

    def __init__(self):
        self.routes: dict[tuple[str, str], tuple[int, object]] = {}
        self.requests: list[httpx.Request] = []

    def on(self, method: str, path: str, status: int = 200, body: object = None):
        self.routes[(method, path)] = (status, body if body is not None else {})

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"detail": "Not Found"})
        status, body = route
        if isinstance(body, Exception):
            raise body
        return httpx.Response(status, json=body)

    def last_json(self):
        return json.loads(self.requests[-1].content)


@pytest.fixture
def execution_api():
    return FakeExecutionApi()


@pytest.fixture
def execution_client(execution_api):
    client = ExecutionApiClient("http://exec.test", transport=httpx.MockTransport(execution_api))
    yield client
    client.close()


@pytest.fixture
def store(tmp_path):
    return ChatbotStore(tmp_path / "chatbots.json")


@pytest.fixture
def chatbot(store):
    return chatbots_service.create_chatbot(store, ChatbotCreate(user_id="user-1", name="Support Bot"))


@pytest.fixture
def api(store, execution_client):
    from main import app

    app.state.store = store
    app.state.execution_client = execution_client
    return TestClient(app)


def make_agent(agent_id: str, **kwargs) -> AgentDefinition:
    return AgentDefinition(
        id=agent_id,
        name=kwargs.pop("name", agent_id.title()),
        instructions=kwargs.pop("instructions", "Help the user."),
        **kwargs,
    )


def evaluation_output_type() -> OutputTypeSchema:
    return OutputTypeSchema(
        name="Review",
        json_schema=ObjectSchema(
            properties={
                "verdict": PropertySpec(type="string", enum=["needs_work", "good"]),
                "notes": PropertySpec(type="string"),
            },
            required=["verdict", "notes"],
        ),
    )


@pytest.fixture
def two_agent_config() -> AgentConfig:
    return AgentConfig(
        system_name="Support",
        context_class=ContextClass(name="Ctx"),
        agents=[
            make_agent("triage", handoffs=["billing"], tools=["web_search", "agent_billing"]),
            make_agent("billing"),
        ],
        router_agent_id="triage",
    )


@pytest.fixture
def judge_config() -> AgentConfig:
    return AgentConfig(
        system_name="Writer",
        context_class=ContextClass(name="Ctx"),
        agents=[
            make_agent("writer"),
            make_agent("critic", output_type=evaluation_output_type()),
        ],
        router_agent_id="writer",
        workflow_type="judge_loop",
        judge_loop_settings=JudgeLoopSettings(
            generator_agent_id="writer",
            evaluator_agent_id="critic",
            pass_field="verdict",
            pass_value="good",
            feedback_field="notes",
        ),
    )
