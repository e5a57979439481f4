"""Pydantic models for agent test invocations."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel


class TestRequest(BaseModel):
    """Request body for testing a saved agent configuration."""

    __test__ = False

    message: str
    context: dict[str, Any] = {}


class Evaluation(BaseModel):
    score: str | None = None
    feedback: str | None = None


class IterationTrace(BaseModel):
    """One generator/evaluator round of a judge loop."""

    index: int
    content: str = ""
    evaluation: Evaluation | None = None
    passed: bool | None = None


class TestReply(BaseModel):
    """Final response plus the judge-loop trace, when there is one."""

    __test__ = False

    response: str
    iterations: list[IterationTrace] = []


class PreviewRequest(BaseModel):
    """A message typed into the live preview."""

    message: str
    user_id: str | None = None
