"""Workflow strategy rules: judge-loop defaults, field reconciliation, config checks."""

from __future__ import annotations

from agents.schemas import AgentConfig, JudgeLoopSettings
from tools.schemas import AgentToolRef

_PASS_HINTS = ("score", "rating", "status", "result")
_FEEDBACK_HINTS = ("feedback", "comment", "explanation", "reason")
_POSITIVE_VALUES = ("pass", "success", "ok", "good", "yes", "true", "1")

EVALUATOR_OUTPUT_NOTICE = "An output type will be applied to the evaluator agent"


def default_generator_id(config: AgentConfig) -> str:
    return config.agents[0].id


def default_evaluator_id(config: AgentConfig) -> str:
    agents = config.agents
    return agents[1].id if len(agents) > 1 else agents[0].id


def default_judge_loop_settings(config: AgentConfig) -> JudgeLoopSettings:
    settings = JudgeLoopSettings(
        generator_agent_id=default_generator_id(config),
        evaluator_agent_id=default_evaluator_id(config),
        max_iterations=5,
        pass_field="score",
        pass_value="pass",
        feedback_field="feedback",
    )
    return reconcile_evaluator_fields(config, settings)


def _first_matching(names: list[str], hints: tuple[str, ...]) -> str | None:
    for name in names:
        lowered = name.lower()
        if any(hint in lowered for hint in hints):
            return name
    return None


def reconcile_evaluator_fields(
    config: AgentConfig, settings: JudgeLoopSettings
) -> JudgeLoopSettings:
    """Point pass/feedback fields at properties of the evaluator's output schema.

    Leaves settings untouched when the evaluator is unknown or has no output type.
    """
    evaluator = config.get_agent(settings.evaluator_agent_id)
    if evaluator is None or evaluator.output_type is None:
        return settings

    schema = evaluator.output_type.json_schema
    names = list(schema.properties)
    pass_field = settings.pass_field
    feedback_field = settings.feedback_field
    pass_value = settings.pass_value

    if not pass_field or pass_field not in names:
        match = _first_matching(names, _PASS_HINTS)
        if match:
            pass_field = match
        elif names:
            pass_field = names[0]

    if not feedback_field or feedback_field not in names:
        match = _first_matching(names, _FEEDBACK_HINTS)
        if match:
            feedback_field = match
        elif len(names) > 1:
            feedback_field = names[1]
        elif names and names[0] != pass_field:
            feedback_field = names[0]

    pass_spec = schema.properties.get(pass_field)
    if pass_spec is not None and pass_spec.enum:
        pass_value = next(
            (v for v in pass_spec.enum if any(p in v.lower() for p in _POSITIVE_VALUES)),
            pass_spec.enum[0],
        )

    return settings.model_copy(
        update={
            "pass_field": pass_field,
            "feedback_field": feedback_field,
            "pass_value": pass_value,
        }
    )


def evaluator_needs_output_type(config: AgentConfig) -> bool:
    settings = config.judge_loop_settings
    if config.workflow_type != "judge_loop" or settings is None:
        return False
    evaluator = config.get_agent(settings.evaluator_agent_id)
    return evaluator is not None and evaluator.output_type is None


def validate_config(config: AgentConfig) -> list[str]:
    """Return referential-integrity problems; an empty list means the config is runnable."""
    issues: list[str] = []
    ids = set(config.agent_ids)

    for agent in config.agents:
        for target in agent.handoffs:
            if target == agent.id:
                issues.append(f"Agent '{agent.id}' lists itself as a handoff")
            elif target not in ids:
                issues.append(f"Agent '{agent.id}' hands off to unknown agent '{target}'")
        for tool in agent.tools:
            if isinstance(tool, AgentToolRef) and tool.agent_id not in ids:
                issues.append(
                    f"Agent '{agent.id}' uses unknown agent '{tool.agent_id}' as a tool"
                )

    settings = config.judge_loop_settings
    if config.workflow_type == "judge_loop" and settings is not None:
        if settings.generator_agent_id not in ids:
            issues.append(f"Unknown generator agent '{settings.generator_agent_id}'")
        if settings.evaluator_agent_id not in ids:
            issues.append(f"Unknown evaluator agent '{settings.evaluator_agent_id}'")

    return issues


def config_warnings(config: AgentConfig) -> list[str]:
    """Problems that do not block saving: the execution API can still run the config."""
    warnings: list[str] = []
    if evaluator_needs_output_type(config):
        warnings.append(EVALUATOR_OUTPUT_NOTICE)

    settings = config.judge_loop_settings
    if config.workflow_type != "judge_loop" or settings is None:
        return warnings
    evaluator = config.get_agent(settings.evaluator_agent_id)
    if evaluator is not None and evaluator.output_type is not None:
        props = evaluator.output_type.json_schema.properties
        if settings.pass_field not in props:
            warnings.append(
                f"pass_field '{settings.pass_field}' is not in the evaluator output type"
            )
        if settings.feedback_field not in props:
            warnings.append(
                f"feedback_field '{settings.feedback_field}' is not in the evaluator output type"
            )
    return warnings
