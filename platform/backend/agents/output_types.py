"""Helpers for building and editing agent output types."""

from __future__ import annotations

from agents.schemas import OutputTypeSchema
from tools.schemas import ObjectSchema, PropertySpec


def default_evaluator_output_type() -> OutputTypeSchema:
    """Schema an evaluator agent needs for the judge loop."""
    return OutputTypeSchema(
        name="EvaluationFeedback",
        json_schema=ObjectSchema(
            properties={
                "feedback": PropertySpec(
                    type="string",
                    description="Feedback on how to improve the content",
                ),
                "score": PropertySpec(
                    type="string",
                    enum=["pass", "needs_improvement", "fail"],
                    description="Evaluation score",
                ),
            },
            required=["feedback", "score"],
        ),
    )


def blank_output_type() -> OutputTypeSchema:
    return OutputTypeSchema(name="Output", json_schema=ObjectSchema())


def parse_enum_values(text: str) -> list[str]:
    return [v.strip() for v in text.split(",") if v.strip()]


def add_property(
    output_type: OutputTypeSchema,
    name: str,
    type: str = "string",
    description: str = "",
    enum_values: str = "",
    required: bool = True,
) -> OutputTypeSchema:
    """Return a copy of output_type with one more property.

    A blank name leaves the schema unchanged. Enum values only apply to
    string properties.
    """
    name = name.strip()
    if not name:
        return output_type

    enum = parse_enum_values(enum_values) if type == "string" else []
    prop = PropertySpec(
        type=type,
        description=description or f"Description for {name}",
        enum=enum or None,
    )
    schema = output_type.json_schema
    req = list(schema.required)
    if required and name not in req:
        req.append(name)
    new_schema = schema.model_copy(
        update={"properties": {**schema.properties, name: prop}, "required": req}
    )
    return output_type.model_copy(update={"json_schema": new_schema})


def remove_property(output_type: OutputTypeSchema, name: str) -> OutputTypeSchema:
    schema = output_type.json_schema
    props = {k: v for k, v in schema.properties.items() if k != name}
    req = [r for r in schema.required if r != name]
    new_schema = schema.model_copy(update={"properties": props, "required": req})
    return output_type.model_copy(update={"json_schema": new_schema})


def rename_output_type(output_type: OutputTypeSchema, name: str) -> OutputTypeSchema:
    return output_type.model_copy(update={"name": name})
