"""Model-facing parameter schemas derived from the pydantic parameter models."""

from __future__ import annotations

from typing import Any

from pydantic import Field, ValidationError
import pytest

from writr.tools import AI_TOOLS, ToolParams, get_tool, to_parameters_schema
from writr.tools.schema import format_validation_error

pytestmark = pytest.mark.unit


def _walk(node: Any) -> list[dict[str, Any]]:
    if isinstance(node, list):
        return [d for item in node for d in _walk(item)]
    if not isinstance(node, dict):
        return []
    found = [node]
    for key, value in node.items():
        if key == "properties":
            found.extend(d for sub in value.values() for d in _walk(sub))
        else:
            found.extend(_walk(value))
    return found


@pytest.mark.parametrize("tool", AI_TOOLS, ids=lambda t: t.id)
def test_schemas_are_plain_objects_without_pydantic_noise(tool: Any) -> None:
    schema = tool.parameters
    assert schema["type"] == "object"
    assert isinstance(schema["properties"], dict)
    for node in _walk(schema):
        assert "title" not in node
        assert "default" not in node
        assert "$ref" not in node
        assert "$defs" not in node


def test_optional_fields_collapse_to_their_type() -> None:
    props = get_tool("update_chapter").parameters["properties"]  # type: ignore[union-attr]
    assert props["title"] == {"type": "string", "description": "New title"}
    assert props["status"]["enum"] == ["draft", "revised", "final"]
    assert "anyOf" not in props["status"]


def test_required_lists_only_fields_without_defaults() -> None:
    assert get_tool("create_character").parameters["required"] == ["name"]  # type: ignore[union-attr]
    assert "required" not in get_tool("list_characters").parameters  # type: ignore[union-attr]


def test_aliases_are_exposed_to_the_model() -> None:
    props = get_tool("update_character").parameters["properties"]  # type: ignore[union-attr]
    assert "dialogueStyle" in props
    assert "dialogue_style" not in props


def test_array_of_enum_parameter() -> None:
    props = get_tool("search_project").parameters["properties"]  # type: ignore[union-attr]
    entity_types = props["entity_types"]
    assert entity_types["type"] == "array"
    assert "outlineCell" in entity_types["items"]["enum"]


def test_property_named_title_survives_cleanup() -> None:
    class Params(ToolParams):
        title: str = Field(description="Heading")

    assert to_parameters_schema(Params) == {
        "type": "object",
        "properties": {"title": {"type": "string", "description": "Heading"}},
        "required": ["title"],
    }


def test_validation_errors_render_field_paths() -> None:
    class Params(ToolParams):
        start: int = Field(ge=1)

    with pytest.raises(ValidationError) as exc:
        Params.model_validate({"start": 0})
    message = format_validation_error(exc.value)
    assert message.startswith("start: ")
    assert "greater than or equal to 1" in message
