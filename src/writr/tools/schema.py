"""Parameter models and their model-facing JSON-Schema projection.

Each tool declares one pydantic model. Validation runs against the model;
the schema sent to providers is derived from it here, so the two cannot
drift apart.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ValidationError

_DROPPED_KEYS = frozenset({"title", "default", "$defs"})


class ToolParams(BaseModel):
    """Base for tool parameter models.

    Unknown fields are stripped, not rejected. Fields may be given by name or
    by their camelCase alias.
    """

    model_config = {"extra": "ignore", "populate_by_name": True}


class NoParams(ToolParams):
    pass


def _resolve_ref(ref: str, defs: dict[str, Any]) -> dict[str, Any]:
    return defs[ref.rsplit("/", 1)[-1]]


def _clean(node: Any, defs: dict[str, Any]) -> Any:
    if isinstance(node, list):
        return [_clean(item, defs) for item in node]
    if not isinstance(node, dict):
        return node

    if "$ref" in node:
        extra = {k: v for k, v in node.items() if k != "$ref"}
        node = {**_resolve_ref(node["$ref"], defs), **extra}

    # Optional[X] arrives as anyOf[X, null]; the model sees plain X.
    any_of = node.get("anyOf")
    if any_of is not None:
        non_null = [s for s in any_of if s.get("type") != "null"]
        if len(non_null) == 1:
            rest = {k: v for k, v in node.items() if k != "anyOf"}
            node = {**_clean(non_null[0], defs), **rest}

    out: dict[str, Any] = {}
    for key, value in node.items():
        if key in _DROPPED_KEYS:
            continue
        if key == "properties":
            out[key] = {name: _clean(sub, defs) for name, sub in value.items()}
        else:
            out[key] = _clean(value, defs)
    return out


def to_parameters_schema(model: type[BaseModel]) -> dict[str, Any]:
    """Project *model* to an ``{"type": "object", ...}`` parameters schema.

    Titles and defaults are removed and nullable unions collapsed.
    Descriptions, enums and ``required`` (fields without defaults) are kept.
    """
    raw = model.model_json_schema(by_alias=True)
    cleaned = _clean(raw, raw.get("$defs", {}))
    schema: dict[str, Any] = {
        "type": "object",
        "properties": cleaned.get("properties", {}),
    }
    if cleaned.get("required"):
        schema["required"] = cleaned["required"]
    return schema


def format_validation_error(error: ValidationError) -> str:
    """Render pydantic errors as ``field: message; field: message``."""
    parts = []
    for err in error.errors():
        loc = ".".join(str(p) for p in err["loc"])
        parts.append(f"{loc}: {err['msg']}" if loc else err["msg"])
    return "; ".join(parts)
