"""JSON serialization utilities for checkpointed step outputs."""

import importlib
import json
from typing import Any

from pydantic import BaseModel


def is_json_serializable(obj: Any) -> bool:
    """Check if an object is JSON serializable by attempting json.dumps."""
    try:
        json.dumps(obj)
        return True
    except (TypeError, ValueError):
        return False


def schema_name_for(obj: Any) -> str | None:
    """Return the schema name used to rebuild ``obj`` on replay.

    Pydantic models are recorded as ``module.ClassName`` and lists of models as
    ``list[module.ClassName]``. Anything else has no schema.
    """
    if isinstance(obj, BaseModel):
        return f"{obj.__class__.__module__}.{obj.__class__.__name__}"
    if isinstance(obj, list) and obj and isinstance(obj[0], BaseModel):
        return f"list[{obj[0].__class__.__module__}.{obj[0].__class__.__name__}]"
    return None


def serialize(obj: Any) -> Any:
    """Serialize an object to a JSON-serializable value.

    Pydantic models (and lists of them) are dumped with ``model_dump(mode="json")``.
    Other values must already be JSON serializable.

    Raises:
        TypeError: If the object is not a Pydantic model and not JSON serializable
    """
    if isinstance(obj, BaseModel):
        return obj.model_dump(mode="json")
    if isinstance(obj, list) and obj and isinstance(obj[0], BaseModel):
        return [item.model_dump(mode="json") for item in obj]

    if not is_json_serializable(obj):
        raise TypeError(
            f"Object of type {type(obj).__name__} is not JSON serializable. "
            f"If it's a Pydantic model, ensure it inherits from BaseModel."
        )

    return obj


def _load_model_class(schema: str) -> type[BaseModel]:
    module_path, class_name = schema.rsplit(".", 1)
    module = importlib.import_module(module_path)
    model_class = getattr(module, class_name)
    if not (isinstance(model_class, type) and issubclass(model_class, BaseModel)):
        raise TypeError(f"{schema} is not a Pydantic model")
    return model_class


def deserialize(obj: Any, output_schema_name: str | None = None) -> Any:
    """Rebuild a checkpointed value.

    Args:
        obj: Stored JSON value
        output_schema_name: Schema name recorded by ``schema_name_for``

    Returns:
        The Pydantic model (or list of models) when a schema is recorded,
        otherwise ``obj`` unchanged
    """
    if not output_schema_name:
        return obj

    try:
        if output_schema_name.startswith("list[") and isinstance(obj, list):
            model_class = _load_model_class(output_schema_name[5:-1])
            return [model_class.model_validate(item) for item in obj]
        if isinstance(obj, dict):
            return _load_model_class(output_schema_name).model_validate(obj)
    except (ImportError, AttributeError, ValueError, TypeError) as e:
        raise ValueError(
            f"Failed to reconstruct Pydantic model from output_schema_name: "
            f"{output_schema_name}. Error: {str(e)}"
        ) from e
    return obj


def safe_serialize(value):
    """Serialize with fallback for non-serializable values."""
    try:
        return serialize(value)
    except (TypeError, ValueError):
        if hasattr(value, "__name__"):
            return f"<{value.__name__}>"
        return f"<{type(value).__name__}>"
