from collections.abc import Sequence

from pydantic import BaseModel, SerializeAsAny, TypeAdapter

MODEL_LIST_ADAPTER: TypeAdapter[list[SerializeAsAny[BaseModel]]] = TypeAdapter(list[SerializeAsAny[BaseModel]])


def to_json(value: BaseModel | Sequence[BaseModel], /) -> str:
    """Render a model, or a list of models, as indented JSON for the agent to read."""

    if isinstance(value, BaseModel):
        return value.model_dump_json(indent=2)

    return MODEL_LIST_ADAPTER.dump_json(list(value), indent=2).decode()


def error(message: str, /) -> str:
    return f"Error: {message}"
