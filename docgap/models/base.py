"""Shared base model for payloads exchanged with the dashboard."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Serializes with camelCase aliases, accepts snake_case or camelCase input."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
