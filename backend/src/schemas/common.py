"""Base schema and response envelopes shared by all routers.

JSON on the wire is camelCase. Request bodies also accept snake_case field
names so internal callers and scripts can use either.
"""

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class ApiModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class DataResponse(ApiModel, Generic[T]):
    """Envelope for successful payloads: {"data": ...}."""
    data: T


class MessageResponse(ApiModel):
    message: str
