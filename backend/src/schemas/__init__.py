"""Shared Pydantic schemas."""

from .common import ApiModel, DataResponse, MessageResponse

__all__ = ["ApiModel", "DataResponse", "MessageResponse"]
