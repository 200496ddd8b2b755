from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


T = TypeVar("T")


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ApiResponse(BaseModel, Generic[T]):
    success: bool
    data: T | None = None
    message: str | None = None

    @classmethod
    def ok(cls, data: T | None = None) -> ApiResponse[T]:
        return cls(success=True, data=data, message=None)

    @classmethod
    def error(cls, message: str) -> ApiResponse[T]:
        return cls(success=False, data=None, message=message)
