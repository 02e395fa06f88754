# teamboard/schemas/common.py
from typing import Any, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, model_serializer
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class APIModel(BaseModel):
    """Base for payload models: camelCase on the wire, snake_case in Python"""

    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class Pagination(APIModel):
    current_page: int
    total_pages: int
    total_teams: int
    has_next_page: bool
    has_prev_page: bool


class ErrorDetail(BaseModel):
    field: str
    message: str
    type: str


class Envelope(BaseModel, Generic[T]):
    success: bool = True
    message: str
    data: Optional[T] = None
    details: Optional[List[ErrorDetail]] = None
    pagination: Optional[Pagination] = None

    @model_serializer(mode="wrap")
    def _drop_empty_extras(self, handler) -> dict:
        payload = handler(self)
        for key in ("details", "pagination"):
            if payload.get(key) is None:
                payload.pop(key, None)
        return payload


def error_body(message: str, details: Any = None) -> dict:
    body = {"success": False, "message": message}
    if details is not None:
        body["details"] = details
    return body
