# app/schemas/common.py
import math
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """
    Success envelope shared by every endpoint.

    {"success": true, "message": "...", "data": ...}
    """

    success: bool = True
    message: str
    data: T | None = None


class ErrorDetail(BaseModel):
    code: str
    message: str


class ErrorResponse(BaseModel):
    """
    Failure envelope.

    `errors` is only present for request validation failures
    (field name -> list of messages).
    """

    success: bool = False
    message: str
    error: ErrorDetail
    errors: dict[str, list[str]] | None = None


class Pagination(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    current_page: int
    last_page: int
    per_page: int
    total: int
    from_: int | None = Field(default=None, alias="from")
    to: int | None = None

    @classmethod
    def build(cls, page: int, per_page: int, total: int, count: int) -> "Pagination":
        """
        Build the block for a page holding `count` rows out of `total`.
        """
        first = (page - 1) * per_page + 1 if count else None
        return cls(
            current_page=page,
            last_page=max(1, math.ceil(total / per_page)) if per_page else 1,
            per_page=per_page,
            total=total,
            from_=first,
            to=first + count - 1 if count else None,
        )
