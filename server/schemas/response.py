# server/schemas/response.py

from typing import Generic, TypeVar
from pydantic import BaseModel


T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """
    Envelope wrapped around every response body.
    Null keys are dropped when serialized.
    """
    success: bool = True
    message: str | None = None
    data: T | None = None
    error: str | None = None


def error_envelope(message: str, error: str | None = None) -> dict:
    return ApiResponse(success=False, message=message, error=error).model_dump(exclude_none=True)
