from pydantic import BaseModel
from typing import Generic, TypeVar

T = TypeVar("T")


# Pagination block for list responses
class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int


# Response envelope shared by every endpoint
class Envelope(BaseModel, Generic[T]):
    success: bool = True
    message: str
    data: T | None = None
    count: int | None = None
    pagination: Pagination | None = None
