from pydantic import BaseModel, ConfigDict
from typing import ClassVar
import uuid
from datetime import datetime


# Genre create/update payload; emptiness is checked by the service
class GenreWrite(BaseModel):
    name: str | None = None


# Book row embedded in a genre
class GenreBook(BaseModel):
    id: uuid.UUID
    title: str
    writer: str
    price: float
    stock_quantity: int

    model_config: ClassVar[ConfigDict] = ConfigDict(from_attributes=True)


# Genre read schema
class GenreRead(BaseModel):
    id: uuid.UUID
    name: str
    created_at: datetime
    updated_at: datetime
    total_books: int
    books: list[GenreBook] = []


# Genre embedded in a book
class GenreSummary(BaseModel):
    id: uuid.UUID
    name: str

    model_config: ClassVar[ConfigDict] = ConfigDict(from_attributes=True)


# Soft-deleted genre summary
class GenreDeleted(BaseModel):
    id: uuid.UUID
    name: str
    deleted_at: datetime | None

    model_config: ClassVar[ConfigDict] = ConfigDict(from_attributes=True)
