from pydantic import BaseModel, ConfigDict, Field
from typing import Annotated, ClassVar
import uuid
from datetime import datetime
from decimal import Decimal

from app.schemas.genre import GenreSummary


# Largest value an INTEGER column holds
INT4_MAX = 2_147_483_647

# Money and counts must fit Numeric(12, 2) and INTEGER columns
Price = Annotated[Decimal, Field(max_digits=12, decimal_places=2)]
Count = Annotated[int, Field(le=INT4_MAX)]


# Book create payload. Presence and sign are checked by the service so
# missing fields map to one message; unparsable or oversized numbers fail here.
class BookCreate(BaseModel):
    title: str | None = None
    writer: str | None = None
    publisher: str | None = None
    publication_year: Count | None = None
    description: str | None = None
    price: Price | None = None
    stock_quantity: Count | None = None
    genre_id: uuid.UUID | None = None


# Book partial update payload
class BookUpdate(BaseModel):
    title: str | None = None
    writer: str | None = None
    publisher: str | None = None
    publication_year: Count | None = None
    description: str | None = None
    price: Price | None = None
    stock_quantity: Count | None = None
    genre_id: uuid.UUID | None = None


# Book read schema
class BookRead(BaseModel):
    id: uuid.UUID
    title: str
    writer: str
    publisher: str
    publication_year: int | None
    description: str | None
    price: float
    stock_quantity: int
    genre_id: uuid.UUID
    created_at: datetime
    updated_at: datetime
    genre: GenreSummary

    model_config: ClassVar[ConfigDict] = ConfigDict(from_attributes=True)


# Soft-deleted book summary
class BookDeleted(BaseModel):
    id: uuid.UUID
    title: str
    writer: str
    publisher: str
    genre: str
    deleted_at: datetime | None
