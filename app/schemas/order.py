from pydantic import BaseModel
import uuid
from datetime import datetime

from app.schemas.user import UserSummary


# Line item in a purchase request; presence and range are checked by the service
class TransactionItemCreate(BaseModel):
    book_id: uuid.UUID | None = None
    quantity: int | None = None


# Purchase request
class TransactionCreate(BaseModel):
    user_id: uuid.UUID | None = None
    items: list[TransactionItemCreate] | None = None


# Book as shown inside a transaction
class TransactionBook(BaseModel):
    id: uuid.UUID
    title: str
    writer: str
    price: float
    genre: str


class TransactionBookDetail(TransactionBook):
    publisher: str


# Line item read
class TransactionItemRead(BaseModel):
    id: uuid.UUID
    book: TransactionBook
    quantity: int
    subtotal: float


class TransactionItemDetail(BaseModel):
    id: uuid.UUID
    book: TransactionBookDetail
    quantity: int
    subtotal: float


# Result of a purchase
class TransactionCreated(BaseModel):
    transaction_id: uuid.UUID
    user: UserSummary
    total_quantity: int
    total_price: float
    items: list[TransactionItemRead]
    created_at: datetime


# Flattened line item in the transaction list
class TransactionListItem(BaseModel):
    book_title: str
    genre: str
    quantity: int
    price: float


class TransactionSummary(BaseModel):
    id: uuid.UUID
    user: UserSummary
    total_price: float
    total_items: int
    items: list[TransactionListItem]
    created_at: datetime


class TransactionDetail(BaseModel):
    id: uuid.UUID
    user: UserSummary
    total_price: float
    items: list[TransactionItemDetail]
    created_at: datetime
    updated_at: datetime


class TransactionStatistics(BaseModel):
    total_transactions: int
    average_transaction_value: float
    most_popular_genre: str | None
    least_popular_genre: str | None
