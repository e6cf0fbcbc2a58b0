from __future__ import annotations
import uuid
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import ConflictError, NotFoundError, ValidationError
from app.models.base import utcnow
from app.models.book import Book
from app.repos.book_repo import BookRepository
from app.repos.genre_repo import GenreRepository
from app.schemas.book import BookCreate, BookDeleted, BookRead, BookUpdate
from app.schemas.common import Pagination
from app.utils.pagination import clamp_pagination, total_pages

_REQUIRED = ("title", "writer", "publisher", "price", "stock_quantity", "genre_id")
_TEXT_FIELDS = ("title", "writer", "publisher", "description")


def _strip(value: str | None) -> str | None:
    return value.strip() if value is not None else None


class BookService:
    def __init__(self, db: Session) -> None:
        self.db: Session = db

    def _require_genre(self, genre_id: uuid.UUID) -> None:
        if GenreRepository.get_active(self.db, genre_id) is None:
            raise NotFoundError("Genre not found")

    # Create book
    def create_book(self, data: BookCreate) -> BookRead:
        fields = data.model_dump()
        for name in _TEXT_FIELDS:
            fields[name] = _strip(fields[name])

        missing = [name for name in _REQUIRED if fields[name] in (None, "")]
        if missing:
            raise ValidationError(
                "All fields are required (title, writer, publisher, price, stock_quantity, genre_id)",
                data={"missing": missing},
            )
        if fields["price"] < 0:
            raise ValidationError("Price cannot be negative")
        if fields["stock_quantity"] < 0:
            raise ValidationError("Stock cannot be negative")

        self._require_genre(fields["genre_id"])

        if BookRepository.get_active_by_title(self.db, fields["title"]):
            raise ConflictError("Book title already exists")

        book = BookRepository.create(self.db, **fields)
        self.db.commit()
        return self.get_book(book.id)

    # List books
    def list_books(
        self,
        title: str | None = None,
        page: int = 1,
        limit: int | None = None,
    ) -> tuple[list[BookRead], Pagination]:
        page, limit, offset = clamp_pagination(
            page, limit or settings.DEFAULT_PAGE_LIMIT, settings.MAX_PAGE_LIMIT
        )
        books, total = BookRepository.list_active(self.db, title=title, limit=limit, offset=offset)
        pagination = Pagination(
            page=page, limit=limit, total=total, total_pages=total_pages(total, limit)
        )
        return [BookRead.model_validate(book) for book in books], pagination

    # Get live book
    def get_book(self, book_id: uuid.UUID) -> BookRead:
        return BookRead.model_validate(self._get_or_404(book_id))

    def _get_or_404(self, book_id: uuid.UUID) -> Book:
        book = BookRepository.get_active(self.db, book_id)
        if book is None:
            raise NotFoundError("Book not found")
        return book

    # Partial update
    def update_book(self, book_id: uuid.UUID, data: BookUpdate) -> BookRead:
        book = self._get_or_404(book_id)
        changes = data.model_dump(exclude_unset=True)

        if changes.get("genre_id") is not None:
            self._require_genre(changes["genre_id"])

        for name in _TEXT_FIELDS:
            if name in changes:
                changes[name] = _strip(changes[name])

        if "title" in changes and not changes["title"]:
            raise ValidationError("Book title cannot be empty")
        for name in _REQUIRED:
            if name in changes and changes[name] is None:
                raise ValidationError(f"{name} cannot be null")
        if "price" in changes and changes["price"] < 0:
            raise ValidationError("Price cannot be negative")
        if "stock_quantity" in changes and changes["stock_quantity"] < 0:
            raise ValidationError("Stock cannot be negative")

        if "title" in changes and BookRepository.get_active_by_title(
            self.db, changes["title"], exclude_id=book_id
        ):
            raise ConflictError("Book title already exists")

        for name, value in changes.items():
            setattr(book, name, value)
        self.db.commit()
        return self.get_book(book_id)

    # Soft delete book
    def delete_book(self, book_id: uuid.UUID) -> BookDeleted:
        book = self._get_or_404(book_id)
        book.deleted_at = utcnow()
        self.db.commit()
        self.db.refresh(book)
        return BookDeleted(
            id=book.id,
            title=book.title,
            writer=book.writer,
            publisher=book.publisher,
            genre=book.genre.name,
            deleted_at=book.deleted_at,
        )
