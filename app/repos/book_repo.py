import uuid
from typing import cast
from sqlalchemy import select, update, func
from sqlalchemy.engine import CursorResult
from sqlalchemy.orm import Session, selectinload

from app.models.book import Book


class BookRepository:

    @staticmethod
    # Create a new book (service decides when to commit)
    def create(db: Session, **fields: object) -> Book:
        book = Book(**fields)
        db.add(book)
        db.flush()
        return book

    @staticmethod
    # List live books, newest first, with total count
    def list_active(
        db: Session,
        title: str | None = None,
        limit: int = 10,
        offset: int = 0,
    ) -> tuple[list[Book], int]:
        stmt = select(Book).where(Book.deleted_at.is_(None))
        count_stmt = select(func.count()).select_from(Book).where(Book.deleted_at.is_(None))

        # title filter is a literal substring; % and _ are escaped
        if title:
            matches = Book.title.icontains(title.strip(), autoescape=True)
            stmt = stmt.where(matches)
            count_stmt = count_stmt.where(matches)

        stmt = (
            stmt.options(selectinload(Book.genre))
            .order_by(Book.created_at.desc())
            .limit(limit)
            .offset(offset)
        )

        books = list(db.scalars(stmt).all())
        total = db.scalar(count_stmt) or 0
        return books, total

    @staticmethod
    # Get a live book by ID
    def get_active(db: Session, book_id: uuid.UUID, refresh: bool = False) -> Book | None:
        stmt = (
            select(Book)
            .where(Book.id == book_id, Book.deleted_at.is_(None))
            .options(selectinload(Book.genre))
        )
        if refresh:
            # overwrite the identity-map copy with the current row
            stmt = stmt.execution_options(populate_existing=True)
        return db.scalars(stmt).first()

    @staticmethod
    # Get a live book by exact title, optionally ignoring one ID
    def get_active_by_title(
        db: Session, title: str, exclude_id: uuid.UUID | None = None
    ) -> Book | None:
        stmt = select(Book).where(Book.title == title, Book.deleted_at.is_(None))
        if exclude_id is not None:
            stmt = stmt.where(Book.id != exclude_id)
        return db.scalars(stmt).first()

    @staticmethod
    # Current stock of a book
    def get_stock(db: Session, book_id: uuid.UUID) -> int:
        stmt = select(Book.stock_quantity).where(Book.id == book_id)
        return db.scalar(stmt) or 0

    @staticmethod
    # Try decrement book stock by book id
    def try_decrement_stock(db: Session, book_id: uuid.UUID, qty: int) -> tuple[bool, int]:
        """
        Conditional decrement: succeeds only while the live book still has
        at least `qty` in stock. Returns (ok, stock seen when it failed).
        """
        upd = (
            update(Book)
            .where(
                Book.id == book_id,
                Book.deleted_at.is_(None),
                Book.stock_quantity >= qty,
            )
            .values(stock_quantity=Book.stock_quantity - qty)
            .execution_options(synchronize_session=False)
        )
        result = cast(CursorResult[object], db.execute(upd))
        if result.rowcount == 1:
            return (True, 0)
        return (False, BookRepository.get_stock(db, book_id))
