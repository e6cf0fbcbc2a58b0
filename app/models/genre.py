from __future__ import annotations
import uuid
import datetime
from typing import TYPE_CHECKING
from sqlalchemy import Text, DateTime, Index, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.models.base import Base, utcnow

if TYPE_CHECKING:
    from app.models.book import Book

#Genre
class Genre(Base):
    __tablename__: str = "genres"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )
    deleted_at: Mapped[datetime.datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # Non-deleted books only
    active_books: Mapped[list[Book]] = relationship(
        "Book",
        primaryjoin="and_(Genre.id == Book.genre_id, Book.deleted_at.is_(None))",
        order_by="Book.title",
        viewonly=True,
    )

    __table_args__ = (
        # name is unique among live genres only
        Index(
            "uq_genres_name_active",
            "name",
            unique=True,
            postgresql_where=text("deleted_at IS NULL"),
            sqlite_where=text("deleted_at IS NULL"),
        ),
    )
