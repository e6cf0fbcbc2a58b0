from __future__ import annotations
import uuid
from sqlalchemy.orm import Session

from app.core.errors import ConflictError, InUseError, NotFoundError, ValidationError
from app.models.base import utcnow
from app.models.genre import Genre
from app.repos.genre_repo import GenreRepository
from app.schemas.genre import GenreBook, GenreDeleted, GenreRead


def _clean_name(name: str | None) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise ValidationError("Genre name is required")
    return cleaned


def _to_read(genre: Genre) -> GenreRead:
    books = [GenreBook.model_validate(book) for book in genre.active_books]
    return GenreRead(
        id=genre.id,
        name=genre.name,
        created_at=genre.created_at,
        updated_at=genre.updated_at,
        total_books=len(books),
        books=books,
    )


class GenreService:
    def __init__(self, db: Session) -> None:
        self.db: Session = db

    # Create genre
    def create_genre(self, name: str | None) -> GenreRead:
        cleaned = _clean_name(name)
        if GenreRepository.get_active_by_name(self.db, cleaned):
            raise ConflictError("Genre already exists")

        genre = GenreRepository.create(self.db, cleaned)
        self.db.commit()
        return self.get_genre(genre.id)

    # List live genres
    def list_genres(self) -> list[GenreRead]:
        return [_to_read(genre) for genre in GenreRepository.list_active(self.db)]

    # Get live genre
    def get_genre(self, genre_id: uuid.UUID) -> GenreRead:
        genre = GenreRepository.get_active(self.db, genre_id)
        if genre is None:
            raise NotFoundError("Genre not found")
        return _to_read(genre)

    # Rename genre
    def update_genre(self, genre_id: uuid.UUID, name: str | None) -> GenreRead:
        cleaned = _clean_name(name)
        genre = GenreRepository.get_active(self.db, genre_id)
        if genre is None:
            raise NotFoundError("Genre not found")

        if GenreRepository.get_active_by_name(self.db, cleaned, exclude_id=genre_id):
            raise ConflictError("Genre name is already in use")

        genre.name = cleaned
        self.db.commit()
        return self.get_genre(genre_id)

    # Soft delete genre
    def delete_genre(self, genre_id: uuid.UUID) -> GenreDeleted:
        genre = GenreRepository.get_active(self.db, genre_id)
        if genre is None:
            raise NotFoundError("Genre not found or already deleted")

        books = genre.active_books
        if books:
            raise InUseError(
                f"Cannot delete genre. {len(books)} active book(s) still use this genre",
                data={
                    "genre_name": genre.name,
                    "active_books_count": len(books),
                    "books": [
                        {"id": str(book.id), "title": book.title, "writer": book.writer}
                        for book in books
                    ],
                },
            )

        genre.deleted_at = utcnow()
        self.db.commit()
        self.db.refresh(genre)
        return GenreDeleted.model_validate(genre)
