import uuid
from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from app.models.genre import Genre


class GenreRepository:

    @staticmethod
    # Create a new genre (service decides when to commit)
    def create(db: Session, name: str) -> Genre:
        genre = Genre(name=name)
        db.add(genre)
        db.flush()
        return genre

    @staticmethod
    # List live genres with their live books
    def list_active(db: Session) -> list[Genre]:
        stmt = (
            select(Genre)
            .where(Genre.deleted_at.is_(None))
            .options(selectinload(Genre.active_books))
            .order_by(Genre.name.asc())
        )
        return list(db.scalars(stmt).all())

    @staticmethod
    # Get a live genre by ID
    def get_active(db: Session, genre_id: uuid.UUID) -> Genre | None:
        stmt = (
            select(Genre)
            .where(Genre.id == genre_id, Genre.deleted_at.is_(None))
            .options(selectinload(Genre.active_books))
        )
        return db.scalars(stmt).first()

    @staticmethod
    # Get a live genre by exact name, optionally ignoring one ID
    def get_active_by_name(
        db: Session, name: str, exclude_id: uuid.UUID | None = None
    ) -> Genre | None:
        stmt = select(Genre).where(Genre.name == name, Genre.deleted_at.is_(None))
        if exclude_id is not None:
            stmt = stmt.where(Genre.id != exclude_id)
        return db.scalars(stmt).first()
