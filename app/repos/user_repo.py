import uuid
from sqlalchemy import select, or_
from sqlalchemy.orm import Session

from app.models.user import User


class UserRepository:

    @staticmethod
    # Create a new user (service decides when to commit)
    def create(db: Session, username: str, email: str, password_hash: str) -> User:
        user = User(username=username, email=email, password_hash=password_hash)
        db.add(user)
        db.flush()
        return user

    @staticmethod
    # Get a user by ID
    def get(db: Session, user_id: uuid.UUID) -> User | None:
        return db.get(User, user_id)

    @staticmethod
    # Get a user by email
    def get_by_email(db: Session, email: str) -> User | None:
        stmt = select(User).where(User.email == email)
        return db.scalars(stmt).first()

    @staticmethod
    # Check whether username or email is already taken
    def exists(db: Session, username: str, email: str) -> bool:
        stmt = select(User.id).where(or_(User.username == username, User.email == email))
        return db.scalars(stmt).first() is not None
