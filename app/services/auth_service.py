from __future__ import annotations
import uuid
from sqlalchemy.orm import Session

from app.core.errors import AuthenticationError, ConflictError
from app.core.security import create_access_token, hash_password, verify_password
from app.models.user import User
from app.repos.user_repo import UserRepository
from app.schemas.user import TokenRead, UserLogin, UserRegister, UserSummary


class AuthService:
    def __init__(self, db: Session) -> None:
        self.db: Session = db

    # Register user
    def register(self, data: UserRegister) -> UserSummary:
        email = str(data.email).lower()
        if UserRepository.exists(self.db, data.username, email):
            raise ConflictError("Username or email is already registered")

        user = UserRepository.create(
            self.db, data.username, email, hash_password(data.password)
        )
        self.db.commit()
        self.db.refresh(user)
        return UserSummary.model_validate(user)

    # Issue access token
    def login(self, data: UserLogin) -> TokenRead:
        user = UserRepository.get_by_email(self.db, str(data.email).lower())
        if user is None or not verify_password(data.password, user.password_hash):
            raise AuthenticationError("Invalid email or password")
        return TokenRead(
            access_token=create_access_token(user.id),
            user=UserSummary.model_validate(user),
        )

    # Resolve token subject to a user
    def authenticate(self, subject: str) -> User:
        try:
            user_id = uuid.UUID(subject)
        except (TypeError, ValueError) as e:
            raise AuthenticationError("Invalid token subject") from e

        user = UserRepository.get(self.db, user_id)
        if user is None:
            raise AuthenticationError("User not found")
        return user
