from typing import Annotated
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.core.errors import AuthenticationError
from app.core.security import decode_access_token
from app.db.session import get_db
from app.models.user import User
from app.services.auth_service import AuthService
from app.services.book_service import BookService
from app.services.genre_service import GenreService
from app.services.transaction_service import TransactionService

DbSession = Annotated[Session, Depends(get_db)]

_bearer = HTTPBearer(auto_error=False)


def get_auth_service(db: DbSession) -> AuthService:
    return AuthService(db)


def get_genre_service(db: DbSession) -> GenreService:
    return GenreService(db)


def get_book_service(db: DbSession) -> BookService:
    return BookService(db)


def get_transaction_service(db: DbSession) -> TransactionService:
    return TransactionService(db)


def get_current_user(
    request: Request,
    auth: Annotated[AuthService, Depends(get_auth_service)],
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_bearer)],
) -> User:
    """
    Gate for protected routes: 401 unless a valid bearer token names an
    existing user.
    """
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise AuthenticationError("Missing or invalid Authorization header")

    claims = decode_access_token(credentials.credentials)
    user = auth.authenticate(str(claims.get("sub")))
    request.state.user_id = str(user.id)
    return user


CurrentUser = Annotated[User, Depends(get_current_user)]
