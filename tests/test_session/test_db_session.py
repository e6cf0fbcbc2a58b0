from __future__ import annotations

import pytest
from sqlalchemy.orm import Session
from unittest.mock import Mock, patch

from app.api.deps import (
    get_book_service,
    get_current_user,
    get_genre_service,
    get_transaction_service,
)
from app.core.errors import AuthenticationError
from app.core.security import create_access_token
from app.db.session import get_db, engine, SessionLocal
from app.services.book_service import BookService
from app.services.genre_service import GenreService
from app.services.transaction_service import TransactionService


class TestDatabaseSession:
    """Test database session functionality."""

    def test_session_local_configuration(self):
        """SessionLocal never autoflushes; services flush explicitly."""
        assert hasattr(SessionLocal, '__call__')
        assert SessionLocal.kw.get('autoflush') is False

    def test_engine_configuration(self):
        assert engine is not None
        assert engine.url is not None

    @patch('app.db.session.SessionLocal')
    def test_get_db_closes_session(self, mock_session_local):
        mock_db = Mock(spec=Session)
        mock_session_local.return_value = mock_db

        generator = get_db()
        session = next(generator)

        mock_session_local.assert_called_once()
        assert session == mock_db

        with pytest.raises(StopIteration):
            next(generator)
        mock_db.close.assert_called_once()

    @patch('app.db.session.SessionLocal')
    def test_get_db_closes_session_on_error(self, mock_session_local):
        mock_db = Mock(spec=Session)
        mock_session_local.return_value = mock_db

        generator = get_db()
        next(generator)
        with pytest.raises(RuntimeError):
            generator.throw(RuntimeError("handler failed"))

        mock_db.close.assert_called_once()


class TestServiceInjection:
    """Services receive the request's session through their constructor."""

    def test_services_share_injected_session(self):
        db = Mock(spec=Session)

        assert isinstance(get_genre_service(db), GenreService)
        assert get_book_service(db).db is db
        transaction_service = get_transaction_service(db)
        assert isinstance(transaction_service, TransactionService)
        assert transaction_service.db is db
        assert isinstance(get_book_service(db), BookService)


class TestCurrentUserGate:
    """The bearer gate in isolation."""

    def test_missing_credentials(self):
        with pytest.raises(AuthenticationError):
            get_current_user(Mock(), Mock(), None)

    def test_valid_token_records_user_on_request(self):
        request = Mock()
        user = Mock()
        user.id = "3f1c4f1e-1111-4444-8888-000000000000"
        auth = Mock()
        auth.authenticate.return_value = user
        credentials = Mock(scheme="Bearer", credentials=create_access_token(user.id))

        assert get_current_user(request, auth, credentials) is user
        auth.authenticate.assert_called_once_with(user.id)
        assert request.state.user_id == user.id
