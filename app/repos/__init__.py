from .user_repo import UserRepository
from .genre_repo import GenreRepository
from .book_repo import BookRepository
from .order_repo import OrderRepository

__all__ = ["UserRepository", "GenreRepository", "BookRepository", "OrderRepository"]
