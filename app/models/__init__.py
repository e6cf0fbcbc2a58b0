from .base import Base
from .user import User
from .genre import Genre
from .book import Book
from .order import Order, OrderItem

__all__ = ["Base", "User", "Genre", "Book", "Order", "OrderItem"]
