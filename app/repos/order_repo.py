import uuid
from decimal import Decimal
from sqlalchemy import select, update, func
from sqlalchemy.orm import Session, selectinload

from app.models.book import Book
from app.models.genre import Genre
from app.models.order import Order, OrderItem


def _with_details():
    return (
        selectinload(Order.user),
        selectinload(Order.items).selectinload(OrderItem.book).selectinload(Book.genre),
    )


class OrderRepository:
    """Repository for Order model."""

    @staticmethod
    # Create order shell with zero total
    def create(db: Session, user_id: uuid.UUID) -> Order:
        order = Order(user_id=user_id, total_price=Decimal("0"))
        db.add(order)
        db.flush()  # ensure order.id
        return order

    @staticmethod
    # Add a line item to an order
    def add_item(db: Session, order_id: uuid.UUID, book_id: uuid.UUID, quantity: int) -> OrderItem:
        item = OrderItem(order_id=order_id, book_id=book_id, quantity=quantity)
        db.add(item)
        db.flush()
        return item

    @staticmethod
    # Set order total by order id
    def set_total_price(db: Session, order_id: uuid.UUID, total_price: Decimal) -> None:
        """Pure UPDATE (service decides when to commit)."""
        stmt = (
            update(Order)
            .where(Order.id == order_id)
            .values(total_price=total_price)
            .execution_options(synchronize_session=False)
        )
        _ = db.execute(stmt)

    @staticmethod
    # Get order by id with user, items, books and genres
    def get_with_details(db: Session, order_id: uuid.UUID) -> Order | None:
        stmt = select(Order).where(Order.id == order_id).options(*_with_details())
        return db.scalars(stmt).first()

    @staticmethod
    # List all orders, newest first
    def list_with_details(db: Session) -> list[Order]:
        stmt = select(Order).options(*_with_details()).order_by(Order.created_at.desc())
        return list(db.scalars(stmt).all())

    # ---- Statistics ----
    @staticmethod
    def count(db: Session) -> int:
        return db.scalar(select(func.count()).select_from(Order)) or 0

    @staticmethod
    def average_total(db: Session) -> Decimal | float | None:
        return db.scalar(select(func.avg(Order.total_price)))

    @staticmethod
    # Genre with the most (or least) purchased line items
    def genre_by_popularity(db: Session, most: bool = True) -> str | None:
        """
        Line items are counted per genre over live books and genres.
        Ties resolve to the alphabetically first genre name.
        """
        total = func.count(OrderItem.id).label("total")
        stmt = (
            select(Genre.name, total)
            .select_from(OrderItem)
            .join(Book, Book.id == OrderItem.book_id)
            .join(Genre, Genre.id == Book.genre_id)
            .where(Book.deleted_at.is_(None), Genre.deleted_at.is_(None))
            .group_by(Genre.name)
            .order_by(total.desc() if most else total.asc(), Genre.name.asc())
            .limit(1)
        )
        row = db.execute(stmt).first()
        return row[0] if row else None
