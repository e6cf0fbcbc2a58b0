from __future__ import annotations
import uuid
from decimal import Decimal
from sqlalchemy.orm import Session

from app.core.errors import NotFoundError, ValidationError
from app.core.logging import get_logger
from app.models.order import Order, OrderItem
from app.repos.book_repo import BookRepository
from app.repos.order_repo import OrderRepository
from app.repos.user_repo import UserRepository
from app.schemas.order import (
    TransactionBook,
    TransactionBookDetail,
    TransactionCreate,
    TransactionCreated,
    TransactionDetail,
    TransactionItemCreate,
    TransactionItemDetail,
    TransactionItemRead,
    TransactionListItem,
    TransactionStatistics,
    TransactionSummary,
)
from app.schemas.user import UserSummary

logger = get_logger(__name__)


def _subtotal(item: OrderItem) -> Decimal:
    return item.book.price * item.quantity


def _insufficient_stock(title: str, available: int, requested: int) -> ValidationError:
    return ValidationError(
        f'Insufficient stock for book "{title}". '
        f"Available: {available}, Requested: {requested}",
        data={"available": available, "requested": requested},
    )


class TransactionService:
    """
    Order creation and reporting.

    An order is validated in full against current stock before anything is
    written; the order shell, its line items and the stock decrements are
    then committed as one unit.
    """

    def __init__(self, db: Session) -> None:
        self.db: Session = db

    def _validate_items(self, items: list[TransactionItemCreate]) -> None:
        # Stops at the first bad item
        for item in items:
            if item.book_id is None or not item.quantity:
                raise ValidationError("Each item must have book_id and quantity")
            if item.quantity <= 0:
                raise ValidationError("Quantity must be greater than 0")

            book = BookRepository.get_active(self.db, item.book_id)
            if book is None:
                raise NotFoundError(f"Book with id {item.book_id} not found")
            if book.stock_quantity < item.quantity:
                raise _insufficient_stock(book.title, book.stock_quantity, item.quantity)

    # Create transaction
    def create_transaction(self, data: TransactionCreate) -> TransactionCreated:
        if data.user_id is None:
            raise ValidationError("user_id is required")
        if not data.items:
            raise ValidationError("items cannot be empty and must be an array")

        user = UserRepository.get(self.db, data.user_id)
        if user is None:
            raise NotFoundError("User not found")

        self._validate_items(data.items)

        total_quantity = 0
        total_price = Decimal("0")
        try:
            order = OrderRepository.create(self.db, user.id)

            for item in data.items:
                book = BookRepository.get_active(self.db, item.book_id, refresh=True)
                if book is None:
                    raise NotFoundError(f"Book with id {item.book_id} not found")

                total_quantity += item.quantity
                total_price += book.price * item.quantity

                OrderRepository.add_item(self.db, order.id, book.id, item.quantity)
                ok, available = BookRepository.try_decrement_stock(
                    self.db, book.id, item.quantity
                )
                if not ok:
                    # stock moved since validation, or the same book is listed twice
                    raise _insufficient_stock(book.title, available, item.quantity)

            OrderRepository.set_total_price(self.db, order.id, total_price)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info("Transaction %s created, total %s", order.id, total_price)

        created = self._load(order.id)
        return TransactionCreated(
            transaction_id=created.id,
            user=UserSummary.model_validate(created.user),
            total_quantity=total_quantity,
            total_price=float(total_price),
            items=[
                TransactionItemRead(
                    id=it.id,
                    book=TransactionBook(
                        id=it.book.id,
                        title=it.book.title,
                        writer=it.book.writer,
                        price=float(it.book.price),
                        genre=it.book.genre.name,
                    ),
                    quantity=it.quantity,
                    subtotal=float(_subtotal(it)),
                )
                for it in created.items
            ],
            created_at=created.created_at,
        )

    def _load(self, order_id: uuid.UUID) -> Order:
        order = OrderRepository.get_with_details(self.db, order_id)
        if order is None:
            raise NotFoundError("Transaction not found")
        return order

    # List all transactions, newest first
    def list_transactions(self) -> list[TransactionSummary]:
        return [
            TransactionSummary(
                id=order.id,
                user=UserSummary.model_validate(order.user),
                total_price=float(order.total_price),
                total_items=len(order.items),
                items=[
                    TransactionListItem(
                        book_title=it.book.title,
                        genre=it.book.genre.name,
                        quantity=it.quantity,
                        price=float(it.book.price),
                    )
                    for it in order.items
                ],
                created_at=order.created_at,
            )
            for order in OrderRepository.list_with_details(self.db)
        ]

    # Transaction detail; orders are never soft-deleted
    def get_transaction(self, order_id: uuid.UUID) -> TransactionDetail:
        order = self._load(order_id)
        return TransactionDetail(
            id=order.id,
            user=UserSummary.model_validate(order.user),
            total_price=float(order.total_price),
            items=[
                TransactionItemDetail(
                    id=it.id,
                    book=TransactionBookDetail(
                        id=it.book.id,
                        title=it.book.title,
                        writer=it.book.writer,
                        publisher=it.book.publisher,
                        price=float(it.book.price),
                        genre=it.book.genre.name,
                    ),
                    quantity=it.quantity,
                    subtotal=float(_subtotal(it)),
                )
                for it in order.items
            ],
            created_at=order.created_at,
            updated_at=order.updated_at,
        )

    # Aggregate figures over all orders
    def get_statistics(self) -> TransactionStatistics:
        average = OrderRepository.average_total(self.db)
        return TransactionStatistics(
            total_transactions=OrderRepository.count(self.db),
            average_transaction_value=float(average) if average is not None else 0,
            most_popular_genre=OrderRepository.genre_by_popularity(self.db, most=True),
            least_popular_genre=OrderRepository.genre_by_popularity(self.db, most=False),
        )
