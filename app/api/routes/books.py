from fastapi import APIRouter, Depends, Query, Request
from typing import Annotated
import uuid
from starlette.status import HTTP_201_CREATED

from app.api.deps import get_book_service
from app.core.errors import failure_boundary
from app.core.logging import get_logger
from app.schemas.book import BookCreate, BookDeleted, BookRead, BookUpdate
from app.schemas.common import Envelope
from app.services.book_service import BookService

router = APIRouter(prefix="/books", tags=["books"])

Service = Annotated[BookService, Depends(get_book_service)]


@router.post("", response_model=Envelope[BookRead], status_code=HTTP_201_CREATED)
def create_book(request: Request, data: BookCreate, service: Service):
    logger = get_logger(__name__, request)
    with failure_boundary("Failed to create book", logger):
        book = service.create_book(data)
    return Envelope[BookRead](message="Book created successfully", data=book)


@router.get("", response_model=Envelope[list[BookRead]])
def list_books(
    request: Request,
    service: Service,
    title: Annotated[str | None, Query()] = None,
    page: Annotated[int, Query()] = 1,
    limit: Annotated[int | None, Query()] = None,
):
    logger = get_logger(__name__, request)
    with failure_boundary("Failed to get books", logger):
        books, pagination = service.list_books(title=title, page=page, limit=limit)
    return Envelope[list[BookRead]](
        message="Books retrieved successfully", data=books, pagination=pagination
    )


@router.get("/{book_id}", response_model=Envelope[BookRead])
def get_book(request: Request, book_id: uuid.UUID, service: Service):
    logger = get_logger(__name__, request)
    with failure_boundary("Failed to get book detail", logger):
        book = service.get_book(book_id)
    return Envelope[BookRead](message="Book detail retrieved successfully", data=book)


@router.patch("/{book_id}", response_model=Envelope[BookRead])
def update_book(request: Request, book_id: uuid.UUID, data: BookUpdate, service: Service):
    logger = get_logger(__name__, request)
    with failure_boundary("Failed to update book", logger, not_found="Book not found"):
        book = service.update_book(book_id, data)
    return Envelope[BookRead](message="Book updated successfully", data=book)


@router.delete("/{book_id}", response_model=Envelope[BookDeleted])
def delete_book(request: Request, book_id: uuid.UUID, service: Service):
    logger = get_logger(__name__, request)
    with failure_boundary("Failed to delete book", logger, not_found="Book not found"):
        book = service.delete_book(book_id)
    return Envelope[BookDeleted](message="Book deleted successfully", data=book)
