from fastapi import APIRouter, Depends, Request
from typing import Annotated
import uuid
from starlette.status import HTTP_201_CREATED

from app.api.deps import get_genre_service
from app.core.errors import failure_boundary
from app.core.logging import get_logger
from app.schemas.common import Envelope
from app.schemas.genre import GenreDeleted, GenreRead, GenreWrite
from app.services.genre_service import GenreService

router = APIRouter(prefix="/genre", tags=["genres"])

Service = Annotated[GenreService, Depends(get_genre_service)]


@router.post("", response_model=Envelope[GenreRead], status_code=HTTP_201_CREATED)
def create_genre(request: Request, data: GenreWrite, service: Service):
    logger = get_logger(__name__, request)
    with failure_boundary("Failed to create genre", logger):
        genre = service.create_genre(data.name)
    logger.info("Genre created")
    return Envelope[GenreRead](message="Genre created successfully", data=genre)


@router.get("", response_model=Envelope[list[GenreRead]])
def list_genres(request: Request, service: Service):
    logger = get_logger(__name__, request)
    with failure_boundary("Failed to get genres", logger):
        genres = service.list_genres()
    return Envelope[list[GenreRead]](
        message="Genres retrieved successfully", count=len(genres), data=genres
    )


@router.get("/{genre_id}", response_model=Envelope[GenreRead])
def get_genre(request: Request, genre_id: uuid.UUID, service: Service):
    logger = get_logger(__name__, request)
    with failure_boundary("Failed to get genre detail", logger):
        genre = service.get_genre(genre_id)
    return Envelope[GenreRead](message="Genre detail retrieved successfully", data=genre)


@router.patch("/{genre_id}", response_model=Envelope[GenreRead])
def update_genre(request: Request, genre_id: uuid.UUID, data: GenreWrite, service: Service):
    logger = get_logger(__name__, request)
    with failure_boundary("Failed to update genre", logger, not_found="Genre not found"):
        genre = service.update_genre(genre_id, data.name)
    return Envelope[GenreRead](message="Genre updated successfully", data=genre)


@router.delete("/{genre_id}", response_model=Envelope[GenreDeleted])
def delete_genre(request: Request, genre_id: uuid.UUID, service: Service):
    logger = get_logger(__name__, request)
    with failure_boundary("Failed to delete genre", logger, not_found="Genre not found"):
        genre = service.delete_genre(genre_id)
    return Envelope[GenreDeleted](message="Genre deleted successfully", data=genre)
