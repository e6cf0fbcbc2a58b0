from fastapi import APIRouter, Depends, Request
from typing import Annotated
from starlette.status import HTTP_201_CREATED

from app.api.deps import CurrentUser, get_auth_service
from app.core.errors import failure_boundary
from app.core.logging import get_logger
from app.schemas.common import Envelope
from app.schemas.user import TokenRead, UserLogin, UserRegister, UserSummary
from app.services.auth_service import AuthService

router = APIRouter(prefix="/auth", tags=["auth"])

Service = Annotated[AuthService, Depends(get_auth_service)]


@router.post("/register", response_model=Envelope[UserSummary], status_code=HTTP_201_CREATED)
def register(request: Request, data: UserRegister, service: Service):
    logger = get_logger(__name__, request)
    with failure_boundary("Failed to register user", logger):
        user = service.register(data)
    return Envelope[UserSummary](message="User registered successfully", data=user)


@router.post("/login", response_model=Envelope[TokenRead])
def login(request: Request, data: UserLogin, service: Service):
    logger = get_logger(__name__, request)
    with failure_boundary("Failed to log in", logger):
        token = service.login(data)
    return Envelope[TokenRead](message="Login successful", data=token)


@router.get("/me", response_model=Envelope[UserSummary])
def me(user: CurrentUser):
    return Envelope[UserSummary](
        message="Current user retrieved successfully", data=UserSummary.model_validate(user)
    )
