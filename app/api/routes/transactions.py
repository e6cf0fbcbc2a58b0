from fastapi import APIRouter, Depends, Request
from typing import Annotated
import uuid
from starlette.status import HTTP_201_CREATED

from app.api.deps import CurrentUser, get_transaction_service
from app.core.errors import failure_boundary
from app.core.logging import get_logger
from app.schemas.common import Envelope
from app.schemas.order import (
    TransactionCreate,
    TransactionCreated,
    TransactionDetail,
    TransactionStatistics,
    TransactionSummary,
)
from app.services.transaction_service import TransactionService

router = APIRouter(prefix="/transactions", tags=["transactions"])

Service = Annotated[TransactionService, Depends(get_transaction_service)]


# Declared before /{transaction_id} so "statistics" is not read as an id
@router.get("/statistics", response_model=Envelope[TransactionStatistics])
def get_transaction_statistics(request: Request, _user: CurrentUser, service: Service):
    logger = get_logger(__name__, request)
    with failure_boundary("Failed to get transaction statistics", logger):
        stats = service.get_statistics()
    return Envelope[TransactionStatistics](
        message="Transaction statistics retrieved successfully", data=stats
    )


@router.post("", response_model=Envelope[TransactionCreated], status_code=HTTP_201_CREATED)
def create_transaction(
    request: Request, data: TransactionCreate, _user: CurrentUser, service: Service
):
    logger = get_logger(__name__, request)
    with failure_boundary("Failed to create transaction", logger):
        created = service.create_transaction(data)
    return Envelope[TransactionCreated](message="Transaction created successfully", data=created)


@router.get("", response_model=Envelope[list[TransactionSummary]])
def list_transactions(request: Request, _user: CurrentUser, service: Service):
    logger = get_logger(__name__, request)
    with failure_boundary("Failed to get transactions", logger):
        transactions = service.list_transactions()
    return Envelope[list[TransactionSummary]](
        message="Transactions retrieved successfully",
        count=len(transactions),
        data=transactions,
    )


@router.get("/{transaction_id}", response_model=Envelope[TransactionDetail])
def get_transaction(
    request: Request, transaction_id: uuid.UUID, _user: CurrentUser, service: Service
):
    logger = get_logger(__name__, request)
    with failure_boundary("Failed to get transaction detail", logger):
        transaction = service.get_transaction(transaction_id)
    return Envelope[TransactionDetail](
        message="Transaction detail retrieved successfully", data=transaction
    )
