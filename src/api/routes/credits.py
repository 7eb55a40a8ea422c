"""Credits API Routes"""

from fastapi import APIRouter, Depends, Query, status
from sqlmodel.ext.asyncio.session import AsyncSession

from src.api.error import ClientError
from src.api.identity import get_owner_id
from src.api.schemas.generation_request import AllocateCreditsRequestSchema
from src.adapter.repositories import SqlAlchemyCreditAccountRepository, SqlAlchemyLedgerEntryRepository
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.use_cases.credits import AllocateCredits, GetBalance, ListLedgerEntries
from src.app.use_cases.credits.dtos import (
    AllocateCreditsCommandDTO,
    AllocateCreditsResponseDTO,
    BalanceResponseDTO,
    ListLedgerEntriesResponseDTO,
)
from src.depends import get_session, build_credit_ledger

router = APIRouter(prefix="/credits", tags=["Credits"])


@router.get("/balance", response_model=BalanceResponseDTO)
async def get_balance(
    owner_id: str = Depends(get_owner_id),
    session: AsyncSession = Depends(get_session),
):
    """Balance, credits reserved by in-flight jobs, and available credits"""
    result = await GetBalance(SqlAlchemyCreditAccountRepository(session)).execute(owner_id)

    if result.is_err():
        raise ClientError(result.error)
    return result.value


@router.get("/entries", response_model=ListLedgerEntriesResponseDTO)
async def list_entries(
    limit: int = Query(default=20, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    owner_id: str = Depends(get_owner_id),
    session: AsyncSession = Depends(get_session),
):
    result = await ListLedgerEntries(SqlAlchemyLedgerEntryRepository(session)).execute(
        owner_id, limit=limit, offset=offset
    )
    return result.value


@router.post("/allocations", response_model=AllocateCreditsResponseDTO, status_code=status.HTTP_201_CREATED)
async def allocate_credits(
    request: AllocateCreditsRequestSchema,
    owner_id: str = Depends(get_owner_id),
    session: AsyncSession = Depends(get_session),
):
    """
    Add credits to the owner's account (purchase, renewal).

    Repeating a request with the same idempotency_key returns the original entry.
    """
    use_case = AllocateCredits(
        SqlAlchemyUnitOfWork(session),
        build_credit_ledger(session),
        SqlAlchemyCreditAccountRepository(session),
    )
    result = await use_case.execute(
        AllocateCreditsCommandDTO(
            owner_id=owner_id,
            amount=request.amount,
            kind=request.kind,
            description=request.description,
            idempotency_key=request.idempotency_key,
            metadata=request.metadata,
        )
    )

    if result.is_err():
        raise ClientError(result.error)
    return result.value
