"""Credit Account Repository Interface

Defines the contract for credit account persistence operations.
Every balance mutation is a single atomic conditional UPDATE so that
concurrent reservations cannot both succeed against the same headroom.
"""

from abc import ABC, abstractmethod
from typing import Optional
from src.domain.credit_account import CreditAccount


class CreditAccountRepository(ABC):
    """Repository interface for CreditAccount persistence"""

    @abstractmethod
    async def get_by_owner_id(self, owner_id: str, for_update: bool = False) -> Optional[CreditAccount]:
        """
        Retrieve account by owner ID (always re-reads the row)

        Args:
            owner_id: Owner identifier
            for_update: If True, lock the row with SELECT FOR UPDATE

        Returns:
            CreditAccount if found, None otherwise
        """
        pass

    @abstractmethod
    async def get_all(self) -> list[CreditAccount]:
        pass

    @abstractmethod
    async def create(self, account: CreditAccount) -> CreditAccount:
        pass

    @abstractmethod
    async def try_reserve(self, owner_id: str, amount: int) -> bool:
        """
        Atomically increment reserved if balance - reserved >= amount

        Returns:
            True if the reservation was accepted, False otherwise (no side effects)
        """
        pass

    @abstractmethod
    async def release_reservation(self, owner_id: str, amount: int) -> bool:
        """
        Atomically decrement reserved by amount (no balance change)

        Returns:
            True if released, False if the account holds less than amount
        """
        pass

    @abstractmethod
    async def apply_settlement(self, account_id: int, release: int, balance_delta: int) -> bool:
        """
        Atomically release a reservation and apply a signed balance change

        Returns:
            True if applied, False if the row no longer satisfies the constraints
        """
        pass

    @abstractmethod
    async def add_to_balance(self, account_id: int, amount: int) -> None:
        pass
