"""Generate Title Ideas Use Case

Synchronous title brainstorming, charged a fixed amount.
"""

import logging
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.content_provider import ProviderError
from src.app.services.provider_registry import ProviderRegistry
from src.app.use_cases.credits.credit_ledger import CreditLedger
from src.domain.base import generate_uuid
from src.domain.ledger_entry import Feature
from .dtos import TitleIdeasCommandDTO, TitleIdeasResponseDTO
from .estimate_cost import TITLE_IDEAS_CREDITS

logger = logging.getLogger(__name__)


class GenerateTitleIdeas:
    """
    Use Case: Title ideas for a topic

    Business Rules:
    1. Costs TITLE_IDEAS_CREDITS regardless of count
    2. Credits are held while the provider runs and charged only on success
    3. Provider failure releases the hold (TITLE_IDEAS_FAILED)
    """

    def __init__(
        self,
        uow: UnitOfWork,
        ledger: CreditLedger,
        registry: ProviderRegistry,
    ):
        self.uow = uow
        self.ledger = ledger
        self.registry = registry

    async def execute(self, command: TitleIdeasCommandDTO) -> Result[TitleIdeasResponseDTO]:
        reference_id = f"title-ideas:{generate_uuid()}"
        try:
            provider = self.registry.get(command.ai_model or self.registry.default)

            # Step 1: Hold credits
            reservation = await self.ledger.reserve(command.owner_id, TITLE_IDEAS_CREDITS)
            if reservation.is_err():
                await self.uow.rollback()
                return reservation
            await self.uow.commit()

            # Step 2: Call provider
            try:
                titles = await provider.generate_title_ideas(command.topic, command.count)
            except ProviderError as e:
                logger.warning(f"Title ideas failed for owner {command.owner_id}: {e}")
                await self.ledger.refund_reservation(
                    command.owner_id, TITLE_IDEAS_CREDITS, "Title ideas generation failed", reference_id
                )
                await self.uow.commit()
                return Return.err(
                    Error(
                        code="TITLE_IDEAS_FAILED",
                        message="Failed to generate title ideas",
                        reason=str(e),
                    )
                )

            # Step 3: Charge
            settlement = await self.ledger.settle(
                owner_id=command.owner_id,
                reserved_amount=TITLE_IDEAS_CREDITS,
                actual_amount=TITLE_IDEAS_CREDITS,
                feature=Feature.TITLE_IDEAS,
                description=f"Title ideas: {command.topic[:200]}",
                reference_id=reference_id,
                metadata={"count": command.count},
            )
            if settlement.is_err():
                await self.uow.rollback()
                return settlement
            await self.uow.commit()

            return Return.ok(TitleIdeasResponseDTO(titles=titles[: command.count], credits_used=TITLE_IDEAS_CREDITS))

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="TITLE_IDEAS_FAILED",
                    message="Failed to generate title ideas",
                    reason=str(e),
                )
            )
