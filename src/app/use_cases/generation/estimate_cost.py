"""
Estimate Cost

Pure cost function used for reservations and for the estimate preview.
Every amount is an integer number of credits.
"""
from pydantic import ValidationError
from libs.result import Result, Return, Error
from src.domain.generation_config import ArticleLength, GenerationConfig
from .dtos import EstimateCommandDTO, EstimateResponseDTO


LENGTH_BASE_CREDITS: dict[ArticleLength, int] = {
    ArticleLength.SHORT: 800,
    ArticleLength.MEDIUM: 1500,
    ArticleLength.LONG: 2500,
}

IMAGE_CREDITS = 50
TAKEAWAY_CREDITS = 10
FAQ_CREDITS = 20
BUFFER_PERCENT = 10

TITLE_IDEAS_CREDITS = 50
MINUTES_PER_TITLE = 3


def validate_configuration(configuration) -> Result[GenerationConfig]:
    """Parse raw configuration, mapping validation failures to INVALID_CONFIGURATION"""
    if isinstance(configuration, GenerationConfig):
        return Return.ok(configuration)
    try:
        return Return.ok(GenerationConfig.model_validate(configuration or {}))
    except ValidationError as e:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
        return Return.err(
            Error(
                code="INVALID_CONFIGURATION",
                message=f"Invalid generation configuration: {fields}",
                reason=str(e),
            )
        )


def estimate_breakdown(config: GenerationConfig) -> dict[str, int]:
    """Cost components for one article; the buffer is 10% of the subtotal rounded up"""
    base = LENGTH_BASE_CREDITS[config.length]
    images = IMAGE_CREDITS * config.requested_images
    takeaways = TAKEAWAY_CREDITS * config.takeaways
    faq = FAQ_CREDITS * config.faq_items
    subtotal = base + images + takeaways + faq
    buffer = (subtotal * BUFFER_PERCENT + 99) // 100
    return {
        "base": base,
        "images": images,
        "takeaways": takeaways,
        "faq": faq,
        "buffer": buffer,
    }


def estimate_credits(config: GenerationConfig) -> int:
    return sum(estimate_breakdown(config).values())


def estimate_bulk_credits(config: GenerationConfig, title_count: int) -> int:
    return estimate_credits(config) * title_count


def estimate_time_minutes(title_count: int) -> int:
    return title_count * MINUTES_PER_TITLE


def calculate_actual_credits(word_count: int, image_count: int) -> int:
    """Settled cost of one generated article"""
    return word_count + IMAGE_CREDITS * image_count


class EstimateCost:
    """
    Use case: Estimate preview

    Read-only; nothing is reserved.
    """

    async def execute(self, command: EstimateCommandDTO) -> Result[EstimateResponseDTO]:
        parsed = validate_configuration(command.configuration)
        if parsed.is_err():
            return parsed

        config = parsed.value
        breakdown = estimate_breakdown(config)
        per_item = sum(breakdown.values())

        return Return.ok(
            EstimateResponseDTO(
                estimated_credits=per_item * command.item_count,
                per_item_credits=per_item,
                item_count=command.item_count,
                breakdown=breakdown,
            )
        )
