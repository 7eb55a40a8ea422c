"""Generation Configuration Value Object

Validated generation parameters attached to a job. Jobs persist the JSON
dump; the estimator and the providers read it back through this model.
"""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class ArticleLength(str, Enum):
    """Length tiers (each maps to a base credit cost)"""
    SHORT = "short"
    MEDIUM = "medium"
    LONG = "long"


class PointOfView(str, Enum):
    FIRST = "first"
    SECOND = "second"
    THIRD = "third"


class GenerationConfig(BaseModel):
    """
    Generation parameters for one article

    Unknown fields are rejected so that a malformed configuration fails
    before any credits are reserved.
    """

    model_config = ConfigDict(extra="forbid", use_enum_values=False)

    length: ArticleLength = Field(default=ArticleLength.MEDIUM, description="Length tier")
    style: str = Field(default="informative", min_length=1, max_length=50, description="Article style (informative, guide, listicle...)")
    tone: str = Field(default="informative", min_length=1, max_length=50, description="Writing tone")
    language: str = Field(default="English", min_length=1, max_length=50)
    point_of_view: PointOfView = Field(default=PointOfView.THIRD)
    bold_text: bool = Field(default=True, description="Use markdown bold for key phrases")
    takeaways: int = Field(default=0, ge=0, le=20, description="Number of key takeaways")
    faq_items: int = Field(default=0, ge=0, le=20, description="Number of FAQ items")
    generate_images: bool = Field(default=False)
    image_count: int = Field(default=0, ge=0, le=10)
    photo_style: Optional[str] = Field(default=None, max_length=50)
    seo_fix: bool = Field(default=False, description="Ask for SEO-friendly keyword density")
    ai_model: str = Field(default="gpt4", min_length=1, max_length=50, description="Provider model identifier")

    @property
    def requested_images(self) -> int:
        return self.image_count if self.generate_images else 0
