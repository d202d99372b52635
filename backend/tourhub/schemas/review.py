from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator

from ..core.constants import MIN_REVIEW_COMMENT_LENGTH
from .base import CamelModel


class ReviewCreate(CamelModel):
    rating: int = Field(..., ge=1, le=5)
    title: Optional[str] = Field(None, max_length=200)
    comment: Optional[str] = Field(None, max_length=2000)

    @field_validator("comment")
    @classmethod
    def _clean_comment(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v2 = v.strip()
        if v2 and len(v2) < MIN_REVIEW_COMMENT_LENGTH:
            raise ValueError(f"Comment must be at least {MIN_REVIEW_COMMENT_LENGTH} characters")
        return v2 or None


class ReviewResponse(CamelModel):
    id: str
    tour_id: str
    user_id: str
    user_name: str
    rating: int
    title: Optional[str] = None
    comment: Optional[str] = None
    is_verified: bool = False
    created_at: datetime


class ReviewListResponse(CamelModel):
    reviews: List[ReviewResponse]
    total: int


class ReviewCheckResponse(CamelModel):
    has_reviewed: bool
