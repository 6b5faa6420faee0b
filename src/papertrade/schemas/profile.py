"""Profile and onboarding schemas."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from papertrade.core.constants import ScoringConstants


class ProfileCreate(BaseModel):
    """Schema for opening a paper-trading account."""

    user_id: str = Field(..., min_length=1, max_length=64)
    display_name: str | None = Field(None, max_length=255)


class AssessmentSubmit(BaseModel):
    """Answers to the onboarding confidence assessment.

    Only ``confidence_level`` feeds the score; the other answers are kept
    for the UI's coaching copy.
    """

    confidence_level: int = Field(
        ..., ge=ScoringConstants.ASSESSMENT_MIN, le=ScoringConstants.ASSESSMENT_MAX
    )
    main_worry: str | None = None
    investment_goal: str | None = None


class ProfileResponse(BaseModel):
    """Profile returned by the API."""

    model_config = ConfigDict(from_attributes=True)

    user_id: str
    display_name: str | None = None
    confidence_score: Decimal | None = None
    created_at: datetime | None = None
    cash: Decimal | None = None


class LessonCompletionResponse(BaseModel):
    """Completed lesson returned by the API."""

    model_config = ConfigDict(from_attributes=True)

    lesson_slug: str
    completed_at: datetime
    confidence_score: Decimal | None = None
