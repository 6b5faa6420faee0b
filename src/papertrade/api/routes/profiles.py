"""Profile and onboarding endpoints."""

import logging

from fastapi import APIRouter, status

from papertrade.core.deps import Store
from papertrade.schemas.profile import AssessmentSubmit, ProfileCreate, ProfileResponse
from papertrade.services import account_service

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("", response_model=ProfileResponse, status_code=status.HTTP_201_CREATED)
async def create_profile(profile_in: ProfileCreate, store: Store) -> ProfileResponse:
    """
    Open a paper-trading account.

    Creates the profile and a portfolio funded with the starting cash.

    Raises:
        ConflictError: 409 if the user already has an account
    """
    return await account_service.open_account(store, profile_in.user_id, profile_in.display_name)


@router.get("/{user_id}", response_model=ProfileResponse)
async def get_profile(user_id: str, store: Store) -> ProfileResponse:
    """Get a profile with its current cash balance."""
    return await account_service.get_profile_response(store, user_id)


@router.post("/{user_id}/assessment", response_model=ProfileResponse)
async def submit_assessment(
    user_id: str,
    assessment: AssessmentSubmit,
    store: Store,
) -> ProfileResponse:
    """
    Submit the onboarding assessment.

    The self-rated confidence level seeds the confidence score.

    Raises:
        NotFoundError: 404 if the profile does not exist
    """
    return await account_service.complete_assessment(
        store, user_id, assessment.confidence_level
    )
