"""Progress page endpoint."""

from fastapi import APIRouter

from papertrade.core.deps import Store
from papertrade.schemas.progress import ProgressReport
from papertrade.services.progress_service import load_progress

router = APIRouter()


@router.get("/progress", response_model=ProgressReport)
async def get_progress(user_id: str, store: Store) -> ProgressReport:
    """Get trading statistics, earned badges and the score history."""
    return await load_progress(store, user_id)
