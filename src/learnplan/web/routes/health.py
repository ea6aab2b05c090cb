"""Health check endpoint."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from learnplan import __version__
from learnplan.config import AppConfig
from learnplan.store.base import ProfileStore
from learnplan.web.dependencies import get_config, get_store
from learnplan.web.schemas import HealthResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(
    config: AppConfig = Depends(get_config),
    store: ProfileStore = Depends(get_store),
) -> HealthResponse:
    """Check API health status and which external services are configured."""
    return HealthResponse(
        status="ok",
        version=__version__,
        timestamp=datetime.now(timezone.utc).isoformat(),
        llm_configured=config.llm.configured,
        search_configured=config.search.configured,
        store_backend=store.backend,
        mock_mode=config.mock_mode,
    )
