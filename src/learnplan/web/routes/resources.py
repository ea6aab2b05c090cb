"""Resource and strategy search endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Query, status

from learnplan.search.client import ResourceSearchClient
from learnplan.web.dependencies import get_search_client
from learnplan.web.schemas import ApiResponse

router = APIRouter(tags=["resources"])


@router.get("/resources/{student_id}", response_model=ApiResponse)
def get_resources(
    student_id: str,
    needs: str | None = Query(default=None),
    search: ResourceSearchClient = Depends(get_search_client),
) -> ApiResponse:
    """Search educational resources for a student's needs."""
    if not needs or not needs.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Student needs are required",
        )
    resources = search.search_resources(needs.strip())
    return ApiResponse(data=[r.to_dict() for r in resources])


@router.get("/strategies/{challenge}", response_model=ApiResponse)
def get_strategies(
    challenge: str,
    search: ResourceSearchClient = Depends(get_search_client),
) -> ApiResponse:
    """Search teaching strategies for a learning challenge."""
    strategies = search.search_strategies(challenge)
    return ApiResponse(data=[s.to_dict() for s in strategies])
