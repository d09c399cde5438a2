"""
Dashboard API endpoint
"""
from fastapi import APIRouter, Depends

from clientdesk.api.deps import get_queries
from clientdesk.application.queries import ClientQueries


router = APIRouter(prefix="/api/v1/dashboard", tags=["dashboard"])


@router.get("/stats")
async def dashboard_stats(queries: ClientQueries = Depends(get_queries)):
    stats = await queries.dashboard_stats()
    return stats.to_dict()
