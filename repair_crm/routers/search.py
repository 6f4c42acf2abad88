"""
Global search route.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from repair_crm.database import get_db
from repair_crm.schemas.search import SearchResults
from repair_crm.services.search import global_search

router = APIRouter(prefix="/search", tags=["search"])


@router.get("", response_model=SearchResults)
async def search(
    q: str = "",
    db: AsyncSession = Depends(get_db),
):
    """
    Search customers, vehicles and work orders in one go.
    """
    return SearchResults(results=await global_search(db, q))
