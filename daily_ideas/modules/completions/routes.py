from fastapi import APIRouter, Depends, Path, Query
from daily_ideas.core.dependencies import get_current_user, get_data_service
from daily_ideas.modules.completions.schemas import DailyCompletionResponse, CalendarResponse
from daily_ideas.resilience.facade import ResilientDataService
from typing import List, Dict, Optional

router = APIRouter(prefix="/groups/{group_id}", tags=["completions"])


@router.get("/completions/{date}", response_model=List[DailyCompletionResponse])
async def list_daily_completions(
    group_id: str,
    date: str = Path(pattern=r"^\d{4}-\d{2}-\d{2}$"),
    user_data: Dict = Depends(get_current_user),
    service: ResilientDataService = Depends(get_data_service)
):
    return await service.get_daily_completions(group_id, date)


@router.get("/calendar", response_model=CalendarResponse)
async def get_calendar(
    group_id: str,
    month: Optional[str] = Query(default=None, pattern=r"^\d{4}-(0[1-9]|1[0-2])$"),
    user_data: Dict = Depends(get_current_user),
    service: ResilientDataService = Depends(get_data_service)
):
    """Completed ideas keyed by day, optionally for a single YYYY-MM month"""
    return CalendarResponse(completions=await service.get_calendar_data(group_id, month))
