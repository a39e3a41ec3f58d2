from fastapi import APIRouter, Depends
from daily_ideas.core.dependencies import get_current_user, get_data_service
from daily_ideas.modules.status.schemas import FailoverStatus, ConnectivityUpdate
from daily_ideas.resilience.facade import ResilientDataService
from typing import Dict

router = APIRouter(prefix="/status", tags=["status"])


@router.get("", response_model=FailoverStatus)
async def get_status(service: ResilientDataService = Depends(get_data_service)):
    """Whether data is currently served from the demo dataset"""
    return service.status()


@router.post("/deactivate", response_model=FailoverStatus)
async def deactivate_demo_mode(
    user_data: Dict = Depends(get_current_user),
    service: ResilientDataService = Depends(get_data_service)
):
    """Leave demo mode and talk to the server again"""
    return service.deactivate_failover()


@router.post("/connectivity", response_model=FailoverStatus)
async def report_connectivity(
    update: ConnectivityUpdate,
    user_data: Dict = Depends(get_current_user),
    service: ResilientDataService = Depends(get_data_service)
):
    return service.notify_connectivity_change(update.online)
