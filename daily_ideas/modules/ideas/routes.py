from fastapi import APIRouter, Depends, HTTPException
from daily_ideas.core.dependencies import get_current_user, get_data_service
from daily_ideas.modules.ideas.schemas import (
    IdeaCreate, IdeaUpdate, IdeaResponse, IdeaImportRequest, IdeaImportResponse, CompleteIdeaRequest
)
from daily_ideas.resilience.facade import ResilientDataService
from typing import List, Dict

router = APIRouter(tags=["ideas"])


@router.get("/groups/{group_id}/ideas", response_model=List[IdeaResponse])
async def list_ideas(
    group_id: str,
    pending: bool = False,
    user_data: Dict = Depends(get_current_user),
    service: ResilientDataService = Depends(get_data_service)
):
    """List a group's ideas in creation order (only open ones with pending=true)"""
    if pending:
        return await service.get_pending_ideas(group_id)
    return await service.get_group_ideas(group_id)


@router.post("/ideas", response_model=IdeaResponse, status_code=201)
async def create_idea(
    idea_data: IdeaCreate,
    user_data: Dict = Depends(get_current_user),
    service: ResilientDataService = Depends(get_data_service)
):
    return await service.create_idea(idea_data, user_data["id"])


@router.post("/ideas/import", response_model=IdeaImportResponse)
async def import_ideas(
    import_data: IdeaImportRequest,
    user_data: Dict = Depends(get_current_user),
    service: ResilientDataService = Depends(get_data_service)
):
    """Create one idea per line of pasted text"""
    imported = await service.import_ideas(
        user_data["id"], import_data.group_id, import_data.text, import_data.category_id
    )
    return IdeaImportResponse(imported=imported)


@router.put("/ideas/{idea_id}", response_model=IdeaResponse)
async def update_idea(
    idea_id: str,
    idea_data: IdeaUpdate,
    user_data: Dict = Depends(get_current_user),
    service: ResilientDataService = Depends(get_data_service)
):
    idea = await service.update_idea(idea_id, idea_data)
    if idea is None:
        raise HTTPException(status_code=404, detail="Idea not found")
    return idea


@router.delete("/ideas/{idea_id}", status_code=204)
async def delete_idea(
    idea_id: str,
    user_data: Dict = Depends(get_current_user),
    service: ResilientDataService = Depends(get_data_service)
):
    if not await service.delete_idea(idea_id):
        raise HTTPException(status_code=404, detail="Idea not found")
    return None


@router.post("/ideas/{idea_id}/complete", response_model=IdeaResponse)
async def complete_idea(
    idea_id: str,
    completion: CompleteIdeaRequest,
    user_data: Dict = Depends(get_current_user),
    service: ResilientDataService = Depends(get_data_service)
):
    """Mark the idea as the one completed on the given day"""
    idea = await service.complete_idea(user_data["id"], idea_id, completion.date)
    if idea is None:
        raise HTTPException(status_code=404, detail="Idea not found")
    return idea
