from fastapi import APIRouter, Depends, HTTPException
from daily_ideas.core.dependencies import get_current_user, get_data_service
from daily_ideas.modules.categories.schemas import CategoryCreate, CategoryUpdate, CategoryResponse
from daily_ideas.resilience.facade import ResilientDataService
from typing import List, Dict

router = APIRouter(tags=["categories"])


@router.get("/groups/{group_id}/categories", response_model=List[CategoryResponse])
async def list_categories(
    group_id: str,
    user_data: Dict = Depends(get_current_user),
    service: ResilientDataService = Depends(get_data_service)
):
    return await service.get_group_categories(group_id)


@router.post("/categories", response_model=CategoryResponse, status_code=201)
async def create_category(
    category_data: CategoryCreate,
    user_data: Dict = Depends(get_current_user),
    service: ResilientDataService = Depends(get_data_service)
):
    return await service.create_category(category_data, user_data["id"])


@router.put("/categories/{category_id}", response_model=CategoryResponse)
async def update_category(
    category_id: str,
    category_data: CategoryUpdate,
    user_data: Dict = Depends(get_current_user),
    service: ResilientDataService = Depends(get_data_service)
):
    category = await service.update_category(category_id, category_data)
    if category is None:
        raise HTTPException(status_code=404, detail="Category not found")
    return category


@router.delete("/categories/{category_id}", status_code=204)
async def delete_category(
    category_id: str,
    user_data: Dict = Depends(get_current_user),
    service: ResilientDataService = Depends(get_data_service)
):
    """Delete a category; its ideas are kept without a category"""
    if not await service.delete_category(category_id):
        raise HTTPException(status_code=404, detail="Category not found")
    return None
