from pydantic import BaseModel, Field, ConfigDict
from typing import Optional
from datetime import datetime


class CategoryCreate(BaseModel):
    group_id: str
    name: str = Field(min_length=1)
    color: str = "#3B82F6"
    icon: Optional[str] = None


class CategoryUpdate(BaseModel):
    name: Optional[str] = None
    color: Optional[str] = None
    icon: Optional[str] = None
    sort_order: Optional[int] = None


class CategoryResponse(BaseModel):
    id: str
    name: str
    color: str
    icon: Optional[str] = None
    sort_order: int
    is_default: bool = False
    group_id: str
    created_by: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
