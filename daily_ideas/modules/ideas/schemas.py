from pydantic import BaseModel, Field, field_validator, ConfigDict
from typing import Optional, Dict, Any
from datetime import datetime

from daily_ideas.modules.users.schemas import UserResponse


class IdeaCreate(BaseModel):
    group_id: str
    text: str
    description: Optional[str] = None
    category_id: Optional[str] = None
    priority: bool = False

    @field_validator("text")
    @classmethod
    def text_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Idea text cannot be empty")
        return value


# Only these may be cleared with an explicit null
NULLABLE_IDEA_FIELDS = ("description", "category_id")


class IdeaUpdate(BaseModel):
    text: Optional[str] = None
    description: Optional[str] = None
    category_id: Optional[str] = None
    priority: Optional[bool] = None
    completed: Optional[bool] = None
    sort_order: Optional[int] = None

    @field_validator("text")
    @classmethod
    def text_not_blank(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        value = value.strip()
        if not value:
            raise ValueError("Idea text cannot be empty")
        return value

    def to_patch(self, now: datetime) -> Dict[str, Any]:
        """
        Fields to write, keeping completed and completed_at in step:
        completing stamps the time, reopening clears it. Nulls are ignored
        except for the fields in NULLABLE_IDEA_FIELDS.
        """
        patch = {
            key: value for key, value in self.model_dump(exclude_unset=True).items()
            if value is not None or key in NULLABLE_IDEA_FIELDS
        }
        if "completed" in patch:
            if patch["completed"]:
                patch["completed_at"] = now
            else:
                patch["completed"] = False
                patch["completed_at"] = None
        return patch


class IdeaResponse(BaseModel):
    id: str
    text: str
    description: Optional[str] = None
    category_id: Optional[str] = None
    priority: bool = False
    completed: bool = False
    created_at: datetime
    completed_at: Optional[datetime] = None
    sort_order: int
    group_id: str
    created_by: str
    created_by_user: Optional[UserResponse] = None

    model_config = ConfigDict(from_attributes=True)


class IdeaImportRequest(BaseModel):
    group_id: str
    text: str
    category_id: Optional[str] = None


class IdeaImportResponse(BaseModel):
    imported: int


class CompleteIdeaRequest(BaseModel):
    date: str = Field(pattern=r"^\d{4}-\d{2}-\d{2}$")
