from pydantic import BaseModel, ConfigDict
from typing import Optional, Dict, List
from datetime import datetime

from daily_ideas.modules.ideas.schemas import IdeaResponse


class DailyCompletionResponse(BaseModel):
    id: str
    idea_id: str
    date: str
    group_id: str
    completed_by: str
    completed_at: datetime
    idea: Optional[IdeaResponse] = None

    model_config = ConfigDict(from_attributes=True)


class CalendarResponse(BaseModel):
    completions: Dict[str, List[DailyCompletionResponse]]
