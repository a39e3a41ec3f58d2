from pydantic import BaseModel
from typing import Optional
from datetime import datetime

from daily_ideas.modules.groups.schemas import GroupResponse


class FailoverStatus(BaseModel):
    demo_mode: bool
    remote_marked_unavailable: bool
    online: bool
    error_count: int
    error_threshold: int
    activated_at: Optional[datetime] = None
    selected_group: Optional[GroupResponse] = None


class ConnectivityUpdate(BaseModel):
    online: bool
