from collections import defaultdict
from datetime import date, timedelta
from supabase import Client
from daily_ideas.modules.completions.schemas import DailyCompletionResponse
from daily_ideas.modules.ideas.schemas import IdeaResponse
from typing import List, Optional, Dict


def month_bounds(month: str) -> tuple:
    """First and last day of a "YYYY-MM" month, e.g. ("2024-05-01", "2024-05-31")"""
    year, mon = (int(part) for part in month.split("-", 1))
    next_year, next_mon = (year + 1, 1) if mon == 12 else (year, mon + 1)
    last_day = date(next_year, next_mon, 1) - timedelta(days=1)
    return f"{year:04d}-{mon:02d}-01", last_day.isoformat()


def group_by_date(completions: List[DailyCompletionResponse]) -> Dict[str, List[DailyCompletionResponse]]:
    by_date: Dict[str, List[DailyCompletionResponse]] = defaultdict(list)
    for completion in completions:
        by_date[completion.date].append(completion)
    return dict(by_date)


class CompletionService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _with_ideas(self, rows: List[dict]) -> List[DailyCompletionResponse]:
        idea_ids = sorted({row["idea_id"] for row in rows})
        ideas = {}
        if idea_ids:
            ideas_result = self.supabase.table("ideas")\
                .select("*")\
                .in_("id", idea_ids)\
                .execute()
            ideas = {row["id"]: IdeaResponse(**row) for row in (ideas_result.data or [])}
        return [DailyCompletionResponse(**row, idea=ideas.get(row["idea_id"])) for row in rows]

    def get_daily_completions(self, group_id: str, date: str) -> List[DailyCompletionResponse]:
        result = self.supabase.table("completions")\
            .select("*")\
            .eq("group_id", group_id)\
            .eq("date", date)\
            .order("completed_at")\
            .execute()
        return self._with_ideas(result.data or [])

    def get_calendar_data(self, group_id: str, month: Optional[str] = None) -> Dict[str, List[DailyCompletionResponse]]:
        """Completions of a group keyed by day, optionally limited to one "YYYY-MM" month"""
        query = self.supabase.table("completions")\
            .select("*")\
            .eq("group_id", group_id)
        if month:
            start, end = month_bounds(month)
            query = query.gte("date", start).lte("date", end)
        result = query.order("date").execute()
        return group_by_date(self._with_ideas(result.data or []))
