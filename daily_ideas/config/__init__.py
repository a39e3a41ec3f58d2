from daily_ideas.config.settings import settings, Settings

__all__ = ["settings", "Settings"]
