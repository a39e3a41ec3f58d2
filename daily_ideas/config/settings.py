from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List
from urllib.parse import urlparse


class Settings(BaseSettings):
    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""

    # Failover
    failover_error_threshold: int = 3
    failover_reset_on_success: bool = False
    failover_single_strike_reads: bool = True  # idea/category reads fail over on the first network error
    fallback_latency_ms: int = 0
    state_dir: str = ".daily_ideas"
    connectivity_probe_timeout: float = 2.0

    # App
    app_name: str = "daily-ideas"
    debug: bool = False
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"
    cors_origins: str = "http://localhost:3000,http://localhost:5173,http://127.0.0.1:3000,http://127.0.0.1:5173"
    rate_limit: str = "100/minute"  # slowapi format, e.g. "100/minute"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def get_cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    def get_supabase_host(self) -> Optional[str]:
        """Hostname of the Supabase project, None when not configured."""
        if not self.supabase_url:
            return None
        return urlparse(self.supabase_url).hostname

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",  # No prefix needed
        extra="ignore"
    )


settings = Settings()
