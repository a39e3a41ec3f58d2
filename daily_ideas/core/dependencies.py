"""
Request dependencies: the shared data service and the current user.
"""

from fastapi import Depends, HTTPException, Request, Security, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from typing import Optional
import logging

from daily_ideas.database.supabase_client import get_supabase
from daily_ideas.modules.auth.service import AuthService
from daily_ideas.modules.demo.seed import DEMO_USER_ID
from daily_ideas.resilience.facade import ResilientDataService

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def get_data_service(request: Request) -> ResilientDataService:
    """The service instance created by the application root at startup."""
    return request.app.state.data_service


def get_auth_service() -> AuthService:
    return AuthService(get_supabase())


def demo_user_data() -> dict:
    return {
        "id": DEMO_USER_ID,
        "email": "demo@ideas.app",
        "user_metadata": {"name": "Demo User"},
        "app_metadata": {},
    }


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security),
    service: ResilientDataService = Depends(get_data_service),
) -> dict:
    """Demo mode acts as the demo user; otherwise the bearer token is verified with Supabase Auth."""
    if service.is_demo_mode():
        return demo_user_data()
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    try:
        return get_auth_service().get_current_user(credentials.credentials)
    except HTTPException:
        raise
    except Exception as e:
        kind = service.record_remote_failure(e, "authenticate")
        if service.is_demo_mode():
            return demo_user_data()
        logger.error(f"Authentication backend unavailable ({kind.value}): {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Authentication service unavailable",
        )
