import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

from daily_ideas.config import settings
from daily_ideas.core.errors import DomainError
from daily_ideas.modules.groups import routes as groups_routes
from daily_ideas.modules.ideas import routes as ideas_routes
from daily_ideas.modules.categories import routes as categories_routes
from daily_ideas.modules.completions import routes as completions_routes
from daily_ideas.modules.status import routes as status_routes
from daily_ideas.resilience.facade import ResilientDataService

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address, default_limits=[settings.rate_limit])
app = FastAPI(
    title=settings.app_name,
    debug=settings.debug,
    redirect_slashes=False,
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception: %s", exc)
    if settings.is_production:
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})
    return JSONResponse(status_code=500, content={"detail": str(exc)})


class SecurityHeadersMiddleware:
    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        async def send_with_headers(message):
            if message["type"] == "http.response.start":
                message.setdefault("headers", [])
                message["headers"].extend([
                    (b"X-Content-Type-Options", b"nosniff"),
                    (b"X-Frame-Options", b"DENY"),
                ])
            await send(message)

        await self.app(scope, receive, send_with_headers)


app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins_list(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(groups_routes.router, prefix="/api/v1")
app.include_router(ideas_routes.router, prefix="/api/v1")
app.include_router(categories_routes.router, prefix="/api/v1")
app.include_router(completions_routes.router, prefix="/api/v1")
app.include_router(status_routes.router, prefix="/api/v1")


def log_demo_mode_entered():
    logger.warning("Demo mode is on, data is served from the offline dataset")


@app.on_event("startup")
async def startup_event():
    logger.info("Application startup")
    service = ResilientDataService.from_settings(settings)
    service.subscribe(log_demo_mode_entered)
    demo_mode = await service.bootstrap()
    app.state.data_service = service
    logger.info(f"Data service ready (demo mode: {demo_mode})")


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Application shutdown")


@app.get("/health")
@limiter.exempt
async def health():
    return {"status": "healthy"}


@app.get("/ready")
@limiter.exempt
async def ready(request: Request):
    """Readiness probe: reports which data source requests are served from."""
    service = getattr(request.app.state, "data_service", None)
    if service is None:
        return JSONResponse(status_code=503, content={"status": "starting"})
    return {"status": "ready", "demo_mode": service.is_demo_mode()}
