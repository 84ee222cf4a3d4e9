"""
app/main.py

Purpose: Application entry point

- Initializes FastAPI app
- Loads configuration and logging
- Builds the cooldown store, rate limiter, gateway and send workflow
- Registers API routes (sms, health, static UI)
- No business logic should be written here
- Manages application lifecycle (startup/shutdown, sweep task)
"""

import asyncio
import time
from contextlib import asynccontextmanager, suppress
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse

from app.api import sms
from app.core.config import Settings, settings as default_settings, validate_settings
from app.core.errors import add_exception_handlers
from app.core.logging import setup_logging, get_logger
from app.schemas.sms import HealthResponse
from app.services.cooldown_service import CooldownStore, run_periodic_sweep
from app.services.rate_limit_service import RateLimiter
from app.services.sms_service import SmsService
from app.services.twilio_service import SmsGateway, build_gateway
from utils.constants import APP_NAME, APP_VERSION
from utils.time_utils import Clock, MonotonicClock, utc_timestamp

logger = get_logger(__name__)

# Resolved against the project root so the app starts from any working directory
PROJECT_ROOT = Path(__file__).resolve().parent.parent


def create_app(
    settings: Optional[Settings] = None,
    gateway: Optional[SmsGateway] = None,
    clock: Optional[Clock] = None
) -> FastAPI:
    """
    Builds the FastAPI application.

    Args:
        settings: Configuration; defaults to environment-loaded settings
        gateway: SMS provider gateway; defaults to Twilio or the simulated gateway
        clock: Monotonic clock shared by the cooldown store and rate limiter
    """
    config = settings or default_settings
    clock = clock or MonotonicClock()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Application lifespan manager.
        Handles startup and shutdown events.
        """
        logger.info("🚀 Starting SMS gateway...")

        try:
            validate_settings(config)
            logger.info("✅ Configuration validated")
        except Exception as e:
            logger.critical(f"Failed to start application: {str(e)}", exc_info=True)
            raise

        cooldowns = CooldownStore(
            cooldown_seconds=config.COOLDOWN_SECONDS,
            retention_seconds=config.COOLDOWN_RETENTION_SECONDS,
            clock=clock
        )
        rate_limiter = RateLimiter(
            max_requests=config.RATE_LIMIT_MAX_REQUESTS,
            window_seconds=config.RATE_LIMIT_WINDOW_SECONDS,
            clock=clock
        )
        sms_gateway = gateway or build_gateway(config)

        app.state.settings = config
        app.state.cooldowns = cooldowns
        app.state.rate_limiter = rate_limiter
        app.state.gateway = sms_gateway
        app.state.sms_service = SmsService(
            gateway=sms_gateway,
            cooldowns=cooldowns,
            from_number=config.TWILIO_FROM_NUMBER,
            validation_mode=config.PHONE_VALIDATION_MODE,
            country_code=config.REGIONAL_COUNTRY_CODE,
            mobile_prefix=config.REGIONAL_MOBILE_PREFIX,
            max_message_length=config.MAX_MESSAGE_LENGTH,
            max_sender_length=config.MAX_SENDER_LENGTH
        )

        sweep_task = asyncio.create_task(
            run_periodic_sweep(cooldowns, config.COOLDOWN_SWEEP_INTERVAL_SECONDS, rate_limiter)
        )

        logger.info(f"🎉 SMS gateway started (provider: {sms_gateway.name})")
        logger.info(f"Environment: {config.ENVIRONMENT}")

        yield  # Application runs here

        logger.info("🛑 Shutting down SMS gateway...")

        sweep_task.cancel()
        with suppress(asyncio.CancelledError):
            await sweep_task

        cooldowns.clear()
        rate_limiter.reset()
        logger.info("👋 SMS gateway shut down successfully")

    app = FastAPI(
        title=APP_NAME,
        description="HTTP front-end for sending SMS with rate limiting and per-number cooldown",
        version=APP_VERSION,
        lifespan=lifespan,
        debug=config.DEBUG,
        docs_url="/docs" if config.is_development else None,  # Disable docs in production
        redoc_url="/redoc" if config.is_development else None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def add_process_time_header(request: Request, call_next):
        """Add processing time header to all responses."""
        start_time = time.time()
        response = await call_next(request)
        process_time = time.time() - start_time
        response.headers["X-Process-Time"] = str(process_time)

        if process_time > 5.0:
            logger.warning(
                f"Slow request detected: {request.method} {request.url.path}",
                extra={"process_time": process_time}
            )

        return response

    add_exception_handlers(app, is_production=config.is_production)

    app.include_router(sms.router, prefix="/api", tags=["SMS"])

    static_dir = Path(config.STATIC_DIR)
    if not static_dir.is_absolute():
        static_dir = PROJECT_ROOT / static_dir

    @app.get("/", include_in_schema=False)
    async def index():
        """Serves the browser UI."""
        index_file = static_dir / "index.html"
        if not index_file.is_file():
            return JSONResponse(
                status_code=404,
                content={"error": "UI not found", "code": "HTTP_ERROR", "details": None}
            )
        return FileResponse(index_file)

    @app.get("/health", tags=["Health"], response_model=HealthResponse)
    async def health_check(request: Request):
        """
        Health check endpoint.
        """
        return HealthResponse(
            status="OK",
            timestamp=utc_timestamp(),
            environment=config.ENVIRONMENT,
            version=APP_VERSION,
            provider=request.app.state.gateway.name,
            provider_configured=request.app.state.gateway.is_configured(),
            cooldown_entries=len(request.app.state.cooldowns)
        )

    return app


setup_logging(default_settings)
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=default_settings.HOST,
        port=default_settings.PORT,
        reload=default_settings.is_development,
        log_level=default_settings.LOG_LEVEL.lower()
    )
