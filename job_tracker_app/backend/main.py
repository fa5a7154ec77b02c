from dotenv import load_dotenv

load_dotenv()

from pathlib import Path
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse
from fastapi.staticfiles import StaticFiles
from .api import auth, application, sections, health, pages
from .api.auth import AlreadyAuthenticated, LoginRequired
from .constants import Routes
from .models.db.database import engine, Base
from .models.db import user as user_model
from .models.db import section as section_model
from .models.db import application as application_model
from .utils.logging_config import configure_from_settings, get_logger
from .config.settings import get_settings

# Initialize settings
settings = get_settings()

# Setup logging configuration
configure_from_settings(settings)
logger = get_logger(__name__)

# Validate configuration on startup
missing_settings = settings.validate_required_settings()
if missing_settings:
    for setting in missing_settings:
        logger.error("Configuration error: %s", setting)
    if settings.is_production():
        raise RuntimeError("Invalid configuration for production environment")

app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    docs_url="/docs" if settings.api_docs_enabled else None,
    redoc_url="/redoc" if settings.api_docs_enabled else None,
)

# Add CORS middleware if enabled
if settings.cors_enabled:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

app.mount("/static", StaticFiles(directory=str(Path(__file__).resolve().parent / "static")), name="static")

# Routers
app.include_router(health.router, prefix="/api", tags=["Health Check"])
app.include_router(auth.router, prefix="/api/auth", tags=["Authentication"])
app.include_router(application.router, prefix="/api/applications", tags=["Application Tracker"])
app.include_router(sections.router, prefix="/api/sections", tags=["Sections"])
app.include_router(pages.router, include_in_schema=False)


# Route guard for server-rendered pages
@app.exception_handler(LoginRequired)
def redirect_to_login(request: Request, exc: LoginRequired):
    return RedirectResponse(Routes.LOGIN, status_code=status.HTTP_303_SEE_OTHER)


@app.exception_handler(AlreadyAuthenticated)
def redirect_home(request: Request, exc: AlreadyAuthenticated):
    return RedirectResponse(Routes.HOME, status_code=status.HTTP_303_SEE_OTHER)


@app.on_event("startup")
def on_startup():
    """Initialize database tables and log application startup."""
    logger.info("Starting %s v%s (%s)", settings.app_name, settings.app_version, settings.environment)
    # Models are imported above so their tables are registered on Base.metadata
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables initialized successfully")
