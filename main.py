import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from teamboard import __version__
from teamboard.config.settings import settings
from teamboard.database import Base, engine
from teamboard import models  # noqa: F401  registers the tables on Base.metadata
from teamboard.routers import auth, membership, tasks, teams
from teamboard.utils.errors import TeamboardError
from teamboard.schemas.common import error_body

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Teamboard API", version=__version__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(auth.router, prefix="/auth", tags=["Authentication"])
app.include_router(teams.router, prefix="/teams", tags=["Teams"])
app.include_router(membership.router, prefix="/membership", tags=["Membership"])
app.include_router(tasks.router, prefix="/tasks", tags=["Tasks"])


# Startup event
@app.on_event("startup")
async def startup_event():
    """Make sure the tables exist before serving requests"""
    logger.info("Starting Teamboard API %s", __version__)
    Base.metadata.create_all(bind=engine)


def _field_name(loc) -> str:
    # Drop the request part ("body", "query", "path") from the error location
    parts = [str(part) for part in loc if part not in ("body", "query", "path", "header")]
    return ".".join(parts) or str(loc[-1])


@app.exception_handler(TeamboardError)
async def teamboard_error_handler(request: Request, exc: TeamboardError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=error_body(exc.message, exc.details))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    details = [
        {"field": _field_name(error["loc"]), "message": error["msg"], "type": error["type"]}
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body("Validation failed", details),
    )


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body("Internal server error"),
    )


@app.get("/")
def root():
    return {"success": True, "message": "Teamboard API is running", "version": __version__}


@app.get("/health")
def health_check():
    return {"success": True, "message": "Server is healthy", "status": "ok"}
