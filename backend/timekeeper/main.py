import logging
import subprocess
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from timekeeper.api.attendance import router as attendance_router
from timekeeper.api.clocks import router as clocks_router
from timekeeper.api.reports import router as reports_router
from timekeeper.api.teams import router as teams_router
from timekeeper.core.config import settings
from timekeeper.core.exceptions import ReportingError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Run Alembic migrations on startup."""
    if settings.RUN_MIGRATIONS_ON_STARTUP:
        logger.info("Running Alembic migrations...")
        try:
            result = subprocess.run(
                ["alembic", "upgrade", "head"],
                capture_output=True,
                text=True,
                cwd=settings.MIGRATIONS_CWD,
            )
            if result.returncode != 0:
                logger.error("Alembic migration failed:\n%s", result.stderr)
            else:
                logger.info("Migrations applied successfully:\n%s", result.stdout)
        except Exception as exc:
            logger.exception("Failed to run migrations: %s", exc)

    logger.info("Default timezone: %s", settings.DEFAULT_TIMEZONE)

    yield

    logger.info("Shutting down Timekeeper backend.")


app = FastAPI(
    title="Timekeeper API",
    description="Clock-in/out tracking with lateness, pause and presence reports per team.",
    version="0.3.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173", "http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ReportingError)
async def reporting_error_handler(request: Request, exc: ReportingError) -> JSONResponse:
    logger.warning("%s %s → %d: %s", request.method, request.url.path, exc.status_code, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


app.include_router(clocks_router, prefix="/api/clocks", tags=["Clocks"])
app.include_router(reports_router, prefix="/api/reports", tags=["Reports"])
app.include_router(attendance_router, prefix="/api/attendance", tags=["Attendance"])
app.include_router(teams_router, prefix="/api/teams", tags=["Teams"])


@app.get("/health", tags=["System"])
async def health_check() -> dict:
    return {"status": "ok"}
