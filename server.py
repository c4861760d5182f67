from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text

from valuesmd.api import catalog as catalog_router
from valuesmd.api import sessions as sessions_router
from valuesmd.api import values as values_router
from valuesmd.catalog import get_catalog
from valuesmd.config import get_settings
from valuesmd.database import database, models
from valuesmd.errors import ValuesError
from valuesmd.observability import configure_logging, get_logger

settings = get_settings()
configure_logging(settings.log_level, settings.log_format)
log = get_logger("server")

# --- App Lifecycle ---
@asynccontextmanager
async def lifespan(app: FastAPI):
    # On startup:
    # A broken catalog stops the service here rather than on the first request
    get_catalog()
    async with database.engine.begin() as conn:
        await conn.run_sync(models.Base.metadata.create_all)
    log.info("startup_complete", database=database.DATABASE_URL.split("://", 1)[0])

    yield

    # On shutdown:
    await database.engine.dispose()

# --- Main App Setup ---
app = FastAPI(title="VALUES.md", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(catalog_router.router)
app.include_router(sessions_router.router)
app.include_router(values_router.router)

@app.exception_handler(ValuesError)
async def values_error_handler(request: Request, exc: ValuesError):
    log.warning(
        "request_rejected",
        path=request.url.path,
        error=exc.kind,
        detail=exc.message,
        **exc.context,
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

# --- Health Check ---
@app.get("/api/health")
async def health():
    catalog = get_catalog()
    try:
        async with database.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        database_status = "ok"
    except Exception as e:
        log.error("database_unreachable", error=str(e))
        database_status = "unavailable"
    return {
        "status": "ok",
        "dilemmas": len(catalog.dilemmas),
        "motifs": len(catalog.motifs),
        "database": database_status,
    }
