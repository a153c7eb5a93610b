"""
Fuel receipt service — FastAPI application entry-point.
"""
import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import settings
from app.pos.database import Base, SessionLocal, engine
from app.pos.pipeline.errors import UnresolvedRuleError, ValidationError

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s  %(name)-30s  %(levelname)-5s  %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: ensure data dirs + tables exist
    os.makedirs(settings.DATA_DIR, exist_ok=True)
    os.makedirs(settings.RECEIPTS_DIR, exist_ok=True)
    # Import models so Base.metadata knows about them
    import app.pos.models  # noqa: F401
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables ready (%s)", settings.DATABASE_URL)

    from app.pos.seed import seed_catalog
    db = SessionLocal()
    try:
        seed_catalog(db)
    finally:
        db.close()

    yield
    logger.info("Shutting down")


app = FastAPI(
    title="Fuel Receipt Service",
    description="Merchant rules → field gate → settlement → synthetic authorization → receipt document",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    logger.info("Rejected %s: %s", request.url.path, exc)
    return JSONResponse(
        status_code=400,
        content={
            "success": False,
            "error": str(exc),
            "problems": [p.as_dict() for p in exc.problems],
        },
    )


@app.exception_handler(UnresolvedRuleError)
async def unresolved_rule_handler(request: Request, exc: UnresolvedRuleError):
    logger.error("Rule resolution failed for %s: %s", request.url.path, exc)
    return JSONResponse(status_code=500, content={"success": False, "error": str(exc)})


@app.get("/")
async def root():
    return {"service": "Fuel Receipt Service", "version": "0.1.0", "status": "running"}


@app.get("/health")
async def health_check():
    return {"status": "healthy"}


# ── Register API routers ─────────────────────────────────────────────────
from app.pos.routers.catalog import router as catalog_router  # noqa: E402
from app.pos.routers.receipts import files_router, router as receipts_router  # noqa: E402

app.include_router(receipts_router, prefix="/api", tags=["Receipts"])
app.include_router(catalog_router, prefix="/api", tags=["Catalog"])
app.include_router(files_router, tags=["Receipt Files"])
