"""
patchbounty - FastAPI Main Application
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from patchbounty.config import settings
from patchbounty.db.database import init_db, close_db
from patchbounty.api.v1 import evaluations, treasury, audits
from patchbounty.core.evaluation import RemoteEvaluator
from patchbounty.services import get_orchestrator

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler"""
    # Startup
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")
    await init_db()
    get_orchestrator()

    yield

    # Shutdown
    logger.info("Shutting down...")
    await close_db()


# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    description="Autonomous code-change evaluation and bounty settlement",
    version=settings.APP_VERSION,
    lifespan=lifespan,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json"
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routers
app.include_router(evaluations.router, prefix="/api/v1/evaluations", tags=["Evaluations"])
app.include_router(treasury.router, prefix="/api/v1/treasury", tags=["Treasury"])
app.include_router(audits.router, prefix="/api/v1/audits", tags=["Contract Audits"])


@app.get("/api/health")
async def health_check():
    """Health check endpoint with evaluator tier status"""
    orchestrator = get_orchestrator()
    tiers = []
    for tier in orchestrator.pipeline.tiers:
        if isinstance(tier, RemoteEvaluator):
            available = await tier.provider.is_available()
            tiers.append({"name": tier.name, "model": tier.model, "status": "configured" if available else "not_configured"})
        else:
            tiers.append({"name": tier.name, "model": None, "status": "configured"})
    tiers.append({"name": orchestrator.pipeline.fallback.name, "model": None, "status": "configured"})

    return {
        "status": "healthy",
        "app": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "evaluator_tiers": tiers,
        "payments": "configured" if orchestrator.payments.enabled else "not_configured",
        "commit_policy": orchestrator.commit_policy.value,
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "patchbounty.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG
    )
