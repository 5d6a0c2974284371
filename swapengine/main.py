"""
SwapEngine — FastAPI application entry point.

Configures the app, middleware, and registers all API routers.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from swapengine.config import settings
from swapengine.api import opportunities, optimizer, recommendations


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    from swapengine.database import engine
    from swapengine.redis_client import redis

    yield

    await engine.dispose()
    await redis.aclose()


app = FastAPI(
    title=settings.APP_NAME,
    description="Item recommendation and reciprocal swap discovery for a peer-to-peer exchange.",
    version="0.1.0",
    lifespan=lifespan,
)

# --- CORS Middleware ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- Routers ---
app.include_router(recommendations.router, prefix="/api/v1/recommendations", tags=["Recommendations"])
app.include_router(optimizer.router, prefix="/api/v1/optimizer", tags=["Optimizer"])
app.include_router(opportunities.router, prefix="/api/v1/opportunities", tags=["Opportunities"])


@app.get("/health")
async def health_check():
    """Health check endpoint for load balancers and monitoring."""
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
        "version": "0.1.0",
    }
