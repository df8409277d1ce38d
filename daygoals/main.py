"""FastAPI application entry point."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from daygoals.config import settings
from daygoals.context import AppContext
from daygoals.routers import catalog, conversation, ratings, user_goals, users

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - startup and shutdown events."""
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Startup
    context = await AppContext.create(settings)
    app.state.context = context
    await context.start()
    yield
    # Shutdown
    await context.stop()


app = FastAPI(
    title="Day Goals API",
    description="Daily goal planning, tracking and peer rating",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(catalog.router)
app.include_router(users.router)
app.include_router(user_goals.router)
app.include_router(ratings.router)
app.include_router(conversation.router)


@app.get("/")
async def root():
    """Root endpoint - health check."""
    return {"status": "ok", "message": "Day Goals API"}


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}
