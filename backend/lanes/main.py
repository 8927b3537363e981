"""
Lanes - multi-tenant kanban boards with dense, transactional task ordering.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from lanes.config import get_settings
from lanes.database import init_db
from lanes.routes import tasks, projects, invitations, users
from lanes.exceptions import register_exception_handlers
from lanes.logging_config import setup_logging, get_logger

# Initialize logging
setup_logging()
logger = get_logger(__name__)

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    logger.info("Starting Lanes API...")
    await init_db()
    logger.info("Database initialized")
    yield
    logger.info("Shutting down Lanes API...")


app = FastAPI(
    title="Lanes",
    description="Kanban boards with role-based collaboration and drag-and-drop task ordering",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register custom exception handlers
register_exception_handlers(app)

# Include routers
app.include_router(projects.router, prefix="/projects", tags=["Projects"])
app.include_router(tasks.project_router, prefix="/projects", tags=["Tasks"])
app.include_router(invitations.project_router, prefix="/projects", tags=["Invitations"])
app.include_router(tasks.router, prefix="/tasks", tags=["Tasks"])
app.include_router(invitations.router, prefix="/invites", tags=["Invitations"])
app.include_router(users.router, prefix="/users", tags=["Users"])


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
