import logging
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import settings
from database import init_db
from api.catalog import router as catalog_router
from api.checklist import router as checklist_router
from api.completion import router as completion_router
from api.errors import register_error_handlers
from api.groups import router as groups_router
from api.projects import router as projects_router

structlog.configure(
    wrapper_class=structlog.make_filtering_bound_logger(
        logging.getLevelName(settings.log_level.upper())
    ),
)
logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("starting_api", app=settings.app_name, database=settings.database_url.split(":")[0])
    await init_db()
    yield
    logger.info("stopping_api")


app = FastAPI(
    title=settings.app_name,
    description="Mortgage project checklists: generation, conditional questions, repeatable groups and completion",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

app.include_router(catalog_router)
app.include_router(projects_router)
app.include_router(checklist_router)
app.include_router(groups_router)
app.include_router(completion_router)


@app.get("/health")
async def health():
    return {"status": "ok"}
