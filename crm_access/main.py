import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from crm_access.api.v1.router import api_router
from crm_access.core.config import settings
from crm_access.core.database import Base, engine

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

logger = logging.getLogger(__name__)

# Import all models so Base.metadata knows about them
import crm_access.models  # noqa: E402,F401

# Create any missing tables (fallback if alembic migration didn't run)
try:
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables verified/created successfully")
except Exception as e:
    logger.error("Failed to create database tables: %s", e)

app = FastAPI(
    title="CRM Access Control",
    description="Avaliação de permissões, modelos de permissão por função e gestão de usuários do CRM.",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router)


@app.get("/health", tags=["Health"])
def health_check() -> dict:
    return {"status": "ok", "environment": settings.ENVIRONMENT}
