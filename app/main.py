import logging

from fastapi import FastAPI
from fastapi.openapi.utils import get_openapi

from app.api.routes.parse import router as parse_router
from app.config import get_settings

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title=f"{settings.app_name} (Resume Structuring Service)",
    description="Deterministic resume structuring service that turns PDF/DOCX/TXT resumes into JSON Resume documents with per-field confidence",
    version="0.2.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json"
)

app.include_router(parse_router)

@app.get("/", tags=["health"])
def root():
    return {"service": "resume-structurer", "status": "running"}

@app.get("/health", tags=["health"])
def health():
    return {"status": "ok"}

def custom_openapi():
    """Generate OpenAPI schema with custom settings."""
    if app.openapi_schema:
        return app.openapi_schema
    openapi_schema = get_openapi(
        title="Resume Structurer API",
        version="0.2.0",
        description="Resume structuring API with feature-scored field extraction",
        routes=app.routes,
    )
    app.openapi_schema = openapi_schema
    return app.openapi_schema

app.openapi = custom_openapi
