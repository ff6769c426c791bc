"""Brandguard HTTP API.

Run locally:
    uvicorn src.api.main:app --reload
"""

from __future__ import annotations

from fastapi import FastAPI

from src.api.compliance_router import router as compliance_router
from src.api.guardrails_router import router as guardrails_router
from src.common.config import load_compliance_settings
from src.common.env import load_env
from src.common.logging import get_logger

load_env()

app = FastAPI(title="Brandguard Guardrails & Compliance API")
logger = get_logger(__name__)

app.include_router(guardrails_router)
app.include_router(compliance_router)


@app.get("/health")
def health():
    settings = load_compliance_settings()
    return {
        "status": "ok",
        "guardrailsVersion": settings.guardrails_version,
        "collectionPrefix": settings.firestore.collection_prefix,
    }
