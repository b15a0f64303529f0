"""
MedLookup API - FastAPI Main Entry

Backend for the Word add-in that turns a selected brand name into
"Brand (active ingredients)" using the CIMA (AEMPS) registry.

✅ LOCAL:
    cd backend
    python -m uvicorn medlookup.main:app --reload --host 0.0.0.0 --port 8000

✅ TEST:
    curl -i http://127.0.0.1:8000/health
    curl -i "http://127.0.0.1:8000/v1/search?q=adiro"
    curl -i -X POST http://127.0.0.1:8000/v1/lookup \
        -H "Content-Type: application/json" -d '{"selection": "Adiro"}'
    curl -i "http://127.0.0.1:8000/v1/indications?nregistro=62825"
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from medlookup.core.config import settings

# ✅ Routers
from medlookup.api.routes_lookup import router as lookup_router
from medlookup.api.routes_meta import router as meta_router
from medlookup.api.routes_search import router as search_router


def _configure_logging() -> None:
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_app() -> FastAPI:
    _configure_logging()

    app = FastAPI(
        title="MedLookup API",
        version=settings.APP_VERSION,
        description="CIMA brand / active ingredient lookup for the Word add-in",
    )

    # ✅ CORS
    # The add-in task pane is served from its own origin (Office host / localhost:3000)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ✅ Root (GET /)
    @app.get("/")
    def root():
        return {
            "name": "MedLookup API",
            "status": "ok",
            "docs": "/docs",
            "health": "/health",
            "version": "/version",
        }

    # ✅ Health Check (GET /health)
    @app.get("/health")
    def health():
        return {"ok": True}

    # ✅ Mount routers
    app.include_router(meta_router)
    app.include_router(search_router)
    app.include_router(lookup_router)

    return app


app = create_app()
