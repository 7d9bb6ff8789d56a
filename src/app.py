"""Marketplace FastAPI application.

Processes commands synchronously via HTTP. Every request runs inside the
marketplace domain context.

Usage:
    uvicorn src.app:app --host 0.0.0.0 --port 8000 --reload
"""

# Initialized at module level so uvicorn workers share the domain.
# PROTEAN_ENV selects the config overlay from domain.toml.
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from marketplace.domain import marketplace

marketplace.init()

from marketplace.api import ROUTERS, register_error_handlers  # noqa: E402
from marketplace.api.middleware import install_domain_context  # noqa: E402

app = FastAPI(
    title="Marketplace API",
    description="Multi-branch marketplace core: checkout, inventory, coupons, settlement, disputes, onboarding",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

install_domain_context(app, marketplace)
register_error_handlers(app)

for router in ROUTERS:
    app.include_router(router)


@app.get("/health")
async def health():
    return JSONResponse(content={"status": "ok", "domain": marketplace.name})
