"""Master API router mounted at /api."""

from fastapi import APIRouter

from vercel_notify.api.routes import health, webhook

api_router = APIRouter(prefix="/api")

api_router.include_router(health.router, tags=["Health"])
api_router.include_router(webhook.router)
