"""API routes."""

from fastapi import APIRouter

from notevault.api.v1 import auth, health, notes

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(auth.router, tags=["auth"])
router.include_router(notes.router, prefix="/notes", tags=["notes"])
