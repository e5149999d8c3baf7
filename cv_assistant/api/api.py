# File: cv_assistant/api/api.py
from fastapi import APIRouter

from cv_assistant.api.endpoints import generate, profile, resume

api_router = APIRouter(prefix="/api")
api_router.include_router(profile.router, prefix="/profile", tags=["profile"])
api_router.include_router(resume.router, prefix="/resume", tags=["resume"])
api_router.include_router(generate.router, prefix="/generate", tags=["generate"])
