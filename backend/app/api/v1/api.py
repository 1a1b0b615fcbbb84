from fastapi import APIRouter

from app.api.v1.endpoints import chat
from app.api.v1.endpoints import dashboard
from app.api.v1.endpoints import mood_entries
from app.api.v1.endpoints import sessions

api_router = APIRouter()

api_router.include_router(mood_entries.router, prefix="/mood-entries", tags=["mood-entries"])
api_router.include_router(sessions.router, prefix="/sessions", tags=["sessions"])
api_router.include_router(dashboard.router, prefix="/dashboard", tags=["dashboard"])
api_router.include_router(chat.router, prefix="/chat", tags=["chat"])
