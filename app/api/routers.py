from fastapi import APIRouter

from app.api.v1.diffs import router as diffs_router
from app.api.v1.notes import router as notes_router

api_router = APIRouter()
api_router.include_router(diffs_router)
api_router.include_router(notes_router)
