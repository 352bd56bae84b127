from fastapi import APIRouter

from .endpoints.health import router as health_router
from .endpoints.profiles import router as profiles_router
from .endpoints.similarity import router as similarity_router

api_router = APIRouter()


@api_router.get("/")
async def root():
    return {"message": "TasteMatch API is running"}


api_router.include_router(health_router)
api_router.include_router(profiles_router)
api_router.include_router(similarity_router)
