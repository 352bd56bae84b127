from fastapi import APIRouter, Depends
from loguru import logger
from pydantic import BaseModel

from app.api.deps import get_profile_service
from app.core.security import redact_id
from app.services.profile.service import ProfileService

router = APIRouter(prefix="/api", tags=["similarity"])


class SimilarUser(BaseModel):
    userId: str
    email: str
    displayName: str
    similarity: float


class SimilarUsersResponse(BaseModel):
    message: str
    fewerAvailable: bool
    users: list[SimilarUser]


class SimilarityResponse(BaseModel):
    similarity: float


@router.get("/similar-users/{uid}/{k}", response_model=SimilarUsersResponse)
async def similar_users(
    uid: str, k: int, service: ProfileService = Depends(get_profile_service)
) -> SimilarUsersResponse:
    """Top ``k`` users whose taste is closest to ``uid``."""
    result = await service.rank_similar(uid, k)
    return SimilarUsersResponse(
        message=result.message,
        fewerAvailable=result.fewer_available,
        users=[
            SimilarUser(userId=r.user_id, email=r.email, displayName=r.display_name, similarity=r.similarity)
            for r in result.results
        ],
    )


@router.get("/similarity/{uid1}/{uid2}", response_model=SimilarityResponse)
async def similarity_between(
    uid1: str, uid2: str, service: ProfileService = Depends(get_profile_service)
) -> SimilarityResponse:
    similarity = await service.similarity_between(uid1, uid2)
    logger.info(f"Similarity between {redact_id(uid1)} and {redact_id(uid2)}: {similarity:.4f}")
    return SimilarityResponse(similarity=similarity)
