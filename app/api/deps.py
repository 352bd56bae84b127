from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.core.exceptions import Unauthorized
from app.models.profile import Identity
from app.services.embeddings import OpenAIEmbeddingProvider
from app.services.identity import FirebaseIdentityService
from app.services.profile.service import ProfileService
from app.services.profile_store import create_profile_store

profile_store = create_profile_store()
embedding_provider = OpenAIEmbeddingProvider()
identity_service = FirebaseIdentityService()
profile_service = ProfileService(embedder=embedding_provider, store=profile_store)

bearer = HTTPBearer(auto_error=False)


def get_profile_service() -> ProfileService:
    return profile_service


async def get_current_identity(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer),
) -> Identity:
    """Resolve the bearer token on the request to a verified identity."""
    if credentials is None or credentials.scheme.lower() != "bearer" or not credentials.credentials:
        raise Unauthorized("Unauthorized: No token provided")
    return await identity_service.verify(credentials.credentials)


async def close_clients() -> None:
    await profile_store.close()
    await embedding_provider.close()
    await identity_service.close()
