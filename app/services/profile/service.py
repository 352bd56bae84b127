from collections.abc import Sequence
from enum import Enum

from loguru import logger
from pydantic import BaseModel

from app.core.config import settings
from app.core.exceptions import InvalidInput, NotFound
from app.core.security import redact_id
from app.models.profile import Identity, Profile
from app.services.embeddings import EmbeddingProvider
from app.services.profile.merger import MergeAction, merge_profile
from app.services.profile.ranker import RankingResult, pairwise, top_k
from app.services.profile.vector_math import combine
from app.services.profile_store import ProfileStore
from app.utils import normalize_titles


class SubmitStatus(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    ALREADY_COMPLETE = "already_complete"


class SubmitResult(BaseModel):
    status: SubmitStatus
    profile: Profile


_STATUS_BY_ACTION = {
    MergeAction.CREATE: SubmitStatus.CREATED,
    MergeAction.REPLACE: SubmitStatus.UPDATED,
    MergeAction.MERGE: SubmitStatus.UPDATED,
    MergeAction.ALREADY_COMPLETE: SubmitStatus.ALREADY_COMPLETE,
}


class ProfileService:
    """
    Builds taste profiles from submitted titles and answers similarity queries.

    Submissions are find-then-save with no locking: two concurrent submissions for
    the same user can race and the last write wins.
    """

    def __init__(
        self,
        embedder: EmbeddingProvider,
        store: ProfileStore,
        service_types: Sequence[str] = settings.SERVICE_TYPES,
        batch_size: int = settings.EMBEDDING_BATCH_SIZE,
    ):
        self.embedder = embedder
        self.store = store
        self.service_types = tuple(service_types)
        self.batch_size = max(1, batch_size)

    def _validate_service_type(self, service_type: str | None) -> str:
        service_type = (service_type or "").strip()
        if not service_type:
            raise InvalidInput("Service type is required")
        if service_type not in self.service_types:
            allowed = ", ".join(self.service_types)
            raise InvalidInput(f"Unknown service type '{service_type}'. Expected one of: {allowed}")
        return service_type

    async def submit_titles(
        self,
        identity: Identity,
        service_type: str,
        titles: list[str],
        display_name: str | None = None,
    ) -> SubmitResult:
        """
        Embed a batch of titles and fold the result into the user's profile.

        Args:
            identity: Verified acting user
            service_type: Source the titles come from
            titles: Titles the user rated
            display_name: Used only when the profile is first created

        Returns:
            SubmitResult with the resulting status and profile
        """
        service_type = self._validate_service_type(service_type)
        cleaned = normalize_titles(titles or [])
        if not cleaned:
            raise InvalidInput("At least one title is required")

        user = redact_id(identity.uid)
        existing = await self.store.find_by_id(identity.uid)
        if existing and existing.both_sources_obtained:
            logger.info(f"[{user}] Profile already complete, skipping {service_type} submission")
            return SubmitResult(status=SubmitStatus.ALREADY_COMPLETE, profile=existing)

        logger.info(f"[{user}] Embedding {len(cleaned)} titles from {service_type}")
        embedding = combine(await self._embed_all(cleaned))

        result = merge_profile(
            existing,
            service_type,
            embedding,
            profile_id=identity.uid,
            email=identity.email,
            display_name=display_name,
        )
        if result.changed:
            await self.store.save(result.profile)

        status = _STATUS_BY_ACTION[result.action]
        logger.info(f"[{user}] Profile {status.value} ({result.action.value}) from {service_type}")
        return SubmitResult(status=status, profile=result.profile)

    async def _embed_all(self, titles: list[str]) -> list[list[float]]:
        """Embed every title, splitting the list into provider-sized batches."""
        vectors: list[list[float]] = []
        for start in range(0, len(titles), self.batch_size):
            vectors.extend(await self.embedder.embed(titles[start : start + self.batch_size]))
        return vectors

    async def _require_embedding(self, user_id: str) -> Profile:
        profile = await self.store.find_by_id(user_id)
        if profile is None or not profile.has_embedding:
            raise NotFound(f"Personality data for user '{user_id}' not found or incomplete.")
        return profile

    async def rank_similar(self, user_id: str, k: int) -> RankingResult:
        """Rank every other user against ``user_id`` and return the top ``k``."""
        if k < 1:
            raise InvalidInput("Invalid K value. Must be a positive integer.")

        subject = await self._require_embedding(user_id)
        candidates = await self.store.iter_profiles(exclude_id=user_id)
        result = top_k(subject.embedding, candidates, k)
        logger.info(f"[{redact_id(user_id)}] Ranked {len(candidates)} candidates, returning {len(result.results)}")
        return result

    async def similarity_between(self, id_a: str, id_b: str) -> float:
        profile_a = await self._require_embedding(id_a)
        profile_b = await self._require_embedding(id_b)
        if profile_a.dimensions != profile_b.dimensions:
            raise InvalidInput("Profiles were built with different embedding dimensionality")
        return pairwise(profile_a.embedding, profile_b.embedding)
