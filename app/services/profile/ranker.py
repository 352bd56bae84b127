from collections.abc import Iterable, Sequence
from itertools import combinations

from loguru import logger
from pydantic import BaseModel, Field

from app.core.constants import MESSAGE_FEWER_AVAILABLE, MESSAGE_TOP_K
from app.core.exceptions import InvalidInput
from app.core.security import redact_id
from app.models.profile import Profile
from app.services.profile.vector_math import Vector, cosine_similarity


class RankedProfile(BaseModel):
    user_id: str
    email: str = ""
    display_name: str = ""
    similarity: float


class RankingResult(BaseModel):
    results: list[RankedProfile] = Field(default_factory=list)
    message: str
    fewer_available: bool = False


class RankedPair(BaseModel):
    pair: tuple[int, int]
    similarity: float


def top_k(subject: Vector, candidates: Iterable[Profile], k: int) -> RankingResult:
    """
    Rank candidates by cosine similarity to ``subject`` and keep the best ``k``.

    Candidates without an embedding, or with a different dimensionality, are left
    out of the ranking entirely. Ties keep their input order.
    """
    if k < 1:
        raise InvalidInput("Invalid K value. Must be a positive integer.")
    if not subject:
        raise InvalidInput("Subject embedding is empty")

    scored: list[RankedProfile] = []
    for candidate in candidates:
        if not candidate.has_embedding:
            continue
        if candidate.dimensions != len(subject):
            logger.warning(
                f"Skipping profile {redact_id(candidate.id)}: {candidate.dimensions} dimensions, "
                f"expected {len(subject)}"
            )
            continue
        scored.append(
            RankedProfile(
                user_id=candidate.id,
                email=candidate.email,
                display_name=candidate.display_name,
                similarity=cosine_similarity(subject, candidate.embedding),
            )
        )

    # list.sort is stable, so equal scores stay in input order
    scored.sort(key=lambda r: r.similarity, reverse=True)

    available = len(scored)
    if k > available:
        return RankingResult(
            results=scored,
            message=MESSAGE_FEWER_AVAILABLE.format(k=k, available=available),
            fewer_available=True,
        )
    return RankingResult(results=scored[:k], message=MESSAGE_TOP_K.format(k=k))


def pairwise(a: Vector, b: Vector) -> float:
    """Similarity between two profile vectors. Both must be present and equally long."""
    if not a or not b:
        raise InvalidInput("Both embeddings must be present to compare them")
    return cosine_similarity(a, b)


def top_pairs(vectors: Sequence[Vector], k: int) -> list[RankedPair]:
    """
    Rank every unordered pair of ``vectors`` by similarity and return the best ``k``.

    Batch utility for offline comparison of many profiles at once; the API serves
    per-user queries through ``top_k`` and ``pairwise`` instead.
    """
    if k < 1:
        raise InvalidInput("Invalid K value. Must be a positive integer.")

    pairs = [
        RankedPair(pair=(i, j), similarity=cosine_similarity(vectors[i], vectors[j]))
        for i, j in combinations(range(len(vectors)), 2)
    ]
    pairs.sort(key=lambda p: p.similarity, reverse=True)
    return pairs[:k]
