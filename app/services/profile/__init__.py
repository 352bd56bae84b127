"""
Taste profile core.

Vector math, the two-source merge rules, similarity ranking, and the service
that ties them to an embedding provider and a profile store.
"""

from app.services.profile.merger import MergeAction, MergeResult, merge_profile
from app.services.profile.ranker import RankedProfile, RankingResult, pairwise, top_k, top_pairs
from app.services.profile.service import ProfileService, SubmitResult, SubmitStatus
from app.services.profile.vector_math import combine, cosine_similarity

__all__ = [
    "MergeAction",
    "MergeResult",
    "ProfileService",
    "RankedProfile",
    "RankingResult",
    "SubmitResult",
    "SubmitStatus",
    "combine",
    "cosine_similarity",
    "merge_profile",
    "pairwise",
    "top_k",
    "top_pairs",
]
