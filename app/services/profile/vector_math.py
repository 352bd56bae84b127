import math
from collections.abc import Sequence

from app.core.constants import MAX_SIMILARITY, MIN_SIMILARITY
from app.core.exceptions import InvalidInput

Vector = Sequence[float]


def combine(vectors: Sequence[Vector]) -> list[float]:
    """
    Combine embeddings into a single vector by element-wise mean.

    Args:
        vectors: Non-empty sequence of equal-length vectors

    Returns:
        Mean vector with the same dimensionality as the inputs

    Raises:
        InvalidInput: if ``vectors`` is empty or the lengths differ
    """
    if not vectors:
        raise InvalidInput("Cannot combine an empty set of embeddings")

    dims = len(vectors[0])
    if dims == 0:
        raise InvalidInput("Cannot combine zero-length embeddings")

    totals = [0.0] * dims
    for vector in vectors:
        if len(vector) != dims:
            raise InvalidInput(f"Embedding dimensionality mismatch: expected {dims}, got {len(vector)}")
        for idx, value in enumerate(vector):
            totals[idx] += value

    count = len(vectors)
    return [total / count for total in totals]


def cosine_similarity(a: Vector, b: Vector) -> float:
    """
    Cosine similarity between two vectors, in [-1, 1].

    A zero-magnitude vector has no direction, so its similarity to anything is 0.0.
    """
    if len(a) != len(b):
        raise InvalidInput(f"Cannot compare vectors of different lengths ({len(a)} and {len(b)})")

    dot = sum(x * y for x, y in zip(a, b))
    norm_a = math.sqrt(sum(x * x for x in a))
    norm_b = math.sqrt(sum(y * y for y in b))
    if norm_a == 0 or norm_b == 0:
        return 0.0

    similarity = dot / (norm_a * norm_b)
    return max(MIN_SIMILARITY, min(MAX_SIMILARITY, similarity))
