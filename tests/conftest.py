from collections.abc import Sequence

import pytest

from app.models.profile import Identity
from app.services.profile.service import ProfileService
from app.services.profile_store import InMemoryProfileStore


class FakeEmbedder:
    """Returns preset vectors per title and records every call."""

    def __init__(self, vectors: dict[str, list[float]] | None = None):
        self.vectors = vectors or {}
        self.calls: list[list[str]] = []

    async def embed(self, titles: Sequence[str]) -> list[list[float]]:
        self.calls.append(list(titles))
        return [self.vectors[title] for title in titles]

    async def close(self) -> None:
        return None


@pytest.fixture
def embedder() -> FakeEmbedder:
    return FakeEmbedder(
        {
            "Heat": [1.0, 0.0],
            "Alien": [0.0, 1.0],
            "Up": [1.0, 1.0],
            "Fargo": [0.2, 0.8],
        }
    )


@pytest.fixture
def store() -> InMemoryProfileStore:
    return InMemoryProfileStore()


@pytest.fixture
def service(embedder: FakeEmbedder, store: InMemoryProfileStore) -> ProfileService:
    return ProfileService(embedder=embedder, store=store, service_types=("A", "B"), batch_size=2)


@pytest.fixture
def user_x() -> Identity:
    return Identity(uid="user-x", email="x@example.com")
