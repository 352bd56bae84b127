from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum

from app.core.exceptions import InvalidInput
from app.models.profile import Profile
from app.services.profile.vector_math import combine


class MergeAction(Enum):
    CREATE = "create"
    REPLACE = "replace"
    MERGE = "merge"
    ALREADY_COMPLETE = "already_complete"


@dataclass(frozen=True)
class MergeResult:
    action: MergeAction
    profile: Profile

    @property
    def changed(self) -> bool:
        return self.action is not MergeAction.ALREADY_COMPLETE


def decide_action(existing: Profile | None, source: str) -> MergeAction:
    """Pick the merge action for an incoming submission from ``source``."""
    if existing is None:
        return MergeAction.CREATE
    if existing.both_sources_obtained:
        return MergeAction.ALREADY_COMPLETE
    # A profile that never got an embedding has nothing to merge with
    if not existing.has_embedding or existing.primary_source == source:
        return MergeAction.REPLACE
    return MergeAction.MERGE


def merge_profile(
    existing: Profile | None,
    source: str,
    embedding: list[float],
    *,
    profile_id: str,
    email: str | None = None,
    display_name: str | None = None,
) -> MergeResult:
    """
    Integrate a freshly combined submission embedding into a stored profile.

    Never mutates ``existing``. Re-submitting the primary source overwrites the
    embedding; a second, distinct source is averaged in and freezes the profile.

    Raises:
        InvalidInput: if the incoming embedding's dimensionality differs from the stored one
    """
    action = decide_action(existing, source)

    if action is MergeAction.ALREADY_COMPLETE:
        return MergeResult(action, existing)

    if action is MergeAction.CREATE:
        profile = Profile(
            id=profile_id,
            email=email or "",
            display_name=display_name or "",
            embedding=list(embedding),
            primary_source=source,
            sources_submitted={source: True},
        )
        return MergeResult(action, profile)

    if existing.has_embedding and existing.dimensions != len(embedding):
        raise InvalidInput(
            f"Embedding dimensionality mismatch for profile: stored {existing.dimensions}, received {len(embedding)}"
        )

    updates: dict = {"updated_at": datetime.now(timezone.utc)}

    if action is MergeAction.REPLACE:
        # The replaced vector came from this source alone
        updates["embedding"] = list(embedding)
        updates["primary_source"] = source
        updates["sources_submitted"] = {source: True}
    else:
        updates["embedding"] = combine([existing.embedding, embedding])
        updates["both_sources_obtained"] = True
        updates["sources_submitted"] = {**existing.sources_submitted, source: True}

    return MergeResult(action, existing.model_copy(update=updates, deep=True))
