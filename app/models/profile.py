from datetime import datetime, timezone

from pydantic import BaseModel, Field, field_validator


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Profile(BaseModel):
    """
    A user's taste profile.

    Holds one combined embedding built from the titles of up to two service types.
    Once both service types have contributed, the profile is complete and frozen.
    """

    id: str = Field(description="Authenticated principal id, primary key")
    email: str = ""
    display_name: str = ""
    embedding: list[float] = Field(default_factory=list, description="Combined profile vector")
    primary_source: str | None = Field(default=None, description="Service type of the first submission")
    both_sources_obtained: bool = False
    sources_submitted: dict[str, bool] = Field(
        default_factory=dict, description="Service type → whether it has contributed to the embedding"
    )
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    @field_validator("email", "display_name", mode="before")
    @classmethod
    def _null_to_empty(cls, value: str | None) -> str:
        # Older documents store missing contact fields as null
        return "" if value is None else value

    @property
    def has_embedding(self) -> bool:
        return bool(self.embedding)

    @property
    def dimensions(self) -> int:
        return len(self.embedding)


class Identity(BaseModel):
    """Verified identity of the acting user, supplied by the auth layer."""

    uid: str
    email: str | None = None
