from typing import Protocol

import redis.asyncio as redis
from loguru import logger
from pydantic import ValidationError

from app.core.config import settings
from app.core.constants import PROFILE_KEY
from app.core.exceptions import UpstreamFailure
from app.core.security import redact_id
from app.models.profile import Profile

SCAN_BATCH_SIZE = 500


class ProfileStore(Protocol):
    async def find_by_id(self, profile_id: str) -> Profile | None: ...

    async def save(self, profile: Profile) -> None: ...

    async def iter_profiles(self, exclude_id: str | None = None) -> list[Profile]: ...

    async def close(self) -> None: ...


class RedisProfileStore:
    """
    Redis-backed store for user profiles.

    Each profile is a JSON document under ``{prefix}{id}``. Writes replace the whole
    document, so a save is atomic per profile but find-then-save is not.
    """

    def __init__(self, redis_url: str | None = None, key_prefix: str | None = None) -> None:
        self.redis_url = redis_url or settings.REDIS_URL
        self.key_prefix = key_prefix or settings.REDIS_PROFILE_KEY
        self._client: redis.Redis | None = None
        if not self.redis_url:
            logger.warning("REDIS_URL is not set. Profile storage will fail until a Redis instance is configured.")

    async def _get_client(self) -> redis.Redis:
        if self._client is None:
            logger.info("Creating shared Redis client for profiles")
            self._client = redis.from_url(
                self.redis_url,
                decode_responses=True,
                encoding="utf-8",
                socket_connect_timeout=5,
                socket_timeout=5,
                max_connections=settings.REDIS_MAX_CONNECTIONS,
                health_check_interval=30,
                socket_keepalive=True,
            )
        return self._client

    def _format_key(self, profile_id: str) -> str:
        return PROFILE_KEY.format(prefix=self.key_prefix, profile_id=profile_id)

    def _decode(self, raw: str, key: str) -> Profile:
        try:
            return Profile.model_validate_json(raw)
        except ValidationError as e:
            logger.error(f"Malformed profile document at {key}: {e}")
            raise UpstreamFailure("Stored profile data is unreadable.") from e

    async def find_by_id(self, profile_id: str) -> Profile | None:
        key = self._format_key(profile_id)
        try:
            client = await self._get_client()
            raw = await client.get(key)
        except (redis.RedisError, OSError) as exc:
            logger.error(f"Failed to load profile {redact_id(profile_id)} from Redis: {exc}")
            raise UpstreamFailure("Profile storage temporarily unavailable.") from exc

        if not raw:
            return None
        # Unreadable documents raise rather than read as absent
        return self._decode(raw, key)

    async def save(self, profile: Profile) -> None:
        key = self._format_key(profile.id)
        try:
            client = await self._get_client()
            await client.set(key, profile.model_dump_json())
        except (redis.RedisError, OSError) as exc:
            logger.error(f"Failed to save profile {redact_id(profile.id)} to Redis: {exc}")
            raise UpstreamFailure("Profile storage temporarily unavailable.") from exc

    async def iter_profiles(self, exclude_id: str | None = None) -> list[Profile]:
        """Load every stored profile, optionally skipping one id."""
        excluded_key = self._format_key(exclude_id) if exclude_id else None
        profiles: list[Profile] = []
        try:
            client = await self._get_client()
            keys: list[str] = []
            async for key in client.scan_iter(match=f"{self.key_prefix}*", count=SCAN_BATCH_SIZE):
                if key != excluded_key:
                    keys.append(key)
            # scan order is arbitrary; sort for a deterministic tie order when ranking
            keys.sort()
            for start in range(0, len(keys), SCAN_BATCH_SIZE):
                batch = keys[start : start + SCAN_BATCH_SIZE]
                for key, raw in zip(batch, await client.mget(batch)):
                    if not raw:
                        continue
                    try:
                        profiles.append(self._decode(raw, key))
                    except UpstreamFailure:
                        logger.warning(f"Skipping unreadable profile document at {key}")
        except (redis.RedisError, OSError) as exc:
            logger.error(f"Failed to scan profiles in Redis: {exc}")
            raise UpstreamFailure("Profile storage temporarily unavailable.") from exc
        return profiles

    async def close(self) -> None:
        """Close and disconnect the shared Redis client (call on shutdown)."""
        if self._client is None:
            return
        try:
            logger.info("Closing shared Redis client")
            await self._client.aclose()
        except Exception as e:
            logger.debug(f"Silent failure closing redis client: {e}")
        finally:
            self._client = None


class InMemoryProfileStore:
    """Process-local profile store, for development and tests."""

    def __init__(self) -> None:
        self._profiles: dict[str, str] = {}

    async def find_by_id(self, profile_id: str) -> Profile | None:
        raw = self._profiles.get(profile_id)
        return Profile.model_validate_json(raw) if raw else None

    async def save(self, profile: Profile) -> None:
        # Stored serialized so callers never share state with the store
        self._profiles[profile.id] = profile.model_dump_json()

    async def iter_profiles(self, exclude_id: str | None = None) -> list[Profile]:
        return [Profile.model_validate_json(raw) for pid, raw in self._profiles.items() if pid != exclude_id]

    async def close(self) -> None:
        return None


def create_profile_store() -> ProfileStore:
    if settings.PROFILE_STORE_BACKEND == "memory":
        logger.warning("Using in-memory profile store. Profiles will not survive a restart.")
        return InMemoryProfileStore()
    return RedisProfileStore()
