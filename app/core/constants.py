"""
Core constants used across the application. Keep these simple and documented.
"""

# Redis key for a single profile document, formatted with the profile id
PROFILE_KEY: str = "{prefix}{profile_id}"

# User-facing messages
MESSAGE_PROFILE_SAVED: str = "Personality data saved successfully"
MESSAGE_PROFILE_COMPLETE: str = "Personality data already complete"
MESSAGE_TOP_K: str = "Top {k} similar users found."
MESSAGE_FEWER_AVAILABLE: str = "Requested {k} similar users, but only {available} are available."

# Similarity scores are clamped into this range to absorb float overshoot
MIN_SIMILARITY: float = -1.0
MAX_SIMILARITY: float = 1.0
