def redact_id(user_id: str | None, visible_chars: int = 6) -> str:
    """
    Mask a user id or token before it reaches the logs.

    Long values keep a short prefix for correlating log lines; values too short
    to keep a prefix are masked completely.
    """
    if not user_id:
        return "None"
    if len(user_id) <= visible_chars * 2:
        return "***"
    return f"{user_id[:visible_chars]}***"
