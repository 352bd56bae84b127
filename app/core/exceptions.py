"""
Error taxonomy shared by the profile core and the API layer.

Every failure carries a machine-readable ``kind`` and a human-readable message.
"""


class TasteMatchError(Exception):
    kind: str = "error"
    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, str]:
        return {"message": self.message, "kind": self.kind}


class InvalidInput(TasteMatchError):
    """Malformed request data: empty titles, unknown service type, bad k, dimension mismatch."""

    kind = "invalid_input"
    status_code = 400


class NotFound(TasteMatchError):
    """Referenced profile is missing or has no embedding yet."""

    kind = "not_found"
    status_code = 404


class UpstreamFailure(TasteMatchError):
    """Embedding provider or profile store failed. Never retried by the core."""

    kind = "upstream_failure"
    status_code = 502


class Unauthorized(TasteMatchError):
    kind = "unauthorized"
    status_code = 401
