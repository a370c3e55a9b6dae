"""Base exception shared by every est subpackage."""


class EstError(Exception):
    """Base exception for all est errors."""

    def __init__(self, message: str, *, details: dict[str, object] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}
