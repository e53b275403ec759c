"""
Application errors for backend probing and configuration.

Backend errors never reach the HTTP layer: the document client absorbs them and
reports "no result" instead. CatalogError is raised at startup only.
SlashBodyError is turned into an error reply by the route.
"""


class BackendError(Exception):
    """Raised when a document backend call fails (network, non-2xx, malformed payload)."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class BackendNotImplementedError(BackendError):
    """Raised when an API variant's endpoint does not exist on this backend (404/405/410/501)."""


class CatalogError(Exception):
    """Raised when the clarification catalog file is missing or invalid."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class SlashBodyError(Exception):
    """Raised when the inbound slash-command body cannot be parsed."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)
