from __future__ import annotations


class NotFoundError(LookupError):
    """Unknown profession id or ladder level."""

    def __init__(self, message: str, *, missing_id: str) -> None:
        super().__init__(message)
        self.missing_id = missing_id


class CatalogError(ValueError):
    def __init__(self, errors: list[str]) -> None:
        super().__init__("invalid career catalog: " + "; ".join(errors))
        self.errors = errors
