from __future__ import annotations


class JournalError(Exception):
    """Base class for expected journal-domain failures."""

    status_code = 400


class UserNotFound(JournalError):
    status_code = 404

    def __init__(self) -> None:
        super().__init__("User not found")


class EntryNotFound(JournalError):
    status_code = 404

    def __init__(self) -> None:
        super().__init__("Entry not found")


class CollectionNotFound(JournalError):
    status_code = 404

    def __init__(self) -> None:
        super().__init__("Collection not found")


class CollectionExists(JournalError):
    status_code = 409

    def __init__(self, name: str) -> None:
        super().__init__(f"Collection '{name}' already exists")
        self.name = name


class InvalidMood(JournalError):
    status_code = 422

    def __init__(self, mood: str | None = None) -> None:
        super().__init__("Invalid mood")
        self.mood = mood


class RateLimited(JournalError):
    status_code = 429

    def __init__(self, remaining: int = 0, reset_in_seconds: float = 0.0) -> None:
        super().__init__("Too many requests. Please try again later.")
        self.remaining = remaining
        self.reset_in_seconds = reset_in_seconds


__all__ = [
    "CollectionExists",
    "CollectionNotFound",
    "EntryNotFound",
    "InvalidMood",
    "JournalError",
    "RateLimited",
    "UserNotFound",
]
