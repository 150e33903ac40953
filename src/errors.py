"""Exception types shared across the magazeen packages."""

from __future__ import annotations


class MagazeenError(Exception):
    """Base error for everything outside the clustering engine."""


class ValidationError(MagazeenError):
    """User input failed validation."""

    def __init__(self, message: str, field: str | None = None, value: object = None) -> None:
        super().__init__(message)
        self.field = field
        self.value = value


class ChatImportError(MagazeenError):
    """A Claude chat export could not be read."""


class PageLimitExceededError(MagazeenError):
    """Adding content would push the magazine past its page limit."""


class ScratchFileError(MagazeenError):
    """A scratch file is missing or has malformed lines."""

    def __init__(self, message: str, errors: list[str] | None = None) -> None:
        super().__init__(message)
        self.errors = errors or []
