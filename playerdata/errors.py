"""Exceptions raised while decoding player files and resolving profiles."""
from __future__ import annotations

from typing import Optional


class StructuralError(ValueError):
    """The document is truncated, corrupt or not an NBT compound."""


class ProfileError(RuntimeError):
    """Base class for profile resolution problems.

    Resolution errors are never fatal to a decoded player: the caller keeps
    the unresolved entity and decides what to report.
    """

    def __init__(self, message: str, *, uuid: Optional[str] = None) -> None:
        super().__init__(message)
        self.uuid = uuid


class UnknownProfile(ProfileError):
    """The session server has no profile for the UUID (HTTP 204)."""


class RateLimited(ProfileError):
    """The session server refused the request (HTTP 429)."""


class ResolutionFailure(ProfileError):
    """Network failure, unexpected status or malformed profile payload."""
