"""Decode Minecraft player files and resolve player profiles."""
from __future__ import annotations

from .config import ResolverSettings
from .errors import ProfileError, RateLimited, ResolutionFailure, StructuralError, UnknownProfile
from .player import (
    MAX_AIR,
    MAX_FOOD,
    MAX_HEALTH,
    Dimension,
    Item,
    Player,
    Vector3d,
    Vector3i,
    identity_from_filename,
)
from .profile import IdentityMode, ProfileResolver, ResolutionResult, identity_mode
from .tags import load_document, parse_document

__version__ = "0.1.0"

__all__ = [
    "Dimension",
    "IdentityMode",
    "Item",
    "MAX_AIR",
    "MAX_FOOD",
    "MAX_HEALTH",
    "Player",
    "ProfileError",
    "ProfileResolver",
    "RateLimited",
    "ResolutionFailure",
    "ResolutionResult",
    "ResolverSettings",
    "StructuralError",
    "UnknownProfile",
    "Vector3d",
    "Vector3i",
    "identity_from_filename",
    "identity_mode",
    "load_document",
    "parse_document",
]
