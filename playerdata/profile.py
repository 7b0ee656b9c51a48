"""Resolve a player's display name and skin texture.

Legacy accounts are keyed by name and get a deterministic skin URL without
touching the network. Online accounts are looked up on the session server,
whose response nests a base64-encoded JSON texture document inside the
profile JSON.
"""
from __future__ import annotations

import base64
import binascii
import json
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, List, Optional, Tuple

import requests

from .config import ResolverSettings
from .errors import ProfileError, RateLimited, ResolutionFailure, UnknownProfile
from .player import Player

logger = logging.getLogger(__name__)


class IdentityMode(str, Enum):
    OFFLINE = "offline"
    ONLINE = "online"


def identity_mode(player: Player) -> IdentityMode:
    return IdentityMode.OFFLINE if player.is_offline else IdentityMode.ONLINE


@dataclass(frozen=True)
class ResolutionResult:
    """Outcome of resolving one player in a batch."""

    player: Player
    error: Optional[ProfileError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def parse_profile(payload: Any) -> Tuple[str, Optional[str]]:
    """Extract ``(name, skin_url)`` from a session-server profile document.

    Raises :class:`ValueError` if any required part is missing or malformed.
    """
    if not isinstance(payload, dict):
        raise ValueError("Profile response is not a JSON object")
    name = payload.get("name")
    if not isinstance(name, str):
        raise ValueError("Profile response has no name")
    properties = payload.get("properties")
    if not isinstance(properties, list) or not properties or not isinstance(properties[0], dict):
        raise ValueError("Profile response has no properties")
    encoded = properties[0].get("value")
    if not isinstance(encoded, str):
        raise ValueError("Profile property has no value")
    try:
        textures_doc = json.loads(base64.b64decode(encoded).decode("utf-8"))
    except (binascii.Error, UnicodeDecodeError) as exc:
        raise ValueError(f"Profile property value is not base64 JSON: {exc}") from exc
    textures = textures_doc.get("textures") if isinstance(textures_doc, dict) else None
    if not isinstance(textures, dict):
        raise ValueError("Texture document has no textures")

    skin = textures.get("SKIN")
    if skin is None:
        return name, None
    url = skin.get("url") if isinstance(skin, dict) else None
    if not isinstance(url, str):
        raise ValueError("SKIN texture has no url")
    return name, url


class ProfileResolver:
    """Looks up player profiles. Each call makes at most one request."""

    def __init__(self, settings: Optional[ResolverSettings] = None) -> None:
        self.settings = settings or ResolverSettings()
        self.session = requests.Session()
        self.session.headers.update({"User-Agent": self.settings.user_agent})

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "ProfileResolver":
        return self

    def __exit__(self, *_: Any) -> None:
        self.close()

    def resolve(self, player: Player) -> Player:
        """Return a copy of ``player`` with its name and skin URL resolved.

        Raises :class:`UnknownProfile`, :class:`RateLimited` or
        :class:`ResolutionFailure`; the given player is never modified.
        """
        if identity_mode(player) is IdentityMode.OFFLINE:
            return player.with_profile(player.name, self.settings.skin_url(player.name))
        name, skin_url = self._fetch_profile(player.uuid)
        return player.with_profile(name, skin_url)

    def resolve_many(self, players: Iterable[Player], max_workers: int = 4) -> List[ResolutionResult]:
        """Resolve players concurrently, keeping input order.

        ``requests.Session`` is not thread-safe, so every worker thread uses a
        resolver of its own with the same settings. Errors are captured per
        player; nothing here throttles against the session server's rate
        limit.
        """
        local = threading.local()
        workers: List[ProfileResolver] = []

        def resolve_captured(player: Player) -> ResolutionResult:
            resolver = getattr(local, "resolver", None)
            if resolver is None:
                resolver = local.resolver = ProfileResolver(self.settings)
                workers.append(resolver)
            try:
                return ResolutionResult(resolver.resolve(player))
            except ProfileError as exc:
                return ResolutionResult(player, exc)

        try:
            with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="playerdata-profile") as executor:
                return list(executor.map(resolve_captured, players))
        finally:
            for resolver in workers:
                resolver.close()

    def _fetch_profile(self, uuid: str) -> Tuple[str, Optional[str]]:
        url = self.settings.profile_url(uuid)
        logger.debug("Requesting profile %s", url)
        try:
            resp = self.session.get(
                url,
                headers={"Content-Type": "application/json"},
                timeout=self.settings.timeout,
            )
        except requests.RequestException as exc:
            raise ResolutionFailure(f"Profile request for {uuid} failed: {exc}", uuid=uuid) from exc

        if resp.status_code == 204:
            logger.warning("Unrecognized UUID %s", uuid)
            raise UnknownProfile(f"No profile for UUID {uuid}", uuid=uuid)
        if resp.status_code == 429:
            logger.warning(
                "Rate limited while resolving %s; the session server allows one request per minute per player",
                uuid,
            )
            raise RateLimited(f"Too many requests while resolving {uuid}", uuid=uuid)
        if not 200 <= resp.status_code < 300:
            raise ResolutionFailure(f"Session server returned {resp.status_code} for {uuid}", uuid=uuid)

        try:
            name, skin_url = parse_profile(resp.json())
        except ValueError as exc:
            raise ResolutionFailure(f"Malformed profile for {uuid}: {exc}", uuid=uuid) from exc
        logger.debug("Resolved %s to %s (skin: %s)", uuid, name, skin_url or "none")
        return name, skin_url
