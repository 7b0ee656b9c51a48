"""Settings for the profile resolver."""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

DEFAULT_SKIN_HOST = "www.minecraft.net"
DEFAULT_SESSION_HOST = "sessionserver.mojang.com"
DEFAULT_TIMEOUT = 15.0
DEFAULT_USER_AGENT = "playerdata"


@dataclass(frozen=True)
class ResolverSettings:
    skin_host: str = DEFAULT_SKIN_HOST
    session_host: str = DEFAULT_SESSION_HOST
    timeout: float = DEFAULT_TIMEOUT
    user_agent: str = DEFAULT_USER_AGENT

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ResolverSettings":
        """Build settings from ``PLAYERDATA_*`` environment variables."""
        env = os.environ if environ is None else environ
        timeout_text = env.get("PLAYERDATA_TIMEOUT")
        if timeout_text:
            try:
                timeout = float(timeout_text)
            except ValueError as exc:
                raise ValueError(f"PLAYERDATA_TIMEOUT must be a number, got {timeout_text!r}") from exc
            if timeout <= 0:
                raise ValueError("PLAYERDATA_TIMEOUT must be positive")
        else:
            timeout = DEFAULT_TIMEOUT
        return cls(
            skin_host=env.get("PLAYERDATA_SKIN_HOST") or DEFAULT_SKIN_HOST,
            session_host=env.get("PLAYERDATA_SESSION_HOST") or DEFAULT_SESSION_HOST,
            timeout=timeout,
        )

    def skin_url(self, name: str) -> str:
        return f"http://{self.skin_host}/skin/{name}.png"

    def profile_url(self, uuid: str) -> str:
        return f"https://{self.session_host}/session/minecraft/profile/{uuid}"
