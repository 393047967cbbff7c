"""
marketbook.config.marketplace – outbound marketplace API client config.

Env vars: MARKETPLACE_API_URL, MARKETPLACE_API_TOKEN, MARKETPLACE_API_TIMEOUT.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class MarketplaceClientConfig:
    base_url: str
    token: Optional[str] = None
    timeout: float = 15.0

    def __post_init__(self) -> None:
        url = (self.base_url or "").strip()
        if not url.startswith(("http://", "https://")):
            raise ValueError("MARKETPLACE_API_URL must start with http:// or https://")
        if self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout!r}")

    @classmethod
    def from_env(cls, **overrides: object) -> MarketplaceClientConfig:
        base_url = str(
            overrides.get("base_url")
            or os.environ.get("MARKETPLACE_API_URL", "http://localhost:8000/api/v1")
        ).strip().rstrip("/")
        raw_token = overrides.get("token") or os.environ.get("MARKETPLACE_API_TOKEN")
        token = str(raw_token).strip() if raw_token else None
        timeout = float(overrides.get("timeout") or os.environ.get("MARKETPLACE_API_TIMEOUT", "15"))
        return cls(base_url=base_url, token=token or None, timeout=timeout)


def load_marketplace_config(**overrides: object) -> MarketplaceClientConfig:
    return MarketplaceClientConfig.from_env(**overrides)
