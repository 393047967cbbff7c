"""Schemas for GET /markets/{id}."""
from __future__ import annotations

from typing import List, Optional

from pydantic import Field

from marketbook.api.schemas.common import CamelModel


class MemberOut(CamelModel):
    id: int
    name: str = ""
    avatar_url: Optional[str] = None
    role: Optional[str] = None
    status: str
    is_active: bool


class MarketOut(CamelModel):
    id: int
    name: str
    members: List[MemberOut] = Field(default_factory=list, alias="Members")
