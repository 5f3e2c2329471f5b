"""
Centralized DTOs for Steamgraph read-side services.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from steamgraph.domain.models import DEFAULT_COLOR


class NodeTagDTO(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: int
    name: str
    weight: int


class NodeDTO(BaseModel):
    """One app with its weighted tags, as served to the presentation layer."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    id: int
    name: str | None = None
    description: str | None = None
    color: str = DEFAULT_COLOR
    player_count: int = Field(default=0, serialization_alias="playerCount")
    tags: list[NodeTagDTO] = Field(default_factory=list)


class CatalogStatsDTO(BaseModel):
    model_config = ConfigDict(extra="forbid")

    apps: int
    tags: int
