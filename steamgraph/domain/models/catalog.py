"""Catalog domain models: Steam apps and the tags they carry."""

from __future__ import annotations

from dataclasses import dataclass, field

# Colour stored for apps the store does not assign one to.
DEFAULT_COLOR = "#000000"


@dataclass(frozen=True)
class TaxonomyEntry:
    """A Steam store tag. Names may change over time; ids never do."""

    id: int
    name: str


@dataclass(frozen=True)
class TagWeight:
    """Weight of a single tag on an app."""

    tag_id: int
    weight: int


@dataclass
class CatalogItem:
    """Domain model representing a Steam app together with its weighted tags.

    ``color`` and ``popularity`` are optional on the remote side; the
    defaults here are the values written to the store when the remote
    omits them.
    """

    id: int
    name: str
    description: str = ""
    color: str = DEFAULT_COLOR
    popularity: int = 0
    tags: list[TagWeight] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.color:
            self.color = DEFAULT_COLOR
        if self.popularity is None:
            self.popularity = 0

    @property
    def tag_ids(self) -> list[int]:
        return [tag.tag_id for tag in self.tags]
