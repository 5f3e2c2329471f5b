"""Sync watermark model."""

from __future__ import annotations

from dataclasses import dataclass, replace


@dataclass(frozen=True)
class SyncWatermark:
    """How far previous sync passes got, per feed.

    ``taxonomy_hash`` is the tag list version hash last applied and
    ``catalog_cursor`` the unix time of the last applied app listing. A
    ``None`` value means the feed has never completed and the next pass
    performs a full fetch.

    Instances are immutable; use :meth:`with_taxonomy_hash` and
    :meth:`with_catalog_cursor` to derive the advanced watermark.
    """

    taxonomy_hash: int | None = None
    catalog_cursor: int | None = None

    @classmethod
    def empty(cls) -> "SyncWatermark":
        return cls()

    @property
    def is_empty(self) -> bool:
        return self.taxonomy_hash is None and self.catalog_cursor is None

    def with_taxonomy_hash(self, value: int) -> "SyncWatermark":
        return replace(self, taxonomy_hash=value)

    def with_catalog_cursor(self, value: int) -> "SyncWatermark":
        return replace(self, catalog_cursor=value)

    def to_dict(self) -> dict[str, int | None]:
        return {
            "taxonomy_hash": self.taxonomy_hash,
            "catalog_cursor": self.catalog_cursor,
        }
