"""Typed views of the Steam Web API JSON bodies.

Each model maps the remote field names onto ours through aliases and ignores
fields we do not use. Optional fields carry the defaults documented on the
model so callers never probe raw dictionaries.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from steamgraph.domain.models import CatalogItem, TagWeight, TaxonomyEntry
from steamgraph.infrastructure.http import SteamApiError


class _SteamModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


# --- IStoreService/GetTagList ---
class TagPayload(_SteamModel):
    id: int = Field(alias="tagid")
    name: str

    def to_domain(self) -> TaxonomyEntry:
        return TaxonomyEntry(id=self.id, name=self.name)


class TagListPayload(_SteamModel):
    """``response`` of GetTagList. ``tags`` is absent when the hash matched."""

    version_hash: int = 0
    tags: list[TagPayload] = Field(default_factory=list)


# --- IStoreService/GetAppList ---
class AppRefPayload(_SteamModel):
    id: int = Field(alias="appid")
    name: str = ""


class AppListPayload(_SteamModel):
    """``response`` of GetAppList. Steam omits ``apps`` when nothing matched."""

    apps: list[AppRefPayload] = Field(default_factory=list)
    have_more_results: bool = False
    last_appid: int | None = None


# --- IStoreBrowseService/GetItems ---
class StoreTagPayload(_SteamModel):
    tag_id: int = Field(alias="tagid")
    weight: int = 0


class StoreItemPayload(_SteamModel):
    """One entry of ``store_items``.

    ``full_description`` defaults to an empty string and ``tags`` to an empty
    list. Steam spells the region flag ``unvailable_for_country_restriction``;
    the correctly spelled key is accepted too.
    """

    id: int | None = Field(default=None, alias="appid")
    name: str = ""
    full_description: str = ""
    tags: list[StoreTagPayload] = Field(default_factory=list)
    unvailable_for_country_restriction: bool = False
    unavailable_for_country_restriction: bool = False

    @property
    def region_locked(self) -> bool:
        return (
            self.unvailable_for_country_restriction
            or self.unavailable_for_country_restriction
        )

    def to_domain(self) -> CatalogItem:
        assert self.id is not None
        return CatalogItem(
            id=self.id,
            name=self.name,
            description=self.full_description,
            tags=[TagWeight(tag_id=tag.tag_id, weight=tag.weight) for tag in self.tags],
        )


class StoreItemsPayload(_SteamModel):
    store_items: list[StoreItemPayload] = Field(default_factory=list)


# --- ISteamUserStats/GetNumberOfCurrentPlayers ---
class PlayerCountPayload(_SteamModel):
    player_count: int = 0


def parse_response(payload: dict, model: type[_SteamModel], endpoint: str):
    """Validate the ``response`` envelope of a Steam body into ``model``.

    A body without a ``response`` object is treated as a protocol error
    rather than an empty result, so a broken upstream never looks like
    "nothing changed".
    """
    body = payload.get("response")
    if not isinstance(body, dict):
        raise SteamApiError(f"{endpoint} returned no 'response' object")
    try:
        return model.model_validate(body)
    except ValidationError as exc:
        raise SteamApiError(f"{endpoint} returned an unexpected payload: {exc}") from exc
