"""Read-only views over the synced catalog."""

from __future__ import annotations

from typing import List, Optional

from steamgraph.infrastructure.db.repositories import AppRepository, TagRepository
from steamgraph.infrastructure.observability import get_logger

from .dto import CatalogStatsDTO, NodeDTO


class CatalogViewService:
    """Service exposing the app/tag graph for APIs and CLIs.

    Uses repository injection pattern - caller manages connection lifecycle.
    """

    def __init__(
        self, app_repository: AppRepository, tag_repository: TagRepository
    ) -> None:
        self._app_repository = app_repository
        self._tag_repository = tag_repository
        self._logger = get_logger(__name__)

    def list_nodes(self, *, limit: Optional[int] = None) -> List[NodeDTO]:
        """Every app exactly once, each with a possibly empty tag list."""
        effective_limit = None if limit is not None and limit <= 0 else limit
        rows = self._app_repository.list_nodes(limit=effective_limit)
        nodes = [NodeDTO.model_validate(row) for row in rows]
        self._logger.debug("Found %d nodes", len(nodes))
        return nodes

    def stats(self) -> CatalogStatsDTO:
        return CatalogStatsDTO(
            apps=self._app_repository.count(), tags=self._tag_repository.count()
        )
