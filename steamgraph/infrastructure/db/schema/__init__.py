from .manager import ensure_schema
from .tables import (SCHEMA_APP_SQL, SCHEMA_APP_TAGS_SQL, SCHEMA_SYNC_RUNS_SQL,
                     SCHEMA_TAGS_SQL)

__all__ = [
    "SCHEMA_APP_SQL",
    "SCHEMA_APP_TAGS_SQL",
    "SCHEMA_SYNC_RUNS_SQL",
    "SCHEMA_TAGS_SQL",
    "ensure_schema",
]
