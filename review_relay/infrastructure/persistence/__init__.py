from .stores import ReviewStore, EndpointStore, SettingsStore
from .database import (
    Database,
    SQLiteReviewStore,
    SQLiteEndpointStore,
    SQLiteSettingsStore,
    init_database,
)

__all__ = [
    "ReviewStore",
    "EndpointStore",
    "SettingsStore",
    "Database",
    "SQLiteReviewStore",
    "SQLiteEndpointStore",
    "SQLiteSettingsStore",
    "init_database",
]
