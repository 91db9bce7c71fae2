# Application Layer
# =================
# Use cases and orchestration (no business rules):
# - distributor: fan-out of reviews to partner endpoints
# - sync_job: scheduled fetch -> merge -> auto-distribute cycle

from .distributor import Distributor, select_for_auto_distribution
from .sync_job import SyncJob, SyncReport, SyncState, is_sync_due

__all__ = [
    "Distributor",
    "select_for_auto_distribution",
    "SyncJob",
    "SyncReport",
    "SyncState",
    "is_sync_due",
]
