# =============================================================================
# course_core/api/origin.py
# Response provenance
# =============================================================================
"""
Where a piece of data came from.

The transport reports NETWORK / CACHE / UNKNOWN per response; the sync
coordinators add LOCAL (offline, store only) and ERROR (remote read failed,
store only). The value travels with each result instead of living in a
process-wide cell, so reads of different entity types cannot overwrite
each other's provenance.
"""

from enum import Enum
from typing import Any


class DataSource(Enum):
    """Provenance of the data shown to the user."""
    NETWORK = "INTERNET"   # Live round-trip to the backend
    CACHE = "CACHE"        # Served by the transparent HTTP response cache
    UNKNOWN = "UNKNOWN"    # Transport could not tell
    LOCAL = "LOCAL"        # Offline, read from the local store only
    ERROR = "ERROR"        # Remote read failed, last-known-good from the store

    @property
    def is_remote(self) -> bool:
        return self in (DataSource.NETWORK, DataSource.CACHE, DataSource.UNKNOWN)


def origin_of(response: Any) -> DataSource:
    """
    Classify a response by how the transport produced it.

    requests-cache marks every response it returns with `from_cache`;
    a plain requests session has no such attribute.
    """
    from_cache = getattr(response, "from_cache", None)
    if from_cache is True:
        return DataSource.CACHE
    if from_cache is False:
        return DataSource.NETWORK
    return DataSource.UNKNOWN
