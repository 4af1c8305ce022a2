"""Record store backends.

``build_record_store`` is the single place that decides which backend the
pipeline talks to: the local JSON store alone, or the remote SQL store with
the local store as fallback when DATABASE_URL is configured.
"""

from ..config import Config
from .base import RecordStore, source_file_name
from .fallback import FallbackRecordStore
from .local import LocalJsonStore
from .remote import SqlRecordStore, normalize_database_url


def build_record_store(cfg: Config) -> tuple[RecordStore, LocalJsonStore]:
    """Create the record store for ``cfg``.

    Returns:
        The store stages should use, and the local store that holds the
        local-only documents (templates, daily state, generated sites).
    """
    local = LocalJsonStore(cfg.DATA_DIR)
    if not cfg.has_remote_database():
        return local, local
    remote = SqlRecordStore(cfg.DATABASE_URL, cfg.get_database_connection_args())
    return FallbackRecordStore(remote, local), local


__all__ = [
    "FallbackRecordStore",
    "LocalJsonStore",
    "RecordStore",
    "SqlRecordStore",
    "build_record_store",
    "normalize_database_url",
    "source_file_name",
]
