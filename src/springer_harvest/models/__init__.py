from springer_harvest.models.document import (
    DocumentReference,
    DownloadOutcome,
    DownloadStatus,
    NamingPolicy,
)

__all__ = [
    "DocumentReference",
    "DownloadOutcome",
    "DownloadStatus",
    "NamingPolicy",
]
