from enum import StrEnum
from pathlib import Path

from pydantic import BaseModel


class NamingPolicy(StrEnum):
    FROM_TITLE = "from_title"
    POSITIONAL = "positional"


class DownloadStatus(StrEnum):
    DOWNLOADED = "downloaded"
    FAILED = "failed"


class DocumentReference(BaseModel):
    """One harvestable document found on a listing page."""

    title: str | None = None
    download_url: str


class DownloadOutcome(BaseModel):
    reference: DocumentReference
    destination: Path
    status: DownloadStatus
    bytes_written: int = 0
    error: str | None = None

    @property
    def success(self) -> bool:
        return self.status == DownloadStatus.DOWNLOADED
