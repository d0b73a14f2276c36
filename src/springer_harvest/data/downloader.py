import logging
from pathlib import Path

import httpx

from springer_harvest.data.session import HarvestSession, check_status
from springer_harvest.errors import StorageError, TransportError
from springer_harvest.models.document import (
    DocumentReference,
    DownloadOutcome,
    DownloadStatus,
)

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


def stream_to_file(session: HarvestSession, url: str, destination: Path) -> int:
    """Stream the body at *url* into *destination* and return bytes written.

    Any existing file at *destination* is overwritten. A partially written
    file is removed when the transfer fails.

    Raises:
        TransportError: If the fetch fails or returns a 4xx/5xx status.
        StorageError: If the destination cannot be opened or written.
    """
    with session.fetch(url) as response:
        check_status(response)
        try:
            out = destination.open("wb")
        except OSError as e:
            raise StorageError(destination, f"Cannot open for writing ({e})") from e

        written = 0
        try:
            with out:
                for chunk in _iter_body(response, url):
                    try:
                        out.write(chunk)
                    except OSError as e:
                        raise StorageError(destination, f"Write failed ({e})") from e
                    written += len(chunk)
        except (TransportError, StorageError):
            destination.unlink(missing_ok=True)
            raise
        except OSError as e:
            # close() flushing the last buffered chunk
            destination.unlink(missing_ok=True)
            raise StorageError(destination, f"Write failed ({e})") from e

    return written


def _iter_body(response: httpx.Response, url: str):
    try:
        yield from response.iter_bytes(CHUNK_SIZE)
    except httpx.HTTPError as e:
        raise TransportError(url, f"Connection lost mid-transfer: {e}") from e


def download(
    session: HarvestSession, reference: DocumentReference, destination: Path
) -> DownloadOutcome:
    """Download one document, capturing failure in the returned outcome."""
    try:
        written = stream_to_file(session, reference.download_url, destination)
    except (TransportError, StorageError) as e:
        logger.warning("Download failed for %s: %s", reference.download_url, e)
        return DownloadOutcome(
            reference=reference,
            destination=destination,
            status=DownloadStatus.FAILED,
            error=str(e),
        )

    logger.info("Downloaded: %s (%d bytes)", destination.name, written)
    return DownloadOutcome(
        reference=reference,
        destination=destination,
        status=DownloadStatus.DOWNLOADED,
        bytes_written=written,
    )
