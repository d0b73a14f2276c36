"""Sequential harvest of a range of listing pages."""

import logging
import os
from pathlib import Path

from springer_harvest.config import DEFAULT_CONFIG, HarvestConfig
from springer_harvest.data.downloader import download
from springer_harvest.data.listing import build_page_url, extractor_for
from springer_harvest.data.session import HarvestSession
from springer_harvest.errors import ParseError, StorageError, TransportError
from springer_harvest.models.document import DocumentReference, NamingPolicy
from springer_harvest.naming import derive_name
from springer_harvest.output.reporter import Reporter

logger = logging.getLogger(__name__)


class Harvester:
    """Drives fetch -> extract -> download over an inclusive page range.

    A failed page or a failed document is reported and skipped; only an
    unusable output directory stops the run.
    """

    def __init__(
        self,
        session: HarvestSession,
        output_dir: Path,
        reporter: Reporter,
        config: HarvestConfig = DEFAULT_CONFIG,
        naming: NamingPolicy = NamingPolicy.FROM_TITLE,
    ) -> None:
        self.session = session
        self.output_dir = Path(output_dir)
        self.reporter = reporter
        self.config = config
        self.extractor = extractor_for(naming, config)

    def run(self, start_page: int, end_page: int) -> None:
        """Harvest pages ``start_page..end_page`` inclusive.

        Raises:
            ValueError: If the page range is invalid.
            StorageError: If the output directory is missing or not writable.
        """
        if start_page < 1 or end_page < start_page:
            raise ValueError(f"Invalid page range: {start_page}..{end_page}")
        self._check_output_dir()

        for page in range(start_page, end_page + 1):
            self._harvest_page(page)

    def _check_output_dir(self) -> None:
        if not self.output_dir.is_dir():
            raise StorageError(self.output_dir, "Output directory does not exist")
        if not os.access(self.output_dir, os.W_OK | os.X_OK):
            raise StorageError(self.output_dir, "Output directory is not writable")

    def _harvest_page(self, page: int) -> None:
        url = build_page_url(page, self.config)
        self.reporter.page_started(page, url)

        try:
            refs = self._fetch_listing(url)
        except (TransportError, ParseError) as e:
            logger.warning("Page %d failed: %s", page, e)
            self.reporter.page_failed(page, url, e)
            return

        logger.info("Page %d: %d documents", page, len(refs))
        self.reporter.page_extracted(page, len(refs))

        for ordinal, ref in enumerate(refs, 1):
            self._harvest_document(page, ordinal, ref)

    def _fetch_listing(self, url: str) -> list[DocumentReference]:
        body = self.session.fetch_text(url)
        return self.extractor.extract(body)

    def _harvest_document(
        self, page: int, ordinal: int, ref: DocumentReference
    ) -> None:
        filename = derive_name(ref, page, ordinal, self.config.document_suffix)
        destination = self.output_dir / filename
        self.reporter.download_started(page, ordinal, ref, destination)

        outcome = download(self.session, ref, destination)
        if outcome.success:
            self.reporter.download_succeeded(page, outcome)
        else:
            self.reporter.download_failed(page, outcome)
