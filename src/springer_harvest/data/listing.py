"""Listing page URLs and extraction of document references from them."""

import logging
from typing import Protocol
from urllib.parse import urlencode, urljoin, urlsplit

from bs4 import BeautifulSoup, Tag
from bs4.builder import ParserRejectedMarkup

from springer_harvest.config import DEFAULT_CONFIG, HarvestConfig
from springer_harvest.errors import ParseError
from springer_harvest.models.document import DocumentReference, NamingPolicy

logger = logging.getLogger(__name__)


def build_page_url(page: int, config: HarvestConfig = DEFAULT_CONFIG) -> str:
    """Return the listing URL for *page* (1-based).

    Page 1 is the canonical search URL; later pages carry the page number in
    the path. Every page shares the same query string.
    """
    if page < 1:
        raise ValueError(f"Page index must be >= 1, got {page}")

    if page == 1:
        path = config.search_path
    else:
        path = config.page_path_template.format(page=page)
    return f"{config.base_url}{path}?{urlencode(config.query_params)}"


class ExtractionStrategy(Protocol):
    """Turns one listing page body into document references."""

    def extract(self, body: str) -> list[DocumentReference]: ...


class _ListingExtractor:
    capture_titles: bool = False

    def __init__(self, config: HarvestConfig = DEFAULT_CONFIG) -> None:
        self.base_url = config.base_url
        self.suffix = config.document_suffix.lower()
        self.selectors = config.selectors

    def extract(self, body: str) -> list[DocumentReference]:
        soup = _parse(body)
        refs: list[DocumentReference] = []
        skipped = 0

        for item in soup.select(self.selectors.item):
            link = item.select_one(self.selectors.link)
            if link is None:
                skipped += 1
                continue

            href = str(link.get("href", "")).strip()
            try:
                path = urlsplit(href).path
                url = urljoin(self.base_url, href)
            except ValueError:
                logger.debug("Skipping malformed href %r", href)
                skipped += 1
                continue

            if self.suffix not in path.lower():
                skipped += 1
                continue

            title = self._title(item) if self.capture_titles else None
            refs.append(DocumentReference(title=title, download_url=url))

        logger.debug("Extracted %d documents, skipped %d items", len(refs), skipped)
        return refs

    def _title(self, item: Tag) -> str | None:
        el = item.select_one(self.selectors.title)
        if el is None:
            return None
        return " ".join(el.get_text().split())


class TitleAwareExtractor(_ListingExtractor):
    """Captures each document's title along with its download URL."""

    capture_titles = True


class IndexOnlyExtractor(_ListingExtractor):
    """Captures download URLs only; files are named by position."""


def extractor_for(
    policy: NamingPolicy, config: HarvestConfig = DEFAULT_CONFIG
) -> ExtractionStrategy:
    if policy == NamingPolicy.POSITIONAL:
        return IndexOnlyExtractor(config)
    return TitleAwareExtractor(config)


def _parse(body: str) -> BeautifulSoup:
    if not body or not body.strip():
        raise ParseError("Listing body is empty")
    try:
        soup = BeautifulSoup(body, "html.parser")
    except ParserRejectedMarkup as e:
        raise ParseError(f"Listing body rejected by parser: {e}") from e

    if soup.find() is None:
        raise ParseError("Listing body contains no markup")
    return soup
