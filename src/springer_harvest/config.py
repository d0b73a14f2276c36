from pydantic import BaseModel, Field

SPRINGER_BASE_URL = "https://link.springer.com"

DEFAULT_QUERY_PARAMS: dict[str, str] = {
    "query": "",
    "search-within": "Journal",
    "package": "openaccessarticles",
    "facet-journal-id": "146",
}

DEFAULT_HEADERS: dict[str, str] = {
    "User-Agent": (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept": ("text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"),
    "Accept-Language": "en-US,en;q=0.9",
}

DEFAULT_TIMEOUT = 30.0
MAX_REDIRECTS = 10


class ListingSelectors(BaseModel):
    """CSS selectors locating documents on a listing page."""

    item: str = "li"
    title: str = "a.title"
    link: str = "a.pdf-link[href]"


class HarvestConfig(BaseModel):
    base_url: str = SPRINGER_BASE_URL
    search_path: str = "/search"
    page_path_template: str = "/search/page/{page}"
    query_params: dict[str, str] = Field(
        default_factory=lambda: DEFAULT_QUERY_PARAMS.copy()
    )

    document_suffix: str = ".pdf"

    timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0)
    max_redirects: int = Field(default=MAX_REDIRECTS, ge=0)
    headers: dict[str, str] = Field(default_factory=lambda: DEFAULT_HEADERS.copy())

    selectors: ListingSelectors = Field(default_factory=ListingSelectors)

    def with_journal(self, journal_id: str) -> "HarvestConfig":
        """Return a copy listing a different journal."""
        params = {**self.query_params, "facet-journal-id": journal_id}
        return self.model_copy(update={"query_params": params})


DEFAULT_CONFIG = HarvestConfig()
