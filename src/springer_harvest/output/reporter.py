from pathlib import Path
from typing import Protocol

from rich.console import Console
from rich.markup import escape

from springer_harvest.models.document import DocumentReference, DownloadOutcome


class Reporter(Protocol):
    """Sink for human-readable harvest progress."""

    def page_started(self, page: int, url: str) -> None: ...

    def page_failed(self, page: int, url: str, error: Exception) -> None: ...

    def page_extracted(self, page: int, count: int) -> None: ...

    def download_started(
        self,
        page: int,
        ordinal: int,
        reference: DocumentReference,
        destination: Path,
    ) -> None: ...

    def download_succeeded(self, page: int, outcome: DownloadOutcome) -> None: ...

    def download_failed(self, page: int, outcome: DownloadOutcome) -> None: ...


class ConsoleReporter:
    """Prints each harvest event to a rich console and keeps a tally."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()
        self.pages_processed = 0
        self.pages_failed = 0
        self.downloaded = 0
        self.failed = 0

    def page_started(self, page: int, url: str) -> None:
        self.pages_processed += 1
        self.console.print(f"[cyan]Processing page {page}:[/cyan] {escape(url)}")

    def page_failed(self, page: int, url: str, error: Exception) -> None:
        self.pages_failed += 1
        self.console.print(
            f"[red]Failed to find PDF links for page {page}:[/red] "
            f"{escape(str(error))}"
        )

    def page_extracted(self, page: int, count: int) -> None:
        self.console.print(f"  Found {count} document(s) on page {page}")

    def download_started(
        self,
        page: int,
        ordinal: int,
        reference: DocumentReference,
        destination: Path,
    ) -> None:
        title = reference.title or f"#{ordinal}"
        self.console.print(
            f"  Downloading {escape(title)} from {escape(reference.download_url)}"
        )

    def download_succeeded(self, page: int, outcome: DownloadOutcome) -> None:
        self.downloaded += 1
        self.console.print(
            "  [green]Successfully downloaded:[/green] "
            f"{escape(str(outcome.destination))}"
        )

    def download_failed(self, page: int, outcome: DownloadOutcome) -> None:
        self.failed += 1
        self.console.print(
            f"  [red]Failed to download (page {page})[/red] "
            f"{escape(outcome.reference.download_url)}: {escape(outcome.error or '')}"
        )

    def print_summary(self) -> None:
        self.console.print(
            f"\nProcessed {self.pages_processed} page(s) "
            f"({self.pages_failed} failed). "
            f"Downloaded {self.downloaded} document(s), {self.failed} failed."
        )
