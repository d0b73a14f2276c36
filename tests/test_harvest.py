from pathlib import Path

import httpx
import pytest

from springer_harvest.data.session import HarvestSession
from springer_harvest.errors import StorageError
from springer_harvest.harvest import Harvester
from springer_harvest.models.document import (
    DocumentReference,
    DownloadOutcome,
    NamingPolicy,
)

PAGE_TWO = """
<html><body><ol>
  <li>
    <a class="title" href="/article/10.1007/a">Attention: Is It All You Need?</a>
    <a class="pdf-link" href="/content/pdf/10.1007/a.pdf">Download PDF</a>
  </li>
  <li><a class="title" href="/article/10.1007/b">Preview only</a></li>
</ol></body></html>
"""

PAGE_THREE = """
<html><body><ol>
  <li>
    <a class="title">First</a>
    <a class="pdf-link" href="/content/pdf/10.1007/missing.pdf">PDF</a>
  </li>
  <li>
    <a class="title">Second</a>
    <a class="pdf-link" href="/content/pdf/10.1007/c.pdf">PDF</a>
  </li>
</ol></body></html>
"""

PAGE_FIVE = """
<html><body><ol>
  <li>
    <a class="title">Bad</a>
    <a class="pdf-link" href="/content/pdf/a\x01b.pdf">PDF</a>
  </li>
  <li>
    <a class="title">Broken Host</a>
    <a class="pdf-link" href="http://[broken/a.pdf">PDF</a>
  </li>
  <li>
    <a class="title">Good</a>
    <a class="pdf-link" href="/content/pdf/10.1007/good.pdf">PDF</a>
  </li>
</ol></body></html>
"""

PDF_BYTES = b"%PDF-1.4 test document"


def _springer(request: httpx.Request) -> httpx.Response:
    path = request.url.path
    if path == "/search":
        return httpx.Response(500, text="Internal Server Error")
    if path == "/search/page/2":
        return httpx.Response(200, text=PAGE_TWO)
    if path == "/search/page/3":
        return httpx.Response(200, text=PAGE_THREE)
    if path == "/search/page/4":
        return httpx.Response(200, text="")
    if path == "/search/page/5":
        return httpx.Response(200, text=PAGE_FIVE)
    if path.endswith("/missing.pdf"):
        return httpx.Response(404)
    if path.endswith(".pdf"):
        return httpx.Response(200, content=PDF_BYTES)
    return httpx.Response(404)


class RecordingReporter:
    def __init__(self) -> None:
        self.events: list[tuple] = []

    def page_started(self, page: int, url: str) -> None:
        self.events.append(("page_started", page, url))

    def page_failed(self, page: int, url: str, error: Exception) -> None:
        self.events.append(("page_failed", page, error))

    def page_extracted(self, page: int, count: int) -> None:
        self.events.append(("page_extracted", page, count))

    def download_started(
        self,
        page: int,
        ordinal: int,
        reference: DocumentReference,
        destination: Path,
    ) -> None:
        self.events.append(("download_started", page, ordinal, destination.name))

    def download_succeeded(self, page: int, outcome: DownloadOutcome) -> None:
        self.events.append(("download_succeeded", page, outcome))

    def download_failed(self, page: int, outcome: DownloadOutcome) -> None:
        self.events.append(("download_failed", page, outcome))

    def of(self, kind: str) -> list[tuple]:
        return [e for e in self.events if e[0] == kind]


@pytest.fixture
def session():
    with HarvestSession(transport=httpx.MockTransport(_springer)) as s:
        yield s


def _harvester(
    session, tmp_path: Path, **kwargs
) -> tuple[Harvester, RecordingReporter]:
    reporter = RecordingReporter()
    return Harvester(session, tmp_path, reporter, **kwargs), reporter


class TestHarvester:
    def test_failed_page_does_not_abort_run(self, session, tmp_path: Path) -> None:
        harvester, reporter = _harvester(session, tmp_path)
        harvester.run(1, 2)

        expected = tmp_path / "Attention Is It All You Need.pdf"
        assert list(tmp_path.iterdir()) == [expected]
        assert expected.read_bytes() == PDF_BYTES

        failures = reporter.of("page_failed")
        assert len(failures) == 1
        assert failures[0][1] == 1
        assert "500" in str(failures[0][2])
        assert len(reporter.of("download_succeeded")) == 1

    def test_pages_processed_in_order(self, session, tmp_path: Path) -> None:
        harvester, reporter = _harvester(session, tmp_path)
        harvester.run(2, 4)
        started = [e[1] for e in reporter.of("page_started")]
        assert started == [2, 3, 4]
        assert reporter.of("page_started")[0][2].startswith(
            "https://link.springer.com/search/page/2?"
        )

    def test_failed_item_does_not_abort_page(self, session, tmp_path: Path) -> None:
        harvester, reporter = _harvester(session, tmp_path)
        harvester.run(3, 3)

        failed = reporter.of("download_failed")
        assert len(failed) == 1
        outcome = failed[0][2]
        assert outcome.reference.title == "First"
        assert outcome.reference.download_url.endswith("/missing.pdf")

        assert (tmp_path / "Second.pdf").read_bytes() == PDF_BYTES
        assert not (tmp_path / "First.pdf").exists()

    def test_unrequestable_url_does_not_abort_page(
        self, session, tmp_path: Path
    ) -> None:
        harvester, reporter = _harvester(session, tmp_path)
        harvester.run(5, 5)

        failed = reporter.of("download_failed")
        assert [e[2].reference.title for e in failed] == ["Bad"]
        assert (tmp_path / "Good.pdf").read_bytes() == PDF_BYTES
        assert reporter.of("page_failed") == []
        assert ("page_extracted", 5, 2) in reporter.events

    def test_empty_listing_body_is_page_failure(self, session, tmp_path: Path) -> None:
        harvester, reporter = _harvester(session, tmp_path)
        harvester.run(4, 4)
        assert [e[1] for e in reporter.of("page_failed")] == [4]
        assert list(tmp_path.iterdir()) == []

    def test_positional_naming(self, session, tmp_path: Path) -> None:
        harvester, reporter = _harvester(
            session, tmp_path, naming=NamingPolicy.POSITIONAL
        )
        harvester.run(2, 3)
        names = sorted(p.name for p in tmp_path.iterdir())
        assert names == ["page-2-document-1.pdf", "page-3-document-2.pdf"]
        assert ("download_started", 3, 1, "page-3-document-1.pdf") in reporter.events

    def test_existing_file_is_overwritten(self, session, tmp_path: Path) -> None:
        target = tmp_path / "Second.pdf"
        target.write_bytes(b"stale")
        harvester, _ = _harvester(session, tmp_path)
        harvester.run(3, 3)
        assert target.read_bytes() == PDF_BYTES


class TestHarvesterPreconditions:
    def test_missing_output_dir_is_fatal(self, session, tmp_path: Path) -> None:
        harvester, reporter = _harvester(session, tmp_path / "absent")
        with pytest.raises(StorageError):
            harvester.run(1, 1)
        assert reporter.events == []

    def test_output_path_is_a_file(self, session, tmp_path: Path) -> None:
        target = tmp_path / "file.txt"
        target.write_text("x")
        harvester, _ = _harvester(session, target)
        with pytest.raises(StorageError):
            harvester.run(1, 1)

    @pytest.mark.parametrize(("start", "end"), [(0, 2), (3, 2), (-1, -1)])
    def test_invalid_range(self, session, tmp_path: Path, start, end) -> None:
        harvester, _ = _harvester(session, tmp_path)
        with pytest.raises(ValueError):
            harvester.run(start, end)
