import logging
from collections.abc import Iterator
from contextlib import contextmanager

import httpx

from springer_harvest.config import DEFAULT_CONFIG, HarvestConfig
from springer_harvest.data.cookies import new_cookie_jar
from springer_harvest.errors import TransportError

logger = logging.getLogger(__name__)


class HarvestSession:
    """Stateful HTTP client shared by every fetch of a harvest run.

    Carries a public-suffix-aware cookie jar across requests and follows
    redirects itself so that a chain longer than ``max_redirects`` hops ends
    by returning the last redirect response instead of raising.
    """

    def __init__(
        self,
        config: HarvestConfig = DEFAULT_CONFIG,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.config = config
        self.client = httpx.Client(
            timeout=config.timeout,
            headers=config.headers,
            cookies=new_cookie_jar(),
            follow_redirects=False,
            transport=transport,
        )

    @property
    def cookies(self) -> httpx.Cookies:
        return self.client.cookies

    def close(self) -> None:
        self.client.close()

    def __enter__(self) -> "HarvestSession":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @contextmanager
    def fetch(self, url: str) -> Iterator[httpx.Response]:
        """GET *url* and yield the streaming response.

        The body has not been read yet; iterate ``response.iter_bytes()`` or
        call ``response.read()``. The response is closed when the block exits.

        Raises:
            TransportError: If the connection fails or times out.
        """
        response = self._send(url)
        try:
            yield response
        finally:
            response.close()

    def fetch_text(self, url: str) -> str:
        """GET *url* and return its decoded body.

        Raises:
            TransportError: On connection failure or a 4xx/5xx status.
        """
        with self.fetch(url) as response:
            check_status(response)
            try:
                response.read()
            except httpx.HTTPError as e:
                raise TransportError(url, f"Failed reading response: {e}") from e
            return response.text

    def _send(self, url: str) -> httpx.Response:
        try:
            request = self.client.build_request("GET", url)
        except httpx.InvalidURL as e:
            raise TransportError(url, f"Invalid URL: {e}") from e
        hops = 0
        while True:
            try:
                response = self.client.send(request, stream=True)
            except (httpx.HTTPError, httpx.InvalidURL) as e:
                raise TransportError(str(request.url), f"Request failed: {e}") from e

            next_request = response.next_request
            if next_request is None:
                return response

            if hops >= self.config.max_redirects:
                logger.debug(
                    "Redirect cap (%d) reached at %s, returning last response",
                    self.config.max_redirects,
                    response.url,
                )
                return response

            hops += 1
            logger.debug("Redirect %d: %s -> %s", hops, request.url, next_request.url)
            response.close()
            request = next_request


def check_status(response: httpx.Response) -> None:
    """Raise TransportError for a 4xx/5xx response."""
    if response.is_error:
        raise TransportError(
            str(response.url), f"HTTP {response.status_code} {response.reason_phrase}"
        )
