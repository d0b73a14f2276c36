"""Exception hierarchy for the harvest pipeline."""


class HarvestError(Exception):
    """Base class for every error raised by the harvester."""


class TransportError(HarvestError):
    """A network fetch failed: connection, timeout, read or HTTP error status."""

    def __init__(self, url: str, message: str) -> None:
        super().__init__(f"{message} ({url})")
        self.url = url


class ParseError(HarvestError):
    """A listing body could not be interpreted as HTML markup."""


class StorageError(HarvestError):
    """A destination file or directory could not be created or written."""

    def __init__(self, path: object, message: str) -> None:
        super().__init__(f"{message}: {path}")
        self.path = path
