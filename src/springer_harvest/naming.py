import re

from springer_harvest.models.document import DocumentReference

# Characters illegal in Windows paths, plus ASCII control characters.
_ILLEGAL_CHARS = re.compile(r'[\\/:*?"<>|\x00-\x1f\x7f]')

# Keeps name + suffix under the common 255-byte filename limit.
MAX_NAME_BYTES = 200


def sanitize_name(name: str) -> str:
    """Strip path-illegal characters and surrounding whitespace.

    >>> sanitize_name("My: Paper?")
    'My Paper'
    """
    return _ILLEGAL_CHARS.sub("", name).strip()


def positional_name(page: int, ordinal: int) -> str:
    return f"page-{page}-document-{ordinal}"


def _truncate(name: str) -> str:
    encoded = name.encode("utf-8")
    if len(encoded) <= MAX_NAME_BYTES:
        return name
    return encoded[:MAX_NAME_BYTES].decode("utf-8", errors="ignore").rstrip()


def derive_name(
    reference: DocumentReference, page: int, ordinal: int, suffix: str = ".pdf"
) -> str:
    """Return the output filename for the *ordinal*-th document of *page*.

    Uses the sanitized title when one survives sanitizing, otherwise the
    positional ``page-<page>-document-<ordinal>`` form.
    """
    stem = _truncate(sanitize_name(reference.title)) if reference.title else ""
    if not stem:
        stem = positional_name(page, ordinal)
    return f"{stem}{suffix}"
