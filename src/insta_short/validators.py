"""Input validation for long URLs."""

import re
from urllib.parse import urlsplit

from insta_short.errors import EmptyInputError, InvalidUrlFormatError

_SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*$")
# schemes whose URLs must name a host
HIERARCHICAL_SCHEMES = {"http", "https", "ftp", "ws", "wss"}


def validate_long_url(url: str) -> str:
    """Check that ``url`` is non-empty and syntactically a URL.

    Returns the stripped URL. Raises :class:`EmptyInputError` or
    :class:`InvalidUrlFormatError`.
    """
    if url is None or not url.strip():
        raise EmptyInputError()

    url = url.strip()
    if any(ch.isspace() for ch in url):
        raise InvalidUrlFormatError()

    scheme, sep, rest = url.partition(":")
    if not sep or not rest or not _SCHEME_RE.match(scheme):
        raise InvalidUrlFormatError()

    if scheme.lower() in HIERARCHICAL_SCHEMES:
        # "https:example.com" names its host without the slashes
        authority_url = f"{scheme}://{rest.lstrip('/')}"
        try:
            parts = urlsplit(authority_url)
            # raises ValueError on a non-numeric or out of range port
            parts.port
        except ValueError:
            raise InvalidUrlFormatError()
        if not parts.hostname:
            raise InvalidUrlFormatError()

    return url
