"""Host-based URL predicates used to dispatch URLs to readers."""

from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlsplit


def url_hostname(url: str) -> Optional[str]:
    """Return the lowercased hostname of a URL, or None if it has none."""
    try:
        return urlsplit(url).hostname
    except ValueError:
        return None


@dataclass(frozen=True)
class HostPredicate:
    """Matches URLs whose hostname is exactly ``host``.

    Path, query and port are ignored.
    """

    host: str

    def __call__(self, url: str) -> bool:
        hostname = url_hostname(url)
        return hostname is not None and hostname == self.host.lower()

