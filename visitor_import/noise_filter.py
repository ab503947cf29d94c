"""
Noise filtering for static-asset requests.
"""

from typing import Iterable, Optional, Tuple

from .models import LogEntry

DEFAULT_NOISE_PREFIXES: Tuple[str, ...] = ("/assets", "/css", "/favicon")


class NoiseFilter:
    """Drops requests for static assets, stylesheets and the favicon."""

    def __init__(self, prefixes: Optional[Iterable[str]] = None):
        """Initialize the filter.

        Args:
            prefixes: Request path prefixes to drop; defaults to
                ``DEFAULT_NOISE_PREFIXES``
        """
        if prefixes is None:
            prefixes = DEFAULT_NOISE_PREFIXES
        self.prefixes: Tuple[str, ...] = tuple(p.strip() for p in prefixes if p and p.strip())

    def keep(self, path: Optional[str]) -> bool:
        """Return True if a request for *path* is worth recording."""
        if not path:
            return True
        return not path.startswith(self.prefixes)

    def keep_entry(self, entry: LogEntry) -> bool:
        return self.keep(entry.path)
