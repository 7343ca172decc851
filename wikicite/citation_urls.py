"""URL extraction from footnote markup.

Picks the single best fetchable URL from a footnote's raw markup. Archived
snapshots win over live links because cited pages go dead far more often
than archive copies do. Markup without a URL (books, plain-text citations)
returns None; that is a normal outcome.
"""
from __future__ import annotations
import logging
import re
from typing import Optional

logger = logging.getLogger(__name__)

ARCHIVE_URL_RE = re.compile(r"archive-?url\s*=\s*([^|}\s]+)", re.IGNORECASE)
# Anchored on a parameter separator so e.g. "chapter-url=" does not count as "url=".
URL_PARAM_RE = re.compile(r"(?:^|[|{}\s])url\s*=\s*([^|}\s]+)", re.IGNORECASE)
BARE_URL_RE = re.compile(r"https?://[^\s<>\"|{}\\^`\[\]]+", re.IGNORECASE)


def extract_citation_url(markup: str) -> Optional[str]:
    for label, pattern, group in (
        ("archive", ARCHIVE_URL_RE, 1),
        ("url", URL_PARAM_RE, 1),
        ("bare", BARE_URL_RE, 0),
    ):
        m = pattern.search(markup)
        if m:
            url = m.group(group).strip()
            logger.debug("Found %s URL %s", label, url)
            return url
    return None


def has_citation_url(markup: Optional[str]) -> bool:
    return bool(markup) and extract_citation_url(markup) is not None
