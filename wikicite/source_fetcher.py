"""HTTP fetcher for cited sources.

Downloads a page and reduces it to its main readable text with BeautifulSoup:
boilerplate elements are dropped and the first recognisable content
container is preferred over the whole body.
"""
from __future__ import annotations
import logging
import re
from dataclasses import dataclass
from typing import Optional

import requests
from bs4 import BeautifulSoup

from .citation_urls import extract_citation_url
from .config import CONFIG, AppConfig
from .errors import SourceFetchError

logger = logging.getLogger(__name__)

BOILERPLATE = "script, style, nav, header, footer, aside, iframe, noscript"
MAIN_CONTENT = 'article, main, [role="main"], .article-content, .post-content, .entry-content'


@dataclass
class SourceContent:
    text: str
    url: str
    title: str = ""


def extract_main_text(html: str) -> tuple[str, str]:
    """Return (text, title) for an HTML document."""
    soup = BeautifulSoup(html, "html.parser")
    title_tag = soup.find("title")
    title = title_tag.get_text(" ", strip=True) if title_tag else ""
    if not title:
        h1 = soup.find("h1")
        title = h1.get_text(" ", strip=True) if h1 else ""
    for tag in soup.select(BOILERPLATE):
        tag.decompose()
    main = soup.select_one(MAIN_CONTENT) or soup.body or soup
    text = re.sub(r"\s+", " ", main.get_text(" ", strip=True)).strip()
    return text, title


def _download(http, url: str, config: AppConfig):
    try:
        return http.get(url, headers={"User-Agent": config.user_agent}, timeout=config.http_timeout)
    except requests.Timeout as e:
        raise SourceFetchError("Request to source timed out. Please try again or provide the text manually.", reason="timeout") from e
    except requests.RequestException as e:
        raise SourceFetchError(f"Failed to fetch source: {e}", reason="http_error") from e


def fetch_source_content(url: str, session: Optional[requests.Session] = None, config: AppConfig = CONFIG) -> SourceContent:
    """Fetch `url` and extract its main text.

    A caller-supplied session is used as is; otherwise a short-lived session
    capped at `config.max_redirects` is opened and closed here.
    """
    logger.debug("Fetching source %s", url)
    if session is not None:
        resp = _download(session, url, config)
    else:
        with requests.Session() as http:
            http.max_redirects = config.max_redirects
            resp = _download(http, url, config)
    status = resp.status_code
    if status == 403:
        raise SourceFetchError("Access denied. The source may require authentication or block automated access.", reason="access_denied")
    if status == 404:
        raise SourceFetchError("Source page not found (404).", reason="not_found")
    if status >= 500:
        raise SourceFetchError("Source website is temporarily unavailable. Please try again later.", reason="unavailable")
    if status >= 400:
        raise SourceFetchError(f"Failed to fetch source: HTTP {status}", reason="http_error")

    text, title = extract_main_text(resp.text)
    logger.debug("Extracted %d chars from %s (%s)", len(text), url, title[:50])
    if len(text) < config.min_source_chars:
        raise SourceFetchError("Extracted content is too short (likely failed to parse page properly)", reason="too_short")
    return SourceContent(text=text, url=url, title=title)


def fetch_source_from_citation(markup: str, session: Optional[requests.Session] = None, config: AppConfig = CONFIG) -> Optional[SourceContent]:
    """Fetch the source a footnote points to; None when its markup has no URL."""
    url = extract_citation_url(markup)
    if not url:
        return None
    return fetch_source_content(url, session=session, config=config)
