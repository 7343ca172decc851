"""Wikitext source: raw article markup from the MediaWiki action API.

The API host is taken from the article URL itself, so any language edition
(or any MediaWiki site using /wiki/ paths) works, not only en.wikipedia.org.
"""
from __future__ import annotations
import logging
import re
from dataclasses import dataclass
from typing import Optional
from urllib.parse import unquote, urlparse

import requests

from .config import CONFIG, AppConfig
from .errors import ArticleFetchError

logger = logging.getLogger(__name__)

TITLE_RE = re.compile(r"/wiki/([^?#]+)")


@dataclass(frozen=True)
class WikiArticle:
    title: str
    wikitext: str


def parse_article_url(article_url: str) -> tuple[str, str]:
    """Return (api_url, title) for an article URL like https://en.wikipedia.org/wiki/Foo."""
    parsed = urlparse(article_url.strip())
    m = TITLE_RE.search(parsed.path)
    if not parsed.netloc or not m:
        raise ArticleFetchError(f"Invalid Wikipedia URL: {article_url}", reason="invalid_url")
    scheme = parsed.scheme or "https"
    return f"{scheme}://{parsed.netloc}/w/api.php", unquote(m.group(1))


def fetch_article(article_url: str, session: Optional[requests.Session] = None, config: AppConfig = CONFIG) -> WikiArticle:
    api_url, title = parse_article_url(article_url)
    http = session or requests
    params = {
        "action": "query",
        "titles": title,
        "prop": "revisions",
        "rvprop": "content",
        "rvslots": "main",
        "format": "json",
        "formatversion": "2",
    }
    logger.debug("Fetching wikitext for %r from %s", title, api_url)
    try:
        resp = http.get(api_url, params=params, headers={"User-Agent": config.user_agent}, timeout=config.http_timeout)
    except requests.RequestException as e:
        raise ArticleFetchError(f"Failed to fetch Wikipedia article: {e}", reason="unavailable") from e
    if resp.status_code == 403:
        raise ArticleFetchError("Wikipedia denied access. The article may be protected or rate limits may apply.", reason="access_denied")
    if resp.status_code == 404:
        raise ArticleFetchError("Wikipedia API endpoint not found.", reason="not_found")
    if resp.status_code >= 500:
        raise ArticleFetchError("Wikipedia API is temporarily unavailable. Please try again later.", reason="unavailable")
    if resp.status_code >= 400:
        raise ArticleFetchError(f"Failed to fetch Wikipedia article: HTTP {resp.status_code}", reason="unavailable")

    try:
        data = resp.json()
    except ValueError as e:
        # maintenance/proxy pages, or a wiki without /w/api.php
        raise ArticleFetchError("Wikipedia API returned an unreadable response.", reason="unavailable") from e
    pages = (data.get("query") or {}).get("pages") or []
    if not pages or pages[0].get("missing") or pages[0].get("invalid"):
        raise ArticleFetchError(f"Article not found: {title}", reason="not_found")
    page = pages[0]
    revisions = page.get("revisions") or []
    if not revisions:
        raise ArticleFetchError("No content available for this article", reason="no_content")
    content = ((revisions[0].get("slots") or {}).get("main") or {}).get("content")
    if content is None:
        raise ArticleFetchError("No content available for this article", reason="no_content")
    return WikiArticle(title=page.get("title", title), wikitext=content)
