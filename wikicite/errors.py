"""Exception types shared by the resolver, the fetchers and the claim judge.

Normal "nothing found" outcomes (a footnote with no occurrences, markup without
a URL) are plain return values and never raise.
"""
from __future__ import annotations


class WikiCiteError(Exception):
    """Base class for all wikicite errors."""


class MissingMarkupError(WikiCiteError, ValueError):
    """An unnamed footnote was given without the markup captured for it."""


class FetchError(WikiCiteError):
    """Remote content could not be retrieved.

    `reason` is a short machine-readable code (e.g. ``not_found``,
    ``access_denied``, ``unavailable``) so callers can branch without parsing
    the message.
    """

    def __init__(self, message: str, reason: str = "error"):
        super().__init__(message)
        self.reason = reason


class ArticleFetchError(FetchError):
    """The Wikipedia article could not be fetched."""


class SourceFetchError(FetchError):
    """The cited source page could not be fetched or had no usable text."""


class JudgeError(WikiCiteError):
    """The language model call failed or returned an unusable answer."""
