"""Claim boundary resolution.

For every occurrence of a footnote, work out which span of the preceding
prose it supports:

1. Walk the footnote markup that precedes the occurrence, nearest first. The
   first earlier footnote separated from the occurrence by real text (not
   whitespace, not more citations) marks where the claim starts. Footnotes
   with nothing but whitespace in between are stacked citations for the same
   claim and the walk continues past them.
2. If no earlier footnote qualifies, fall back to markup boundaries: a blank
   line, a new list/heading/definition line, or a heading.
3. The raw span is cleaned of markup; claims shorter than
   `AppConfig.min_claim_length` are dropped.
"""
from __future__ import annotations
import logging
import re
from bisect import bisect_left
from dataclasses import dataclass, asdict
from typing import Dict, List, Optional, Sequence, Tuple

from .config import CONFIG, AppConfig
from .footnotes import (
    FootnoteId,
    PAIRED_REF_RE,
    SELF_CLOSING_REF_RE,
    SFN_FAMILY_RE,
    STRAY_REF_TAG_RE,
    find_occurrences,
    footnote_spans,
    footnote_token,
    strip_footnote_markup,
)

logger = logging.getLogger(__name__)

TEMPLATE_RE = re.compile(r"\{\{[^{}]*\}\}")
WIKILINK_RE = re.compile(r"\[\[([^\[\]|]+)\|?([^\[\]]*)\]\]")
QUOTE_RUN_RE = re.compile(r"'{2,}")
WHITESPACE_RE = re.compile(r"\s+")
LINE_MARKERS = "=*#:"


@dataclass
class CitationInstance:
    claim: str
    context_before: str
    context_after: str

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


def _remove_templates(text: str) -> str:
    # Innermost first so {{a|{{b}}}} goes away completely.
    while True:
        text, count = TEMPLATE_RE.subn("", text)
        if not count:
            return text


def _link_label(m: re.Match) -> str:
    # [[File:x.jpg|thumb|caption]] keeps only the caption
    return m.group(2).rsplit("|", 1)[-1] if m.group(2) else m.group(1)


def _rewrite_links(text: str) -> str:
    # Innermost first so captions holding links come out flat.
    while True:
        text, count = WIKILINK_RE.subn(_link_label, text)
        if not count:
            return text


def clean_claim(text: str) -> str:
    """Reduce a raw wikitext span to readable prose.

    Total on any input: unbalanced markup just leaves fragments behind.
    """
    text = text.strip()
    text = PAIRED_REF_RE.sub("", text)
    text = SELF_CLOSING_REF_RE.sub("", text)
    text = STRAY_REF_TAG_RE.sub("", text)
    text = SFN_FAMILY_RE.sub("", text)
    text = _remove_templates(text)
    text = _rewrite_links(text)
    text = QUOTE_RUN_RE.sub("", text)
    return WHITESPACE_RE.sub(" ", text).strip()


def find_claim_start(wikitext: str, position: int, spans: Sequence[Tuple[int, int]]) -> Optional[int]:
    """Claim start derived from earlier footnotes, or None if there is none.

    `spans` must be disjoint and sorted (see `footnotes.footnote_spans`).
    Only the gaps between consecutive spans are inspected, so the walk is
    linear in the number of preceding footnotes.
    """
    gap_end = position
    for j in range(bisect_left(spans, (position, -1)) - 1, -1, -1):
        start, end = spans[j]
        if end > position:
            # markup enclosing the occurrence itself
            continue
        if strip_footnote_markup(wikitext[end:gap_end]).strip():
            return end
        gap_end = start
    return None


def markup_boundary(wikitext: str, position: int) -> int:
    """Nearest paragraph, list/heading line or heading start before `position`."""
    for i in range(position - 1, -1, -1):
        ch = wikitext[i]
        if ch == "\n":
            if i > 0 and wikitext[i - 1] in "\n=":
                # blank line, or the end of a "== Heading ==" line
                return i + 1
            if i + 1 < len(wikitext) and wikitext[i + 1] in LINE_MARKERS:
                return i + 1
        elif ch == "=" and (i == 0 or wikitext[i - 1] == "\n"):
            return i
    return 0


def resolve_citations(
    wikitext: str,
    footnote: FootnoteId,
    config: AppConfig = CONFIG,
    spans: Optional[Sequence[Tuple[int, int]]] = None,
) -> List[CitationInstance]:
    """One CitationInstance per occurrence of `footnote` with a usable claim.

    `spans` may be passed in when resolving many footnotes of the same
    article; it defaults to `footnote_spans(wikitext)`.
    """
    occurrences = find_occurrences(wikitext, footnote)
    if not occurrences:
        logger.debug("No occurrences of footnote %r", footnote_token(footnote)[:80])
        return []
    if spans is None:
        spans = footnote_spans(wikitext)
    width = config.context_chars
    instances: List[CitationInstance] = []
    for start, end in occurrences:
        claim_start = find_claim_start(wikitext, start, spans)
        if claim_start is None:
            claim_start = markup_boundary(wikitext, start)
            logger.debug("No citation boundary before %d; markup boundary at %d", start, claim_start)
        claim = clean_claim(wikitext[claim_start:start])
        if len(claim) < config.min_claim_length:
            logger.debug("Dropping claim %r at %d (too short)", claim, start)
            continue
        instances.append(CitationInstance(
            claim=claim,
            context_before=wikitext[max(0, start - width):start].strip(),
            context_after=wikitext[end:end + width].strip(),
        ))
    logger.debug("Footnote %r: %d occurrences, %d claims", footnote_token(footnote)[:80], len(occurrences), len(instances))
    return instances
