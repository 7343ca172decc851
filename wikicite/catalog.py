"""Reference catalog: every distinct footnote of an article.

Entries come out in pass order, not document order: named refs with content,
then names only ever used self-closing, then unnamed refs (one entry each),
then {{sfn}} templates. Callers wanting document order can sort on
`footnotes.find_occurrences(...)[0]`.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Set, Tuple

from .citation_urls import has_citation_url
from .config import CONFIG, AppConfig
from .footnotes import (
    FootnoteId,
    Named,
    Unnamed,
    footnote_kind,
    footnote_spans,
    footnote_token,
    named_definitions,
    named_reuses,
    short_form_refs,
    unnamed_refs,
)
from .resolver import clean_claim, resolve_citations

logger = logging.getLogger(__name__)


@dataclass
class ReferenceInfo:
    footnote: FootnoteId
    kind: str
    preview: Optional[str] = None
    has_url: bool = False
    full_markup: Optional[str] = None

    @property
    def token(self) -> str:
        return footnote_token(self.footnote)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"id": self.token, "kind": self.kind, "preview": self.preview, "has_url": self.has_url}
        if self.full_markup is not None:
            out["full_markup"] = self.full_markup
        return out


def _claim_preview(wikitext: str, footnote: FootnoteId, spans: Sequence[Tuple[int, int]], config: AppConfig) -> Optional[str]:
    instances = resolve_citations(wikitext, footnote, config=config, spans=spans)
    if not instances:
        return None
    claim = instances[0].claim
    if len(claim) > config.preview_chars:
        return claim[:config.preview_chars] + "..."
    return claim


def _window_preview(wikitext: str, position: int, config: AppConfig) -> Optional[str]:
    before = wikitext[max(0, position - config.preview_window_chars):position]
    preview = clean_claim(before)[-config.preview_window_keep:].strip()
    return preview or None


def list_references(wikitext: str, config: AppConfig = CONFIG) -> List[ReferenceInfo]:
    spans = footnote_spans(wikitext)
    refs: List[ReferenceInfo] = []
    seen: Set[str] = set()

    def add(footnote: FootnoteId, position: int, markup: Optional[str]):
        if config.preview_mode == "window":
            preview = _window_preview(wikitext, position, config)
        else:
            preview = _claim_preview(wikitext, footnote, spans, config)
        refs.append(ReferenceInfo(
            footnote=footnote,
            kind=footnote_kind(footnote),
            preview=preview,
            has_url=has_citation_url(markup),
            full_markup=footnote.full_markup if isinstance(footnote, Unnamed) else None,
        ))

    for name, m in named_definitions(wikitext):
        if name not in seen:
            seen.add(name)
            add(Named(name), m.start(), m.group(0))
    for name, m in named_reuses(wikitext):
        if name not in seen:
            seen.add(name)
            # self-closing uses carry no content, hence no URL
            add(Named(name), m.start(), None)
    unnamed_count = 0
    for footnote, m in unnamed_refs(wikitext):
        unnamed_count += 1
        add(footnote, m.start(), m.group(0))
    for footnote, m in short_form_refs(wikitext):
        if footnote.template not in seen:
            seen.add(footnote.template)
            add(footnote, m.start(), m.group(0))

    logger.debug("Catalog: %d unique references (%d unnamed)", len(refs), unnamed_count)
    return refs
