"""Footnote markup recognition for raw wikitext.

Four independent scan passes locate citation markup without a general
markup parser:

1. named paired refs      <ref name="X">...</ref>
2. named self-closing     <ref name="X" />
3. unnamed paired refs    <ref>...</ref>
4. short-form templates   {{sfn|Author|Year|...}}

Footnote identities are a closed union of three frozen dataclasses
(`Named`, `Unnamed`, `ShortForm`); shared behaviour lives in the free
functions below rather than on the classes.
"""
from __future__ import annotations
import logging
import re
from dataclasses import dataclass
from itertools import chain
from typing import Iterator, List, Optional, Tuple, Union

from .errors import MissingMarkupError

logger = logging.getLogger(__name__)

# `<ref\b` keeps <references/> and friends out of every pattern.
PAIRED_REF_RE = re.compile(r"<ref\b([^>]*?)(?<!/)>(.*?)</ref\s*>", re.IGNORECASE | re.DOTALL)
SELF_CLOSING_REF_RE = re.compile(r"<ref\b([^>]*?)/\s*>", re.IGNORECASE)
STRAY_REF_TAG_RE = re.compile(r"</?ref\b[^>]*>", re.IGNORECASE)
NAME_ATTR_RE = re.compile(r"""\bname\s*=\s*(?:"([^"]*)"|'([^']*)'|([^\s"'>/]+))""", re.IGNORECASE)
SFN_RE = re.compile(r"\{\{sfn\|[^}]+\}\}", re.IGNORECASE)
# Wider net for boundary detection and stripping: also {{sfnp|...}}, {{sfnm|...}}.
SFN_FAMILY_RE = re.compile(r"\{\{sfn[^}]*\}\}", re.IGNORECASE)
UNNAMED_TOKEN_RE = re.compile(r"__unnamed_(\d+)")


@dataclass(frozen=True)
class Named:
    name: str


@dataclass(frozen=True)
class Unnamed:
    ordinal: int
    full_markup: Optional[str] = None


@dataclass(frozen=True)
class ShortForm:
    template: str


FootnoteId = Union[Named, Unnamed, ShortForm]


@dataclass(frozen=True)
class FootnoteOccurrence:
    footnote: FootnoteId
    start: int
    end: int


def footnote_token(footnote: FootnoteId) -> str:
    """String form of a footnote id as exchanged with callers (CLI, JSON)."""
    if isinstance(footnote, Named):
        return footnote.name
    if isinstance(footnote, Unnamed):
        return f"__unnamed_{footnote.ordinal}"
    return footnote.template


def footnote_kind(footnote: FootnoteId) -> str:
    return "sfn" if isinstance(footnote, ShortForm) else "ref"


def parse_footnote_token(token: str, full_markup: Optional[str] = None) -> FootnoteId:
    """Map a token back to a footnote id.

    `{{sfn...` tokens are short-form templates, `__unnamed_N` tokens are
    unnamed refs (and need the markup captured when the catalog was built),
    anything else is a ref name.
    """
    token = token.strip()
    if not token:
        raise ValueError("Footnote identifier is empty")
    if token.lower().startswith("{{sfn"):
        return ShortForm(token)
    m = UNNAMED_TOKEN_RE.fullmatch(token)
    if m:
        if not full_markup:
            raise MissingMarkupError(f"Unnamed footnote {token} requires its full markup to be matched")
        return Unnamed(int(m.group(1)), full_markup)
    return Named(token)


def ref_name(attrs: str) -> Optional[str]:
    """Value of the name attribute in a ref tag's attribute text, if any."""
    m = NAME_ATTR_RE.search(attrs)
    if not m:
        return None
    name = next(g for g in m.groups() if g is not None).strip()
    return name or None


def named_definitions(wikitext: str) -> Iterator[Tuple[str, re.Match]]:
    """Pass 1: content-bearing named refs, in document order."""
    for m in PAIRED_REF_RE.finditer(wikitext):
        name = ref_name(m.group(1))
        if name is not None:
            yield name, m


def named_reuses(wikitext: str) -> Iterator[Tuple[str, re.Match]]:
    """Pass 2: self-closing named refs, in document order."""
    for m in SELF_CLOSING_REF_RE.finditer(wikitext):
        name = ref_name(m.group(1))
        if name is not None:
            yield name, m


def unnamed_refs(wikitext: str) -> Iterator[Tuple[Unnamed, re.Match]]:
    """Pass 3: refs without a name attribute, numbered from 1."""
    ordinal = 0
    for m in PAIRED_REF_RE.finditer(wikitext):
        if ref_name(m.group(1)) is None:
            ordinal += 1
            yield Unnamed(ordinal, m.group(0)), m


def short_form_refs(wikitext: str) -> Iterator[Tuple[ShortForm, re.Match]]:
    """Pass 4: {{sfn|...}} templates."""
    for m in SFN_RE.finditer(wikitext):
        yield ShortForm(m.group(0)), m


def scan_footnotes(wikitext: str) -> List[FootnoteOccurrence]:
    """Every identifiable footnote occurrence, in document order."""
    found: List[FootnoteOccurrence] = []
    for name, m in chain(named_definitions(wikitext), named_reuses(wikitext)):
        found.append(FootnoteOccurrence(Named(name), m.start(), m.end()))
    for footnote, m in chain(unnamed_refs(wikitext), short_form_refs(wikitext)):
        found.append(FootnoteOccurrence(footnote, m.start(), m.end()))
    found.sort(key=lambda o: (o.start, o.end))
    return found


def footnote_spans(wikitext: str) -> List[Tuple[int, int]]:
    """All footnote markup spans regardless of identity, sorted by start.

    Spans that start inside an earlier span (an sfn inside a ref body, say)
    are dropped so the remaining spans are disjoint.
    """
    raw = [m.span() for m in PAIRED_REF_RE.finditer(wikitext)]
    raw.extend(m.span() for m in SELF_CLOSING_REF_RE.finditer(wikitext))
    raw.extend(m.span() for m in SFN_FAMILY_RE.finditer(wikitext))
    raw.sort(key=lambda s: (s[0], -s[1]))
    spans: List[Tuple[int, int]] = []
    for start, end in raw:
        if spans and start < spans[-1][1]:
            continue
        spans.append((start, end))
    return spans


def strip_footnote_markup(text: str) -> str:
    """Remove ref tags (paired, self-closing, stray fragments) and sfn templates."""
    text = PAIRED_REF_RE.sub("", text)
    text = SELF_CLOSING_REF_RE.sub("", text)
    text = STRAY_REF_TAG_RE.sub("", text)
    return SFN_FAMILY_RE.sub("", text)


def _literal_matches(wikitext: str, literal: str) -> List[Tuple[int, int]]:
    pattern = re.compile(re.escape(literal), re.IGNORECASE)
    return [m.span() for m in pattern.finditer(wikitext)]


def find_occurrences(wikitext: str, footnote: FootnoteId) -> List[Tuple[int, int]]:
    """Spans where `footnote` appears, sorted by position.

    Unnamed refs have no name to look up, so they are re-located by an exact
    (case-insensitive) search for their captured markup; two identical
    unnamed refs are indistinguishable and both match.
    """
    if isinstance(footnote, Named):
        spans = [m.span() for name, m in chain(named_definitions(wikitext), named_reuses(wikitext))
                 if name == footnote.name]
        return sorted(spans)
    if isinstance(footnote, Unnamed):
        if not footnote.full_markup:
            raise MissingMarkupError(
                f"Unnamed footnote {footnote_token(footnote)} has no captured markup to match against"
            )
        return _literal_matches(wikitext, footnote.full_markup)
    if isinstance(footnote, ShortForm):
        if not footnote.template:
            return []
        return _literal_matches(wikitext, footnote.template)
    raise TypeError(f"Unsupported footnote id: {footnote!r}")


def reference_markup(wikitext: str, footnote: FootnoteId) -> Optional[str]:
    """Markup carrying the footnote's content, used for URL extraction.

    For a named ref this is its first content-bearing definition; a name that
    only ever appears self-closing has none.
    """
    if isinstance(footnote, Named):
        for name, m in named_definitions(wikitext):
            if name == footnote.name:
                return m.group(0)
        return None
    if isinstance(footnote, Unnamed):
        return footnote.full_markup
    return footnote.template
