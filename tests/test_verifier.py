"""Tests for the verification pipeline with fake collaborators (no network, no API key)."""
import pytest

from wikicite.audit import get_events
from wikicite.config import CONFIG
from wikicite.errors import ArticleFetchError, JudgeError, MissingMarkupError, SourceFetchError
from wikicite.judge import Verdict
from wikicite.source_fetcher import SourceContent
from wikicite.verifier import CitationVerifier, VerifierConfig
from wikicite.wikipedia import WikiArticle

WIKITEXT = (
    'The sky is blue.<ref name="r1">{{cite web|url=https://sky.example|archive-url=https://web.archive.org/sky}}</ref> '
    'Grass is green.<ref name="r1" /> Snow is white.<ref name="r1" />\n'
    "Water is wet and clear.<ref>Printed pamphlet, 1990.</ref>"
)


def fake_article(url):
    return WikiArticle(title="Colors", wikitext=WIKITEXT)


def make_verifier(judge=None, fetch_source=None, **cfg):
    fetched = []

    def _fetch(url):
        fetched.append(url)
        return SourceContent(text="The sky is blue. Grass is green.", url=url, title="Colors")

    def _judge(claim, source_text):
        return Verdict(confidence=90, support_status="supported", relevant_excerpt=claim, reasoning="match")

    verifier = CitationVerifier(
        VerifierConfig(**cfg),
        fetch_article=fake_article,
        fetch_source=fetch_source or _fetch,
        judge=judge or _judge,
    )
    return verifier, fetched


def test_verify_auto_fetches_archive_and_judges_each_claim():
    verifier, fetched = make_verifier()
    out = verifier.verify("https://en.wikipedia.org/wiki/Colors", "r1")
    assert fetched == ["https://web.archive.org/sky"]
    assert out["source_fetched_automatically"] is True
    assert out["source_url"] == "https://web.archive.org/sky"
    assert [r["claim"] for r in out["results"]] == ["The sky is blue.", "Grass is green.", "Snow is white."]
    assert [r["id"] for r in out["results"]] == [1, 2, 3]
    assert out["diagnostics"]["supported"] == 3
    assert [s["name"] for s in out["steps"]] == ["article", "footnote", "source_fetch", "resolution", "judging"]


def test_verify_with_supplied_source_skips_fetch():
    verifier, fetched = make_verifier()
    out = verifier.verify("https://en.wikipedia.org/wiki/Colors", "r1", source_text="Manual source text.")
    assert fetched == []
    assert out["source_fetched_automatically"] is False
    assert len(out["results"]) == 3


def test_one_failed_judgement_does_not_sink_others():
    def flaky_judge(claim, source_text):
        if claim.startswith("Grass"):
            raise JudgeError("OpenAI API rate limit exceeded. Please try again later")
        return Verdict(confidence=70, support_status="partially_supported", relevant_excerpt="x")

    verifier, _ = make_verifier(judge=flaky_judge, max_workers=3)
    out = verifier.verify("https://en.wikipedia.org/wiki/Colors", "r1", source_text="src")
    results = {r["claim"]: r for r in out["results"]}
    failed = results["Grass is green."]
    assert failed["failed"] is True
    assert failed["confidence"] == 0 and failed["support_status"] == "not_supported"
    assert failed["source_excerpt"].startswith("Verification failed: OpenAI API rate limit")
    assert results["The sky is blue."]["support_status"] == "partially_supported"
    assert out["diagnostics"]["failed"] == 1


def test_no_url_and_no_source_text():
    verifier, _ = make_verifier()
    with pytest.raises(SourceFetchError) as exc:
        verifier.verify(
            "https://en.wikipedia.org/wiki/Colors", "__unnamed_1",
            full_markup="<ref>Printed pamphlet, 1990.</ref>",
        )
    assert exc.value.reason == "no_url"


def test_unnamed_without_markup_is_rejected():
    verifier, _ = make_verifier()
    with pytest.raises(MissingMarkupError):
        verifier.verify("https://en.wikipedia.org/wiki/Colors", "__unnamed_1", source_text="src")


def test_unknown_footnote_gives_empty_results():
    verifier, _ = make_verifier()
    out = verifier.verify("https://en.wikipedia.org/wiki/Colors", "missing-name", source_text="src")
    assert out["results"] == []
    assert out["diagnostics"]["claims"] == 0


def test_article_errors_propagate():
    def broken(url):
        raise ArticleFetchError("Article not found: X", reason="not_found")

    verifier = CitationVerifier(VerifierConfig(), fetch_article=broken)
    with pytest.raises(ArticleFetchError):
        verifier.verify("https://en.wikipedia.org/wiki/X", "r1", source_text="src")


def test_audit_events_recorded():
    verifier, _ = make_verifier()
    verifier.verify("https://en.wikipedia.org/wiki/Colors", "r1")
    events = [e["event"] for e in get_events()]
    assert events == ["source_fetch", "resolution", "verification_complete"]
    complete = get_events()[-1]
    assert len(complete["results"]) == 3 and complete["source_fetched_automatically"] is True


def test_no_log_keeps_audit_empty():
    verifier, _ = make_verifier(log=False)
    verifier.verify("https://en.wikipedia.org/wiki/Colors", "r1", source_text="src")
    assert get_events() == []


def test_references_listing():
    verifier, _ = make_verifier()
    out = verifier.references("https://en.wikipedia.org/wiki/Colors")
    assert out["article_title"] == "Colors"
    assert out["total"] == 2
    assert [r["id"] for r in out["references"]] == ["r1", "__unnamed_1"]
    assert out["references"][0]["has_url"] is True


def test_verifier_config_defaults_to_shared_settings():
    assert VerifierConfig().app is CONFIG
    assert VerifierConfig().max_workers == 4
