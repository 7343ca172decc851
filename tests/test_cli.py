import json

import pytest

from wikicite.cli import build_parser, catalog_command, references_command, resolve_command, run, verify_command
from wikicite.errors import MissingMarkupError
from wikicite.judge import Verdict
from wikicite.verifier import CitationVerifier, VerifierConfig
from wikicite.wikipedia import WikiArticle

WIKITEXT = (
    "== History ==\n"
    "The bridge opened in 1932.<ref name=\"opening\">{{cite news|url=https://news.example/1932}}</ref> "
    "It was widened in 1960.<ref name=\"opening\" />\n"
    "Tolls ended in 1975.<ref>Council minutes, 1975.</ref>\n"
)


@pytest.fixture
def article_file(tmp_path):
    path = tmp_path / "bridge.wiki"
    path.write_text(WIKITEXT, encoding="utf-8")
    return str(path)


def fake_verifier(**cfg):
    return CitationVerifier(
        VerifierConfig(**cfg),
        fetch_article=lambda url: WikiArticle(title="Bridge", wikitext=WIKITEXT),
        judge=lambda claim, source: Verdict(confidence=85, support_status="supported", relevant_excerpt=claim),
    )


def test_resolve_command(article_file):
    out = json.loads(resolve_command(article_file, "opening"))
    assert out["total"] == 2
    assert [i["claim"] for i in out["instances"]] == ["The bridge opened in 1932.", "It was widened in 1960."]
    assert out["instances"][0]["context_before"] == "== History ==\nThe bridge opened in 1932."
    assert out["instances"][0]["context_after"].startswith("It was widened")


def test_resolve_command_unnamed_needs_markup(article_file):
    with pytest.raises(MissingMarkupError):
        resolve_command(article_file, "__unnamed_1")
    out = json.loads(resolve_command(article_file, "__unnamed_1", full_markup="<ref>Council minutes, 1975.</ref>"))
    assert [i["claim"] for i in out["instances"]] == ["Tolls ended in 1975."]


def test_catalog_command(article_file):
    out = json.loads(catalog_command(article_file))
    assert out["total"] == 2
    assert [r["id"] for r in out["references"]] == ["opening", "__unnamed_1"]
    assert out["references"][1]["full_markup"] == "<ref>Council minutes, 1975.</ref>"


def test_references_and_verify_commands(tmp_path):
    out = json.loads(references_command("https://en.wikipedia.org/wiki/Bridge", verifier=fake_verifier()))
    assert out["article_title"] == "Bridge"
    source = tmp_path / "source.txt"
    source.write_text("The bridge opened in 1932 and was widened in 1960.", encoding="utf-8")
    out = json.loads(verify_command(
        "https://en.wikipedia.org/wiki/Bridge", "opening", source_file=str(source), verifier=fake_verifier(),
    ))
    assert [r["support_status"] for r in out["results"]] == ["supported", "supported"]
    assert out["source_fetched_automatically"] is False


def test_parser_and_run(article_file):
    parser = build_parser()
    args = parser.parse_args(["catalog", article_file, "--preview", "window"])
    assert json.loads(run(args))["total"] == 2
    args = parser.parse_args(["resolve", article_file, "opening"])
    assert json.loads(run(args))["total"] == 2
    args = parser.parse_args(["verify", "https://en.wikipedia.org/wiki/Bridge", "opening", "--no-fetch", "--workers", "2"])
    assert args.no_fetch is True and args.workers == 2


def test_metrics_command_reads_session(article_file):
    fake_verifier().verify("https://en.wikipedia.org/wiki/Bridge", "opening", source_text="Some source text.")
    report = run(build_parser().parse_args(["metrics"]))
    assert "Verifications: 1" in report
    assert "Claims Judged: 2" in report
