"""CLI entrypoint for WikiCite Verify (refs, resolve, verify and metrics commands)."""
import argparse
import json
import logging
from pathlib import Path
from typing import Optional

from .audit import load_session
from .catalog import list_references
from .config import AppConfig
from .errors import WikiCiteError
from .footnotes import parse_footnote_token
from .metrics import compute_metrics, format_metrics_report
from .resolver import resolve_citations
from .verifier import CitationVerifier, VerifierConfig


def _dump(payload) -> str:
    return json.dumps(payload, ensure_ascii=False, indent=2)


def references_command(article_url: str, preview: str = "claim", verifier: Optional[CitationVerifier] = None) -> str:
    """List every distinct footnote of an article."""
    verifier = verifier or CitationVerifier(VerifierConfig(app=AppConfig(preview_mode=preview)))
    return _dump(verifier.references(article_url))


def resolve_command(wikitext_path: str, token: str, full_markup: Optional[str] = None) -> str:
    """Resolve a footnote against a local wikitext file (no network)."""
    wikitext = Path(wikitext_path).read_text(encoding="utf-8")
    footnote = parse_footnote_token(token, full_markup)
    instances = resolve_citations(wikitext, footnote)
    return _dump({"footnote": token, "instances": [i.to_dict() for i in instances], "total": len(instances)})


def catalog_command(wikitext_path: str, preview: str = "claim") -> str:
    """Catalog a local wikitext file (no network)."""
    wikitext = Path(wikitext_path).read_text(encoding="utf-8")
    refs = list_references(wikitext, config=AppConfig(preview_mode=preview))
    return _dump({"references": [r.to_dict() for r in refs], "total": len(refs)})


def verify_command(
    article_url: str,
    token: str,
    source_file: Optional[str] = None,
    full_markup: Optional[str] = None,
    workers: int = 4,
    fetch: bool = True,
    log: bool = True,
    verifier: Optional[CitationVerifier] = None,
) -> str:
    """Verify every claim a footnote supports against its source."""
    source_text = Path(source_file).read_text(encoding="utf-8") if source_file else None
    verifier = verifier or CitationVerifier(VerifierConfig(max_workers=workers, auto_fetch_source=fetch, log=log))
    return _dump(verifier.verify(article_url, token, source_text=source_text, full_markup=full_markup))


def run(args: argparse.Namespace) -> str:
    if args.command == "refs":
        return references_command(args.url, preview=args.preview)
    if args.command == "catalog":
        return catalog_command(args.file, preview=args.preview)
    if args.command == "resolve":
        return resolve_command(args.file, args.footnote, full_markup=args.full_markup)
    if args.command == "verify":
        return verify_command(
            args.url, args.footnote,
            source_file=args.source_file,
            full_markup=args.full_markup,
            workers=args.workers,
            fetch=not args.no_fetch,
            log=not args.no_log,
        )
    return format_metrics_report(compute_metrics(load_session()))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Check Wikipedia claims against their cited sources")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    refs = sub.add_parser("refs", help="List the footnotes of a Wikipedia article")
    refs.add_argument("url", help="Article URL, e.g. https://en.wikipedia.org/wiki/Sky")
    refs.add_argument("--preview", default="claim", choices=["claim", "window"], help="Preview style")

    catalog = sub.add_parser("catalog", help="List the footnotes of a local wikitext file")
    catalog.add_argument("file", help="Path to a wikitext file")
    catalog.add_argument("--preview", default="claim", choices=["claim", "window"], help="Preview style")

    resolve = sub.add_parser("resolve", help="Resolve a footnote's claims in a local wikitext file")
    resolve.add_argument("file", help="Path to a wikitext file")
    resolve.add_argument("footnote", help="Ref name, __unnamed_N token or {{sfn|...}} template")
    resolve.add_argument("--full-markup", help="Captured markup of an unnamed ref")

    verify = sub.add_parser("verify", help="Judge a footnote's claims against its source")
    verify.add_argument("url", help="Article URL")
    verify.add_argument("footnote", help="Ref name, __unnamed_N token or {{sfn|...}} template")
    verify.add_argument("--source-file", help="Source text to use instead of fetching the citation URL")
    verify.add_argument("--full-markup", help="Captured markup of an unnamed ref")
    verify.add_argument("--workers", type=int, default=4, help="Concurrent judge calls")
    verify.add_argument("--no-fetch", action="store_true", help="Never fetch the source automatically")
    verify.add_argument("--no-log", action="store_true", help="Disable audit logging")

    sub.add_parser("metrics", help="Show metrics for this session's audit log")
    return parser


def main():  # pragma: no cover
    parser = build_parser()
    args = parser.parse_args()
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING, format="%(levelname)s %(name)s: %(message)s")
    try:
        print(run(args))
    except WikiCiteError as e:
        parser.exit(1, f"error: {e}\n")


if __name__ == "__main__":  # pragma: no cover
    main()
