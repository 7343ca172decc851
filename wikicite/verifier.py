"""Citation verifier: end-to-end check of one footnote against its source.

Pipeline Steps:
1. Article: fetch the article wikitext.
2. Footnote: parse the footnote token (unnamed refs need their markup).
3. Source: use the supplied source text, or fetch the footnote's URL
   (archive snapshot preferred).
4. Resolution: resolve every occurrence of the footnote to its claim.
5. Judging: judge all claims concurrently; a failed call becomes a
   zero-confidence "not_supported" result for that claim only.
6. Diagnostics & Auditing: per-step audit events, a final
   `verification_complete` event carrying every result.

Returns: dict with keys results, source_identifier, source_url,
source_fetched_automatically, steps, diagnostics.
"""
from __future__ import annotations
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, asdict, field
from typing import Any, Callable, Dict, List, Optional

from .audit import log_event, log_resolution, log_source_fetch
from .catalog import list_references
from .citation_urls import extract_citation_url
from .config import CONFIG, AppConfig
from .errors import SourceFetchError
from .footnotes import parse_footnote_token, reference_markup, footnote_token
from .judge import Verdict, judge_claim
from .resolver import CitationInstance, resolve_citations
from .source_fetcher import SourceContent, fetch_source_content
from .tracing import span
from .wikipedia import WikiArticle, fetch_article


@dataclass
class VerifierConfig:
    max_workers: int = 4
    auto_fetch_source: bool = True
    log: bool = True  # write audit events
    app: AppConfig = field(default_factory=lambda: CONFIG)


@dataclass
class CitationResult:
    id: int
    claim: str
    source_excerpt: str
    confidence: int
    support_status: str
    reasoning: str = ""
    failed: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def failed_result(index: int, claim: str, error: Exception) -> CitationResult:
    message = str(error) or error.__class__.__name__
    return CitationResult(
        id=index,
        claim=claim,
        source_excerpt=f"Verification failed: {message}",
        confidence=0,
        support_status="not_supported",
        reasoning=f"Error during verification: {message}",
        failed=True,
    )


class CitationVerifier:
    def __init__(
        self,
        config: VerifierConfig | None = None,
        fetch_article: Callable[[str], WikiArticle] = fetch_article,
        fetch_source: Callable[[str], SourceContent] = fetch_source_content,
        judge: Callable[[str, str], Verdict] = judge_claim,
    ):
        self.config = config or VerifierConfig()
        self.fetch_article = fetch_article
        self.fetch_source = fetch_source
        self.judge = judge

    def _log(self, event: str, data: Dict[str, Any]):
        if self.config.log:
            log_event(event, data)

    def references(self, article_url: str) -> Dict[str, Any]:
        with span("verifier.references", {"article_url": article_url}):
            article = self.fetch_article(article_url)
            refs = list_references(article.wikitext, config=self.config.app)
            self._log("references_listed", {"article": article.title, "total": len(refs)})
            return {"article_title": article.title, "references": [r.to_dict() for r in refs], "total": len(refs)}

    def _resolve_source(self, markup: Optional[str], steps: List[Dict[str, Any]]) -> SourceContent:
        url = extract_citation_url(markup) if markup else None
        if not url:
            raise SourceFetchError(
                "No URL found in citation and no source text provided. Please provide the source text manually.",
                reason="no_url",
            )
        with span("verifier.step.source_fetch", {"url": url}):
            try:
                source = self.fetch_source(url)
            except SourceFetchError as e:
                if self.config.log:
                    log_source_fetch(url, False, {"reason": e.reason, "error": str(e)})
                raise
            if self.config.log:
                log_source_fetch(url, True, {"chars": len(source.text), "title": source.title[:120]})
            steps.append({"name": "source_fetch", "url": url, "chars": len(source.text)})
            return source

    def _judge_all(self, instances: List[CitationInstance], source_text: str) -> List[CitationResult]:
        def run_one(index: int, instance: CitationInstance) -> CitationResult:
            verdict = self.judge(instance.claim, source_text)
            return CitationResult(
                id=index,
                claim=instance.claim,
                source_excerpt=verdict.relevant_excerpt,
                confidence=verdict.confidence,
                support_status=verdict.support_status,
                reasoning=verdict.reasoning,
            )

        results: List[CitationResult] = []
        workers = max(1, min(self.config.max_workers, len(instances)))
        with ThreadPoolExecutor(max_workers=workers) as ex:
            fut_map = {ex.submit(run_one, i, inst): (i, inst) for i, inst in enumerate(instances, start=1)}
            for fut in as_completed(fut_map):
                index, inst = fut_map[fut]
                try:
                    results.append(fut.result())
                except Exception as e:  # one failed claim must not sink the others
                    results.append(failed_result(index, inst.claim, e))
        results.sort(key=lambda r: r.id)
        return results

    def verify(self, article_url: str, token: str, source_text: str | None = None, full_markup: str | None = None) -> Dict[str, Any]:
        with span("verifier.run", {"article_url": article_url, "footnote": token[:200]}):
            steps: List[Dict[str, Any]] = []
            # Step 1: Article
            with span("verifier.step.article"):
                article = self.fetch_article(article_url)
                steps.append({"name": "article", "title": article.title, "chars": len(article.wikitext)})
            # Step 2: Footnote id
            footnote = parse_footnote_token(token, full_markup)
            markup = full_markup or reference_markup(article.wikitext, footnote)
            steps.append({"name": "footnote", "id": footnote_token(footnote), "has_markup": markup is not None})
            # Step 3: Source text
            source_url = None
            fetched = False
            if not source_text:
                if not self.config.auto_fetch_source:
                    raise SourceFetchError("No source text provided and automatic fetching is disabled.", reason="no_source")
                source = self._resolve_source(markup, steps)
                source_text, source_url, fetched = source.text, source.url, True
            # Step 4: Resolution
            with span("verifier.step.resolution"):
                instances = resolve_citations(article.wikitext, footnote, config=self.config.app)
                if self.config.log:
                    log_resolution(token, instances)
                steps.append({"name": "resolution", "instances": len(instances)})
            # Step 5: Judging
            results: List[CitationResult] = []
            if instances:
                with span("verifier.step.judging", {"claims": len(instances), "workers": self.config.max_workers}):
                    results = self._judge_all(instances, source_text)
                steps.append({"name": "judging", "judged": len(results), "failed": sum(r.failed for r in results)})
            # Step 6: Diagnostics
            diagnostics = {
                "claims": len(results),
                "supported": sum(r.support_status == "supported" for r in results),
                "partially_supported": sum(r.support_status == "partially_supported" for r in results),
                "not_supported": sum(r.support_status == "not_supported" for r in results),
                "failed": sum(r.failed for r in results),
                "confidence_avg": (sum(r.confidence for r in results) / len(results)) if results else 0.0,
            }
            result_dicts = [r.to_dict() for r in results]
            self._log("verification_complete", {
                "article_url": article_url,
                "article": article.title,
                "footnote": token[:200],
                "source_url": source_url,
                "source_fetched_automatically": fetched,
                "results": result_dicts,
                **diagnostics,
            })
            return {
                "results": result_dicts,
                "source_identifier": token,
                "source_url": source_url,
                "source_fetched_automatically": fetched,
                "steps": steps,
                "diagnostics": diagnostics,
            }
