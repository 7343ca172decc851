"""Claim judge: does a source text support a Wikipedia claim?

Approach:
1. Narrow long sources to the passages most similar to the claim (source_index).
2. Ask the chat model for a JSON verdict: confidence 0-100, support status,
   the most relevant excerpt and a short reasoning.
3. Normalise the verdict: clamp confidence, derive the status from the
   confidence when the model's status is missing or unknown.

Offline behavior: without OPENAI_API_KEY an offline verdict (confidence 0,
not_supported, offline=True) is returned instead of calling the API.
"""
from __future__ import annotations
from dataclasses import dataclass, asdict
from typing import Any, Dict
import json, os, re
import openai
from openai import OpenAI
from .config import CONFIG, AppConfig
from .errors import JudgeError
from .source_index import select_passages
from .tracing import span

SUPPORT_STATUSES = ("supported", "partially_supported", "not_supported")
JSON_OBJECT_RE = re.compile(r"\{[\s\S]*\}")

VERIFICATION_PROMPT = """You are a fact-checking assistant. Your task is to verify if a claim from a Wikipedia article is supported by a source text.

CRITICAL: Distinguish between definitive statements and uncertain/hedged language. Claims stated as facts require sources that make definitive statements, not speculation or tentative assertions.

EXAMPLES:

Claim: "The battle occurred on June 15, 1944"
Source: "The battle took place on June 15, 1944"
Result: confidence: 95, supportStatus: "supported" (definitive match)

Claim: "The treaty was signed in Paris"
Source: "It is believed the treaty was signed in Paris, though some historians dispute this"
Result: confidence: 60, supportStatus: "partially_supported" (uncertainty and dispute)

Claim: "The president resigned on March 3"
Source: "The president remained in office throughout March"
Result: confidence: 5, supportStatus: "not_supported" (contradicts claim)

CLAIM from Wikipedia:
"{claim}"

SOURCE TEXT:
{source}

Analyze whether the source text supports this claim. Provide:
1. A confidence score (0-100) indicating how well the source supports the claim
2. The specific excerpt from the source that is most relevant to the claim
3. Brief reasoning for your confidence score
4. A status: "supported" (80%+), "partially_supported" (50-79%), or "not_supported" (<50%)

Respond ONLY with valid JSON:
{{
  "confidence": <number 0-100>,
  "relevantExcerpt": "<exact quote from source>",
  "reasoning": "<brief explanation>",
  "supportStatus": "<supported|partially_supported|not_supported>"
}}"""


@dataclass
class Verdict:
    confidence: int
    support_status: str
    relevant_excerpt: str
    reasoning: str = ""
    offline: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def status_for_confidence(confidence: float) -> str:
    if confidence >= 80:
        return "supported"
    if confidence >= 50:
        return "partially_supported"
    return "not_supported"


def parse_verdict(text: str) -> Verdict:
    """Parse the model's answer, tolerating prose or code fences around the JSON."""
    m = JSON_OBJECT_RE.search(text or "")
    if not m:
        raise JudgeError("Failed to parse AI response: no JSON object found")
    try:
        data = json.loads(m.group(0))
    except json.JSONDecodeError as e:
        raise JudgeError(f"Failed to parse AI response: {e}") from e
    try:
        confidence = int(round(float(data.get("confidence", 0))))
    except (TypeError, ValueError):
        confidence = 0
    confidence = min(100, max(0, confidence))
    status = data.get("supportStatus") or data.get("support_status")
    if status not in SUPPORT_STATUSES:
        status = status_for_confidence(confidence)
    return Verdict(
        confidence=confidence,
        support_status=status,
        relevant_excerpt=data.get("relevantExcerpt") or data.get("relevant_excerpt") or "No relevant excerpt found",
        reasoning=data.get("reasoning") or "",
    )


def offline_verdict() -> Verdict:
    return Verdict(
        confidence=0,
        support_status="not_supported",
        relevant_excerpt="[Offline Mode] Cannot access OpenAI API.",
        reasoning="OPENAI_API_KEY is not set; the claim was not judged.",
        offline=True,
    )


def judge_claim(claim: str, source_text: str, client: OpenAI | None = None, config: AppConfig = CONFIG) -> Verdict:
    with span("judge.claim", {"claim": claim[:200], "source_chars": len(source_text), "model": config.judge_model}):
        if client is None:
            api_key = os.getenv("OPENAI_API_KEY")
            if not api_key:
                return offline_verdict()
            client = OpenAI(api_key=api_key)
        passages = select_passages(claim, source_text, config=config)
        prompt = VERIFICATION_PROMPT.format(claim=claim, source=passages)
        try:
            resp = client.chat.completions.create(
                model=config.judge_model,
                messages=[{"role": "user", "content": prompt}],
                temperature=config.temperature,
                max_tokens=config.max_answer_tokens,
                response_format={"type": "json_object"},
            )
        except openai.AuthenticationError as e:
            raise JudgeError("OpenAI API key is invalid or missing") from e
        except openai.RateLimitError as e:
            raise JudgeError("OpenAI API rate limit exceeded. Please try again later") from e
        except openai.APITimeoutError as e:
            raise JudgeError("OpenAI API request timed out") from e
        except openai.APIError as e:
            raise JudgeError(f"OpenAI API error: {e}") from e
        return parse_verdict(resp.choices[0].message.content or "")
