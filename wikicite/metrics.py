"""Verification metrics aggregated from audit log events.

Reads the in-memory audit events of the session and computes:
 - claims_judged / verifications
 - supported_rate, partial_rate, not_supported_rate
 - failure_rate (judge errors turned into zero-confidence results)
 - confidence_avg
 - auto_fetch_rate (sources fetched from the citation URL instead of supplied)
 - resolution_avg_instances
"""
from __future__ import annotations
from typing import Dict, Any, List
from .audit import get_events


def compute_metrics(events: List[Dict[str, Any]] | None = None) -> Dict[str, Any]:
    events = get_events() if events is None else events
    if not events:
        return {"empty": True}
    status_counts: Dict[str, int] = {"supported": 0, "partially_supported": 0, "not_supported": 0}
    confidences = []
    failures = 0
    verifications = 0
    auto_fetched = 0
    resolution_counts = []
    fetch_failures = 0
    for e in events:
        if e.get("event") == "verification_complete":
            verifications += 1
            if e.get("source_fetched_automatically"):
                auto_fetched += 1
            for r in e.get("results", []):
                status = r.get("support_status", "not_supported")
                status_counts[status] = status_counts.get(status, 0) + 1
                confidences.append(r.get("confidence", 0))
                if r.get("failed"):
                    failures += 1
        elif e.get("event") == "resolution":
            resolution_counts.append(e.get("instances", 0))
        elif e.get("event") == "source_fetch" and not e.get("ok"):
            fetch_failures += 1
    judged = len(confidences)
    return {
        "verifications": verifications,
        "claims_judged": judged,
        "supported_rate": (status_counts["supported"] / judged) if judged else 0.0,
        "partial_rate": (status_counts["partially_supported"] / judged) if judged else 0.0,
        "not_supported_rate": (status_counts["not_supported"] / judged) if judged else 0.0,
        "failure_rate": (failures / judged) if judged else 0.0,
        "confidence_avg": (sum(confidences) / judged) if judged else 0.0,
        "auto_fetch_rate": (auto_fetched / verifications) if verifications else 0.0,
        "source_fetch_failures": fetch_failures,
        "resolution_avg_instances": (sum(resolution_counts) / len(resolution_counts)) if resolution_counts else 0.0,
        "total_events": len(events),
    }


def format_metrics_report(metrics: Dict[str, Any]) -> str:
    if metrics.get("empty"):
        return "No audit events collected yet. Run some verifications first."
    lines = ["Citation Verification Metrics:"]
    lines.append(f"Verifications: {metrics['verifications']}")
    lines.append(f"Claims Judged: {metrics['claims_judged']}")
    lines.append(f"Supported Rate: {metrics['supported_rate']:.2f}")
    lines.append(f"Partially Supported Rate: {metrics['partial_rate']:.2f}")
    lines.append(f"Not Supported Rate: {metrics['not_supported_rate']:.2f}")
    lines.append(f"Judge Failure Rate: {metrics['failure_rate']:.2f}")
    lines.append(f"Confidence (avg): {metrics['confidence_avg']:.1f}")
    lines.append(f"Auto-fetched Sources: {metrics['auto_fetch_rate']:.2f}")
    lines.append(f"Source Fetch Failures: {metrics['source_fetch_failures']}")
    lines.append(f"Claims per Resolution (avg): {metrics['resolution_avg_instances']:.2f}")
    lines.append(f"Total Events: {metrics['total_events']}")
    return "\n".join(lines)
