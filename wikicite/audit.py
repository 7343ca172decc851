"""Audit log of resolution, fetch and verification events.

Events are kept in memory for the session and mirrored to a JSON file so a
verification run (including its per-claim results) can be inspected later.
The directory comes from WIKICITE_AUDIT_DIR, defaulting to the OS temp dir.
"""
from __future__ import annotations
import json, os, tempfile, time
from pathlib import Path
from typing import Dict, Any, List

_EVENTS: List[Dict[str, Any]] = []


def audit_dir() -> Path:
    return Path(os.getenv("WIKICITE_AUDIT_DIR") or Path(tempfile.gettempdir()) / "wikicite_audit")


def session_file() -> Path:
    return audit_dir() / "session_log.json"


def _append(entry: Dict[str, Any]):
    _EVENTS.append(entry)
    path = session_file()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(_EVENTS, ensure_ascii=False, indent=2, default=str), encoding="utf-8")


def log_event(event: str, data: Dict[str, Any]):
    """Log a generic event with its data payload."""
    _append({"ts": time.time(), "event": event, **data})


def log_resolution(token: str, instances: list):
    """Log a resolution step with a short preview of each resolved claim."""
    _append({
        "ts": time.time(),
        "event": "resolution",
        "footnote": token[:200],
        "instances": len(instances),
        "claims": [i.claim[:120] for i in instances[:10]],  # limit logging volume
    })


def log_source_fetch(url: str, ok: bool, detail: Dict[str, Any]):
    """Log an attempt to fetch a cited source."""
    _append({"ts": time.time(), "event": "source_fetch", "url": url, "ok": ok, **detail})


def get_events() -> List[Dict[str, Any]]:
    return list(_EVENTS)


def clear_events():
    _EVENTS.clear()


def load_session() -> List[Dict[str, Any]]:
    """Events written by the most recent session (e.g. a previous CLI run)."""
    path = session_file()
    if not path.exists():
        return []
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return []
