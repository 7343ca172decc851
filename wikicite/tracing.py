"""LangSmith tracing for the verification pipeline.

`span(name, metadata)` records a run when LangSmith credentials are configured
and is a no-op otherwise, so resolution and judging never depend on tracing
being reachable.
"""
from __future__ import annotations
import contextlib
import os
import threading
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from langsmith import Client

_CLIENT: Optional[Client] = None
_CLIENT_READY = False
_CLIENT_LOCK = threading.Lock()


def _client() -> Optional[Client]:
    global _CLIENT, _CLIENT_READY
    with _CLIENT_LOCK:
        if not _CLIENT_READY:
            if os.getenv("LANGSMITH_API_KEY") or os.getenv("LANGCHAIN_API_KEY"):
                try:
                    _CLIENT = Client()
                except Exception:
                    _CLIENT = None
            _CLIENT_READY = True
    return _CLIENT


@contextlib.contextmanager
def span(name: str, metadata: Dict[str, Any] | None = None, run_type: str = "chain"):
    client = _client()
    if client is None:
        yield None
        return
    run_id = uuid.uuid4()
    try:
        client.create_run(name=name, inputs=metadata or {}, run_type=run_type, id=run_id)
    except Exception:
        # Tracing backend unreachable; carry on untraced
        yield None
        return
    error: str | None = None
    try:
        yield run_id
    except Exception as e:
        error = str(e)
        raise
    finally:
        end_time = datetime.now(timezone.utc)
        try:
            if error:
                client.update_run(run_id, error=error, end_time=end_time)
            else:
                client.update_run(run_id, outputs={"status": "ok"}, end_time=end_time)
        except Exception:
            pass
