# Ensure project root is on sys.path for 'wikicite' package imports
import sys, pathlib
import pytest

root = pathlib.Path(__file__).resolve().parents[1]
if str(root) not in sys.path:
    sys.path.insert(0, str(root))

from wikicite import audit


@pytest.fixture(autouse=True)
def isolated_audit(tmp_path, monkeypatch):
    """Keep audit events and the session file per-test."""
    monkeypatch.setenv("WIKICITE_AUDIT_DIR", str(tmp_path / "audit"))
    audit.clear_events()
    yield
    audit.clear_events()
