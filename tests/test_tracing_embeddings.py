import threading

import pytest

from wikicite import tracing
from wikicite.embedding_wrapper import EMBEDDING_DIM, OpenAIEmbeddingWrapper


@pytest.fixture
def no_tracing(monkeypatch):
    monkeypatch.delenv("LANGSMITH_API_KEY", raising=False)
    monkeypatch.delenv("LANGCHAIN_API_KEY", raising=False)
    monkeypatch.setattr(tracing, "_CLIENT", None)
    monkeypatch.setattr(tracing, "_CLIENT_READY", False)


def test_span_is_noop_without_credentials(no_tracing):
    with tracing.span("test.step", {"k": 1}) as run_id:
        assert run_id is None


def test_span_reraises(no_tracing):
    with pytest.raises(RuntimeError):
        with tracing.span("test.fail"):
            raise RuntimeError("boom")


def test_embeddings_offline(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    emb = OpenAIEmbeddingWrapper()
    assert emb.offline
    assert emb.embed_documents([]) == []
    vectors = emb.embed_documents(["a", "b"])
    assert len(vectors) == 2 and len(vectors[0]) == EMBEDDING_DIM
    assert emb.embed_query("a") == [0.0] * EMBEDDING_DIM


def test_client_built_once_across_threads(monkeypatch):
    monkeypatch.setenv("LANGSMITH_API_KEY", "test-key")
    monkeypatch.setattr(tracing, "_CLIENT", None)
    monkeypatch.setattr(tracing, "_CLIENT_READY", False)
    built = []
    monkeypatch.setattr(tracing, "Client", lambda: built.append(1) or object())

    threads = [threading.Thread(target=tracing._client) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert len(built) == 1
