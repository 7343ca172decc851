"""OpenAI embeddings exposed through LangChain's Embeddings interface (for FAISS)."""
from __future__ import annotations
from typing import List
import os
from langchain_core.embeddings import Embeddings
from openai import OpenAI

EMBEDDING_DIM = 1536  # text-embedding-3-small


class OpenAIEmbeddingWrapper(Embeddings):
    def __init__(self, model: str = "text-embedding-3-small"):
        self.model = model
        api_key = os.getenv("OPENAI_API_KEY")
        # Offline when no key: callers check `offline` and skip semantic ranking
        self.client = OpenAI(api_key=api_key) if api_key else None

    @property
    def offline(self) -> bool:
        return self.client is None

    def embed_documents(self, texts: List[str]) -> List[List[float]]:
        if not texts:
            return []
        if self.offline:
            return [[0.0] * EMBEDDING_DIM for _ in texts]
        resp = self.client.embeddings.create(model=self.model, input=texts)
        return [d.embedding for d in resp.data]

    def embed_query(self, text: str) -> List[float]:
        if self.offline:
            return [0.0] * EMBEDDING_DIM
        resp = self.client.embeddings.create(model=self.model, input=[text])
        return resp.data[0].embedding
