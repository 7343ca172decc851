"""Source chunking and FAISS passage selection for the claim judge.

Short sources go to the model whole. Long ones are split with LangChain's
RecursiveCharacterTextSplitter, embedded into an in-memory FAISS store, and
only the chunks closest to the claim are kept (re-ordered by their position
in the source so the excerpt still reads in order).
"""
from __future__ import annotations
import re
from typing import List, Optional
from langchain_community.vectorstores import FAISS
from langchain_core.documents import Document
from langchain_core.embeddings import Embeddings
from langchain_text_splitters import RecursiveCharacterTextSplitter
from .config import CONFIG, AppConfig
from .embedding_wrapper import OpenAIEmbeddingWrapper


def normalize_text(txt: str) -> str:
    return re.sub(r"[ \t]+", " ", txt).strip()


def chunk_source(text: str, config: AppConfig = CONFIG) -> List[Document]:
    splitter = RecursiveCharacterTextSplitter(
        chunk_size=config.chunk_size,
        chunk_overlap=config.chunk_overlap,
        add_start_index=True,
        separators=["\n\n", "\n", ". ", " "],
    )
    return splitter.create_documents([normalize_text(text)])


def build_index(chunks: List[Document], embeddings: Embeddings) -> FAISS:
    return FAISS.from_documents(chunks, embeddings)


def select_passages(claim: str, source_text: str, embeddings: Optional[Embeddings] = None, config: AppConfig = CONFIG) -> str:
    """Text of `source_text` worth showing the judge for `claim`."""
    if len(source_text) <= config.max_source_chars:
        return source_text
    embeddings = embeddings or OpenAIEmbeddingWrapper(model=config.embed_model)
    if getattr(embeddings, "offline", False):
        return source_text[:config.max_source_chars]
    chunks = chunk_source(source_text, config)
    store = build_index(chunks, embeddings)
    docs = store.similarity_search(claim, k=min(config.retriever_k, len(chunks)))
    docs.sort(key=lambda d: d.metadata.get("start_index", 0))
    return "\n\n[...]\n\n".join(d.page_content for d in docs)
