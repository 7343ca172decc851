"""Central configuration for citation resolution, fetching and claim judging."""
import os
from dataclasses import dataclass, field


@dataclass
class AppConfig:
    # Resolver
    min_claim_length: int = 10
    context_chars: int = 150
    # Catalog previews: "claim" uses the first resolved claim, "window" the prose just before the footnote
    preview_mode: str = "claim"
    preview_chars: int = 200
    preview_window_chars: int = 100
    preview_window_keep: int = 80
    # Claim judge
    judge_model: str = field(default_factory=lambda: os.getenv("WIKICITE_JUDGE_MODEL", "gpt-4o-mini"))
    embed_model: str = "text-embedding-3-small"
    temperature: float = 0.0
    max_answer_tokens: int = 1024
    max_source_chars: int = 12000
    chunk_size: int = 1500
    chunk_overlap: int = 200
    retriever_k: int = 5
    # HTTP collaborators
    http_timeout: float = 10.0
    max_redirects: int = 5
    min_source_chars: int = 100
    user_agent: str = "WikiCiteVerify/1.0 (Citation verification educational tool)"

CONFIG = AppConfig()
