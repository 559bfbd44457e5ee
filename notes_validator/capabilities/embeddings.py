"""Sentence-embedding capability backed by a Hugging Face encoder.

The heavy `torch`/`transformers` imports happen inside initialization, so the
package imports and runs (heuristics only) when they are not installed.
"""

from __future__ import annotations

import threading
from typing import Any, Callable, Sequence

import numpy as np

from notes_validator.capabilities.base import Capability
from notes_validator.common.exceptions import CapabilityUnavailableError
from notes_validator.common.logger import get_logger

logger = get_logger("capabilities.embeddings")

Encoder = Callable[[str], Sequence[float]]
EncoderLoader = Callable[[str], Encoder]

DEFAULT_EMBEDDING_MODEL = "mixedbread-ai/mxbai-embed-xsmall-v1"


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    vec_a = np.asarray(a, dtype=np.float64)
    vec_b = np.asarray(b, dtype=np.float64)
    norm = float(np.linalg.norm(vec_a) * np.linalg.norm(vec_b))
    if norm == 0.0:
        return 0.0
    return float(np.dot(vec_a, vec_b) / norm)


def load_transformers_encoder(model_name: str, device: str | None = None) -> Encoder:
    """Return a mean-pooled, L2-normalised encoder for *model_name*."""
    import torch
    from transformers import AutoModel, AutoTokenizer

    if device:
        torch_device = torch.device(device)
    elif torch.cuda.is_available():
        torch_device = torch.device("cuda")
    else:
        torch_device = torch.device("cpu")

    tokenizer = AutoTokenizer.from_pretrained(model_name)
    model = AutoModel.from_pretrained(model_name).to(torch_device)
    model.eval()

    def encode(text: str) -> list[float]:
        inputs = tokenizer(text, return_tensors="pt", truncation=True, max_length=512)
        inputs = {k: v.to(torch_device) for k, v in inputs.items()}
        with torch.no_grad():
            hidden = model(**inputs).last_hidden_state
        mask = inputs["attention_mask"].unsqueeze(-1).to(hidden.dtype)
        pooled = (hidden * mask).sum(dim=1) / mask.sum(dim=1).clamp(min=1e-9)
        pooled = torch.nn.functional.normalize(pooled, p=2, dim=1)
        return pooled[0].cpu().tolist()

    logger.info("Embedding model %s loaded on %s", model_name, torch_device)
    return encode


class EmbeddingCapability(Capability):
    """Text embeddings plus a cosine `score(text, query)` helper."""

    name = "embedding"

    def __init__(
        self,
        model_name: str = DEFAULT_EMBEDDING_MODEL,
        *,
        loader: EncoderLoader | None = None,
    ) -> None:
        super().__init__()
        self.model_name = model_name
        self._loader: EncoderLoader = loader or load_transformers_encoder
        self._encode: Encoder | None = None
        self._query_cache: dict[str, np.ndarray] = {}
        self._cache_lock = threading.Lock()

    def _initialize(self) -> None:
        self._encode = self._loader(self.model_name)

    def embed(self, text: str) -> np.ndarray:
        if not self.ensure_ready() or self._encode is None:
            raise CapabilityUnavailableError(self.name, self.failure_reason)
        return np.asarray(self._encode(text), dtype=np.float64)

    def _embed_query(self, query: str) -> np.ndarray:
        with self._cache_lock:
            cached = self._query_cache.get(query)
        if cached is not None:
            return cached
        vector = self.embed(query)
        with self._cache_lock:
            self._query_cache[query] = vector
        return vector

    def score(self, text: str, query: str) -> float:
        """Cosine similarity between *text* and a (cached) *query* embedding."""
        return cosine_similarity(self.embed(text), self._embed_query(query))

    def describe(self) -> dict[str, Any]:
        return {"model": self.model_name, "state": self.state.value, "failure": self.failure_reason}


__all__ = [
    "DEFAULT_EMBEDDING_MODEL",
    "EmbeddingCapability",
    "cosine_similarity",
    "load_transformers_encoder",
]
