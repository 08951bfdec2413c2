# core/local_embedder.py
import asyncio
from functools import lru_cache
from typing import List
import numpy as np
from sentence_transformers import SentenceTransformer
from util.errors import ProviderError
from util.timing import timed
import logging

logger = logging.getLogger(__name__)


@lru_cache(maxsize=4)
def _load_model(name: str) -> SentenceTransformer:
    """
    Lazy-load a sentence embedding model, once per name.

    Kept on CPU; corpora must be embedded with the same model name.
    """
    with timed(logger, "embed.model.load", model=name):
        return SentenceTransformer(name, device="cpu")


class LocalEmbeddingClient:
    """
    In-process embeddings via sentence-transformers. Encoding is blocking, so
    it runs in a worker thread and stays cancellable from the event loop.
    """

    def __init__(self, *, model: str) -> None:
        self.model = model

    def _encode(self, text: str) -> List[float]:
        model = _load_model(self.model)
        vec = model.encode([text], convert_to_numpy=True, normalize_embeddings=True)
        return np.asarray(vec[0], dtype=np.float64).tolist()

    async def embed(self, text: str) -> List[float]:
        with timed(logger, "embed.local", model=self.model, chars=len(text)):
            try:
                return await asyncio.to_thread(self._encode, text)
            except (OSError, RuntimeError, ValueError) as e:
                logger.error("embed.local.error err=%s", type(e).__name__)
                raise ProviderError(f"local embedding failed: {e}")
