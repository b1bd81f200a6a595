"""
Embedding providers. Each maps a batch of texts to one vector per text, in order.
"""

from abc import ABC, abstractmethod
import hashlib
import re
from typing import List, Sequence
import numpy as np

_TOKEN_RE = re.compile(r"\w+", re.UNICODE)


class IEmbeddingProvider(ABC):
    """Abstract interface for embedding providers."""

    @abstractmethod
    def embed(self, texts: Sequence[str]) -> List[List[float]]:
        """Generate one embedding vector per input text, same order."""
        pass

    @abstractmethod
    def get_dimension(self) -> int:
        """Get the dimension of the embedding vectors."""
        pass

    def embed_text(self, text: str) -> List[float]:
        """Generate embedding vector for a single text."""
        return self.embed([text])[0]


class HashingEmbedding(IEmbeddingProvider):
    """Deterministic token-hashing embedding provider.

    Each lowercase word token is hashed into a signed bucket, so texts sharing
    words land close together under cosine similarity. Useful for development
    and tests without downloading a model.
    """

    def __init__(self, dimension: int = 384):
        self.dimension = dimension

    def _bucket(self, token: str):
        digest = hashlib.md5(token.encode("utf-8"), usedforsecurity=False).digest()
        index = int.from_bytes(digest[:4], "little") % self.dimension
        sign = 1.0 if digest[4] % 2 == 0 else -1.0
        return index, sign

    def embed(self, texts: Sequence[str]) -> List[List[float]]:
        vectors = []
        for text in texts:
            vector = np.zeros(self.dimension, dtype=np.float32)
            # Texts without word characters still hash as a whole
            tokens = _TOKEN_RE.findall(text.lower()) or [text]
            for token in tokens:
                index, sign = self._bucket(token)
                vector[index] += sign

            norm = np.linalg.norm(vector)
            if norm > 0:
                vector /= norm
            vectors.append(vector.tolist())
        return vectors

    def get_dimension(self) -> int:
        return self.dimension


class SentenceTransformerEmbedding(IEmbeddingProvider):
    """Sentence transformers embedding provider using pre-trained models.

    Defaults to BAAI/bge-base-en-v1.5 (768 dimensions). The model is loaded on first use.
    """

    def __init__(self, model_name: str = "BAAI/bge-base-en-v1.5"):
        self.model_name = model_name
        self._model = None
        self._dimension = None

    @property
    def model(self):
        if self._model is None:
            from sentence_transformers import SentenceTransformer
            self._model = SentenceTransformer(self.model_name)
        return self._model

    def embed(self, texts: Sequence[str]) -> List[List[float]]:
        """Generate embedding vectors using sentence transformers."""
        if not texts:
            return []
        embeddings = self.model.encode(list(texts), convert_to_numpy=True, normalize_embeddings=True)
        return embeddings.tolist()

    def get_dimension(self) -> int:
        """Get the dimension of the embedding vectors."""
        if self._dimension is None:
            self._dimension = self.model.get_sentence_embedding_dimension()
        return self._dimension
