from typing import Dict, Optional, Tuple, Union

import numpy as np

from skipgram.errors import ConfigurationError
from skipgram.optim import Adam
from skipgram.vectors import WordVectors

# Skip-gram embedding model: pivot and context tables scored by sigmoid(dot) and trained
# with binary cross-entropy. Gradients are written out by hand; see forward_backward.

# Probabilities are clamped to [EPS, 1 - EPS] before any log.
EPS = 1e-7


def _sigmoid(x: np.ndarray) -> np.ndarray:
    """Numerically stable sigmoid; clips input to avoid overflow in exp.

    Args:
        x: Input array (any shape).

    Returns:
        Sigmoid of x, same shape; values in [0, 1].
    """
    x = np.clip(x, -500.0, 500.0)
    return 1.0 / (1.0 + np.exp(-x))


class SkipGramModel:
    """Two embedding tables trained to tell real (pivot, context) pairs from sampled ones.

    Row 0 of each table belongs to the reserved index and never receives gradient
    from encoded data.

    Attributes:
        W_pivot (np.ndarray): Pivot embeddings, shape (V, D). The exported artifact.
        W_context (np.ndarray): Context embeddings, shape (V, D). Training signal only.
        V (int): Number of rows (vocabulary size including the reserved row 0).
        D (int): Embedding dimension.
        optimizer: Object with step(params, grads); defaults to Adam(lr=0.01).
    """

    def __init__(
        self,
        vocab_size: int,
        embedding_dim: int,
        optimizer=None,
        seed: Optional[int] = None,
        init_scale: float = 0.05,
    ):
        """Initialize both tables with small uniform random values.

        Args:
            vocab_size: Number of rows V (tokenizer.vocab_size + 1).
            embedding_dim: Embedding dimension D.
            optimizer: Optimizer instance. Defaults to None (Adam with lr=0.01).
            seed: Random seed for initialization. Defaults to None.
            init_scale: Half-width of the uniform init range. Defaults to 0.05.

        Raises:
            ConfigurationError: If vocab_size or embedding_dim is below 1.
        """
        if vocab_size < 1:
            raise ConfigurationError("vocab_size", vocab_size, "must be >= 1")
        if embedding_dim < 1:
            raise ConfigurationError("embedding_dim", embedding_dim, "must be >= 1")
        rng = np.random.default_rng(seed)
        # Small init so sigmoid isn't saturated
        self.W_pivot = rng.uniform(-init_scale, init_scale, (vocab_size, embedding_dim))
        self.W_context = rng.uniform(-init_scale, init_scale, (vocab_size, embedding_dim))
        self.V = vocab_size
        self.D = embedding_dim
        self.optimizer = optimizer if optimizer is not None else Adam(lr=0.01)

    def _check_indices(self, name: str, indices) -> np.ndarray:
        """Indices as int64; negative values must not wrap around to the end of the table."""
        indices = np.asarray(indices, dtype=np.int64)
        if indices.size and (indices.min() < 0 or indices.max() >= self.V):
            raise IndexError(f"{name} index out of range [0, {self.V})")
        return indices

    def score(
        self, pivot: Union[int, np.ndarray], context: Union[int, np.ndarray]
    ) -> Union[float, np.ndarray]:
        """Predicted probability that context is a true context of pivot.

        Args:
            pivot: Pivot index or array of indices.
            context: Context index or array of indices, broadcastable against pivot.

        Returns:
            sigmoid(W_pivot[pivot] . W_context[context]) clamped to [EPS, 1 - EPS]; a float
            for scalar inputs, otherwise an array.

        Raises:
            IndexError: If an index is outside [0, V).
        """
        pivot = self._check_indices("pivot", pivot)
        context = self._check_indices("context", context)
        logits = np.sum(self.W_pivot[pivot] * self.W_context[context], axis=-1)
        probs = np.clip(_sigmoid(logits), EPS, 1.0 - EPS)
        if np.ndim(probs) == 0:
            return float(probs)
        return probs

    def forward_backward(
        self, pivots: np.ndarray, contexts: np.ndarray, labels: np.ndarray
    ) -> Tuple[float, np.ndarray, np.ndarray]:
        """Mean binary cross-entropy over the batch and its gradients.

        Args:
            pivots: Pivot indices, shape (B,).
            contexts: Context indices, shape (B,).
            labels: 1 for real pairs, 0 for negatives, shape (B,).

        Returns:
            Tuple (loss, dW_pivot, dW_context); gradients are dL/dW with shape (V, D).
        """
        pivots = self._check_indices("pivot", pivots)
        contexts = self._check_indices("context", contexts)
        y = np.asarray(labels, dtype=np.float64)
        B = pivots.shape[0]

        v = self.W_pivot[pivots]  # (B, D)
        u = self.W_context[contexts]  # (B, D)
        logits = np.sum(v * u, axis=1)
        sig = _sigmoid(logits)
        p = np.clip(sig, EPS, 1.0 - EPS)
        loss = -np.mean(y * np.log(p) + (1.0 - y) * np.log(1.0 - p))

        # d(BCE)/d(logit) = sigmoid(logit) - label, averaged over the batch
        g = (sig - y) / B  # (B,)
        dW_pivot = np.zeros_like(self.W_pivot)
        dW_context = np.zeros_like(self.W_context)
        np.add.at(dW_pivot, pivots, g[:, np.newaxis] * u)
        np.add.at(dW_context, contexts, g[:, np.newaxis] * v)
        return float(loss), dW_pivot, dW_context

    def train_batch(self, pivots: np.ndarray, contexts: np.ndarray, labels: np.ndarray) -> float:
        """One optimizer step on both tables; returns the batch loss before the update."""
        loss, dW_pivot, dW_context = self.forward_backward(pivots, contexts, labels)
        self.optimizer.step([self.W_pivot, self.W_context], [dW_pivot, dW_context])
        return loss

    def export_vectors(self, index_word: Dict[int, str]) -> WordVectors:
        """Copy the pivot table into a read-only WordVectors; the context table is dropped.

        Args:
            index_word: Reverse vocabulary (index -> word) for rows 1..V-1.

        Returns:
            WordVectors owning an immutable copy of W_pivot.
        """
        return WordVectors(self.W_pivot.copy(), index_word)
