import argparse
import json
import os
from typing import List

import numpy as np

from skipgram.config import Word2VecConfig
from skipgram.corpus import TextCorpus
from skipgram.train import train_word2vec
from skipgram.vectors import WordVectors

# Figures for a training run: loss curve and 2D PCA of the pivot table.
# Run: python -m skipgram.visualize [--corpus-dir DIR]

# Repeated so we get enough steps for a visible loss curve
DEMO_DOCUMENTS = [
    "the quick brown fox jumps over the lazy dog",
    "the dog and the fox are animals",
    "quick animals jump over lazy dogs",
    "brown foxes and lazy dogs",
    "the quick brown fox runs",
    "the lazy dog sleeps",
] * 8


def _pca2(X: np.ndarray) -> np.ndarray:
    """Project rows of X onto first 2 principal components (pure NumPy SVD).

    Args:
        X: Array of shape (n_samples, n_features).

    Returns:
        Array of shape (n_samples, 2); missing components (D < 2) are zero.
    """
    X_centered = X - X.mean(axis=0)
    _, _, Vt = np.linalg.svd(X_centered, full_matrices=False)
    coords = np.zeros((X.shape[0], 2), dtype=np.float64)
    proj = X_centered @ Vt[:2].T
    coords[:, : proj.shape[1]] = proj
    return coords


def plot_loss_curve(history: List[dict], path: str) -> str:
    """Save the loss history as a line plot; returns the path written."""
    import matplotlib

    matplotlib.use("Agg")
    import matplotlib.pyplot as plt

    steps = [h["step"] for h in history]
    losses = [h["loss"] for h in history]
    plt.figure(figsize=(6, 4))
    if not steps:
        plt.text(0.5, 0.5, "No steps logged", ha="center", va="center")
    else:
        kwargs = {"color": "C0"}
        if len(steps) <= 20:
            kwargs["marker"] = "o"
            kwargs["markersize"] = 4
        plt.plot(steps, losses, **kwargs)
    plt.xlabel("Step")
    plt.ylabel("Loss")
    plt.title("Skip-gram training loss")
    plt.tight_layout()
    plt.savefig(path, dpi=120)
    plt.close()
    return path


def plot_embeddings(vectors: WordVectors, path: str, max_labels: int = 50) -> str:
    """Scatter the vocabulary rows (index 1 onward) on their first two principal components.

    Only the max_labels most frequent words are annotated.
    """
    import matplotlib

    matplotlib.use("Agg")
    import matplotlib.pyplot as plt

    coords = _pca2(vectors.vectors[1:])
    plt.figure(figsize=(8, 6))
    plt.scatter(coords[:, 0], coords[:, 1], alpha=0.7, s=20)
    for row in range(min(max_labels, len(coords))):
        word = vectors.index_word.get(row + 1)
        if word is not None:
            plt.annotate(word, (coords[row, 0], coords[row, 1]), fontsize=7, alpha=0.9)
    plt.xlabel("PC1")
    plt.ylabel("PC2")
    plt.title("Pivot embeddings (PCA)")
    plt.tight_layout()
    plt.savefig(path, dpi=120)
    plt.close()
    return path


def main() -> None:
    """Train, then save loss curve, loss history and PCA figure to save_dir."""
    ap = argparse.ArgumentParser()
    ap.add_argument("--save_dir", type=str, default="figures")
    ap.add_argument("--corpus-dir", type=str, default=None)
    ap.add_argument("--epochs", type=int, default=5)
    ap.add_argument("--dim", type=int, default=25)
    ap.add_argument("--seed", type=int, default=42)
    args = ap.parse_args()

    documents = TextCorpus(args.corpus_dir) if args.corpus_dir else DEMO_DOCUMENTS
    config = Word2VecConfig(
        embedding_dim=args.dim,
        window_size=3,
        n_epochs=args.epochs,
        batch_size=32,
        seed=args.seed,
        log_every=5,
    )
    vectors, _, history = train_word2vec(documents, config)

    os.makedirs(args.save_dir, exist_ok=True)
    print(f"Saved {plot_loss_curve(history, os.path.join(args.save_dir, 'loss_curve.png'))}")
    with open(os.path.join(args.save_dir, "loss_history.json"), "w") as f:
        json.dump(history, f, indent=0)
    print(f"Saved {plot_embeddings(vectors, os.path.join(args.save_dir, 'embeddings_pca.png'))}")


if __name__ == "__main__":
    main()
