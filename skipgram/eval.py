from typing import Dict, List, Optional, Tuple

import numpy as np

from skipgram.errors import ConfigurationError, UnknownWordError

# Nearest-neighbour queries over a pivot table. Candidates are ranked by distance and the
# most frequent words (indices <= ignore_n_most_common) are skipped along with the query.

METRICS = ("euclidean", "cosine")


def l2_normalize(X: np.ndarray, axis: int = -1) -> np.ndarray:
    """L2-normalize array along the given axis (zero vectors get divisor 1).

    Args:
        X: Input array.
        axis: Axis along which to normalize. Defaults to -1.

    Returns:
        Normalized array, same shape as X.
    """
    norm = np.linalg.norm(X, axis=axis, keepdims=True)
    norm = np.where(norm > 0, norm, 1.0)
    return X / norm


def cosine_similarity(a: np.ndarray, b: np.ndarray) -> float:
    """Cosine similarity between two vectors (flattened); small epsilon in the denominator."""
    a = np.asarray(a, dtype=np.float64).ravel()
    b = np.asarray(b, dtype=np.float64).ravel()
    return float(np.dot(a, b) / (np.linalg.norm(a) * np.linalg.norm(b) + 1e-10))


def pairwise_distances(embeddings: np.ndarray, row: int, metric: str = "euclidean") -> np.ndarray:
    """Distance from embeddings[row] to every row.

    Args:
        embeddings: (V, D) table.
        row: Index of the query row.
        metric: "euclidean" or "cosine" (1 - cosine similarity). Defaults to "euclidean".

    Returns:
        1D array of length V.

    Raises:
        ConfigurationError: If metric is not recognised.
    """
    if metric == "euclidean":
        return np.linalg.norm(embeddings - embeddings[row], axis=1)
    if metric == "cosine":
        E = l2_normalize(embeddings, axis=1)
        return 1.0 - E @ E[row]
    raise ConfigurationError("metric", metric, f"must be one of {', '.join(METRICS)}")


def rank_neighbors(
    embeddings: np.ndarray,
    row: int,
    ignore_n_most_common: int = 50,
    metric: str = "euclidean",
) -> Tuple[np.ndarray, np.ndarray]:
    """Candidate indices sorted by ascending distance, with excluded indices removed.

    Excluded: the query row itself and every index <= ignore_n_most_common (index 0,
    the reserved row, is always excluded).

    Returns:
        Tuple (indices, distances) of equal length.
    """
    dists = pairwise_distances(embeddings, row, metric)
    order = np.argsort(dists, kind="stable")
    keep = (order != row) & (order > max(ignore_n_most_common, 0))
    order = order[keep]
    return order, dists[order]


def invert_vocabulary(index_word: Dict[int, str]) -> Dict[str, int]:
    return {w: i for i, w in index_word.items()}


def nearest_words(
    embeddings: np.ndarray,
    index_word: Dict[int, str],
    word: str,
    k: int = 5,
    ignore_n_most_common: int = 0,
    metric: str = "euclidean",
    word_index: Optional[Dict[str, int]] = None,
) -> List[Tuple[str, float]]:
    """The k closest words to word, with distances, after frequency-rank filtering.

    Pass word_index (see invert_vocabulary) when querying repeatedly so the reverse
    vocabulary is inverted only once.

    Raises:
        UnknownWordError: If word is not in index_word.
    """
    if word_index is None:
        word_index = invert_vocabulary(index_word)
    try:
        row = word_index[word]
    except KeyError:
        raise UnknownWordError(word) from None
    order, dists = rank_neighbors(embeddings, row, ignore_n_most_common, metric)
    return [(index_word[int(j)], float(d)) for j, d in zip(order[:k], dists[:k])]


def nearest_word(
    embeddings: np.ndarray,
    index_word: Dict[int, str],
    word: str,
    ignore_n_most_common: int = 50,
    metric: str = "euclidean",
    word_index: Optional[Dict[str, int]] = None,
) -> Optional[str]:
    """Closest other word to word, skipping the ignore_n_most_common most frequent words.

    Args:
        embeddings: Trained pivot table, shape (V, D); row i belongs to index i.
        index_word: Reverse vocabulary (index -> word).
        word: Query word.
        ignore_n_most_common: Frequency-rank cutoff K; indices <= K are skipped.
            Defaults to 50.
        metric: "euclidean" or "cosine". Defaults to "euclidean".
        word_index: Optional precomputed word -> index map. Defaults to None (built from
            index_word).

    Returns:
        The nearest eligible word, or None if every candidate was filtered out.

    Raises:
        UnknownWordError: If word is not in the vocabulary.
    """
    found = nearest_words(
        embeddings,
        index_word,
        word,
        k=1,
        ignore_n_most_common=ignore_n_most_common,
        metric=metric,
        word_index=word_index,
    )
    return found[0][0] if found else None


def print_nearest(
    embeddings: np.ndarray,
    index_word: Dict[int, str],
    query_words: Optional[List[str]] = None,
    k: int = 5,
    ignore_n_most_common: int = 0,
    metric: str = "euclidean",
) -> None:
    """Print k nearest neighbours for given or default query words.

    Args:
        embeddings: (V, D) embedding matrix.
        index_word: Reverse vocabulary.
        query_words: Words to query; if None, the first 3 words past the cutoff.
        k: Number of neighbours to show. Defaults to 5.
        ignore_n_most_common: Frequency-rank cutoff. Defaults to 0.
        metric: Distance metric. Defaults to "euclidean".
    """
    if query_words is None:
        first = ignore_n_most_common + 1
        query_words = [index_word[i] for i in range(first, first + 3) if i in index_word]
    word_index = invert_vocabulary(index_word)
    for w in query_words:
        try:
            found = nearest_words(
                embeddings, index_word, w, k, ignore_n_most_common, metric, word_index=word_index
            )
        except UnknownWordError:
            print(f"  '{w}' not in vocabulary")
            continue
        nn_str = ", ".join(f"{word}({dist:.3f})" for word, dist in found) or "(no candidates)"
        print(f"  '{w}' -> {nn_str}")
