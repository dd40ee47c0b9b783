import os
from typing import Dict, Iterator, List, Optional, Tuple

import numpy as np

from skipgram.errors import UnknownWordError
from skipgram.eval import rank_neighbors

# Read-only pivot table plus reverse vocabulary: the artifact left after training.
# On disk: vectors.npy (rows in index order) and vocab.txt (one word per line, line 0
# is a placeholder for the reserved index).

PAD = "<pad>"
VECTORS_FILE = "vectors.npy"
VOCAB_FILE = "vocab.txt"


class WordVectors:
    """Immutable embedding table queried by word.

    Attributes:
        vectors (np.ndarray): (V, D) read-only array; row i belongs to index i, row 0 reserved.
        index_word (dict): Index -> word for indices 1..V-1.
        word_index (dict): Word -> index.
    """

    def __init__(self, vectors: np.ndarray, index_word: Dict[int, str]):
        vectors = np.array(vectors, dtype=np.float64)
        if vectors.ndim != 2:
            raise ValueError(f"vectors must be 2D, got shape {vectors.shape}")
        bad = [i for i in index_word if not 1 <= i < len(vectors)]
        if bad:
            raise ValueError(f"index_word has indices outside 1..{len(vectors) - 1}: {bad[:5]}")
        vectors.setflags(write=False)
        self.vectors = vectors
        self.index_word = dict(index_word)
        self.word_index = {w: i for i, w in self.index_word.items()}

    def __len__(self) -> int:
        return len(self.index_word)

    def __contains__(self, word: str) -> bool:
        return word in self.word_index

    def __iter__(self) -> Iterator[str]:
        return (self.index_word[i] for i in sorted(self.index_word))

    @property
    def dim(self) -> int:
        return self.vectors.shape[1]

    def index(self, word: str) -> int:
        try:
            return self.word_index[word]
        except KeyError:
            raise UnknownWordError(word) from None

    def vector(self, word: str) -> np.ndarray:
        return self.vectors[self.index(word)]

    def most_similar(
        self, word: str, k: int = 5, ignore_n_most_common: int = 0, metric: str = "euclidean"
    ) -> List[Tuple[str, float]]:
        """Up to k (word, distance) pairs closest to word, nearest first."""
        order, dists = rank_neighbors(self.vectors, self.index(word), ignore_n_most_common, metric)
        return [(self.index_word[int(j)], float(d)) for j, d in zip(order[:k], dists[:k])]

    def nearest(
        self, word: str, ignore_n_most_common: int = 50, metric: str = "euclidean"
    ) -> Optional[str]:
        """Closest other word past the frequency cutoff, or None if nothing is left.

        Raises:
            UnknownWordError: If word is not in the vocabulary.
        """
        found = self.most_similar(word, 1, ignore_n_most_common, metric)
        return found[0][0] if found else None

    def save(self, directory: str) -> None:
        os.makedirs(directory, exist_ok=True)
        np.save(os.path.join(directory, VECTORS_FILE), self.vectors)
        words = [self.index_word.get(i, PAD) for i in range(len(self.vectors))]
        words[0] = PAD
        with open(os.path.join(directory, VOCAB_FILE), "w", encoding="utf-8") as f:
            f.write("\n".join(words) + "\n")

    @classmethod
    def load(cls, directory: str) -> "WordVectors":
        """Read a table written by save().

        Raises:
            ValueError: If the word list and the table disagree on the number of rows.
        """
        vectors = np.load(os.path.join(directory, VECTORS_FILE))
        with open(os.path.join(directory, VOCAB_FILE), encoding="utf-8") as f:
            words = f.read().splitlines()
        if len(words) != len(vectors):
            raise ValueError(
                f"{VOCAB_FILE} has {len(words)} lines but table has {len(vectors)} rows"
            )
        return cls(vectors, {i: w for i, w in enumerate(words) if i > 0})
