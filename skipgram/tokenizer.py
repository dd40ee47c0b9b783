from collections import Counter
from typing import Dict, Iterable, Iterator, List

import numpy as np

from skipgram.errors import ConfigurationError, UnknownWordError

# Frequency-ranked vocabulary: index 1 is the most frequent word, index 0 is reserved.
# Filtered characters become whitespace, then documents are split on whitespace.

DEFAULT_FILTERS = '!"#$%&()*+,-./:;<=>?@[\\]^_`{|}~\t\n'


class Tokenizer:
    """Maps words to dense integer indices ordered by descending corpus frequency.

    Attributes:
        max_vocab_size (int): Maximum number of words kept.
        word_index (dict): Word -> index in [1, vocab_size].
        index_word (dict): Index -> word (reverse vocabulary).
        word_counts (Counter): Occurrence counts of the kept words.
    """

    def __init__(
        self, max_vocab_size: int = 50000, filters: str = DEFAULT_FILTERS, lower: bool = True
    ):
        if isinstance(max_vocab_size, bool) or not isinstance(max_vocab_size, int):
            raise ConfigurationError("max_vocab_size", max_vocab_size, "must be an integer")
        if max_vocab_size < 1:
            raise ConfigurationError("max_vocab_size", max_vocab_size, "must be >= 1")
        self.max_vocab_size = max_vocab_size
        self.filters = filters
        self.lower = lower
        self._table = str.maketrans({c: " " for c in filters})
        self.word_index: Dict[str, int] = {}
        self.index_word: Dict[int, str] = {}
        self.word_counts: Counter = Counter()
        self._fitted = False

    @property
    def vocab_size(self) -> int:
        return len(self.word_index)

    def split(self, document: str) -> List[str]:
        """Lowercase (optionally), replace filtered characters with spaces, split on whitespace."""
        if self.lower:
            document = document.lower()
        return document.translate(self._table).split()

    def fit(self, documents: Iterable[str]) -> "Tokenizer":
        """Count words over all documents and assign frequency-ordered indices.

        Ties keep first-seen order. An empty corpus gives an empty vocabulary.

        Args:
            documents: Iterable of document strings; consumed once.

        Returns:
            self, for chaining.

        Raises:
            RuntimeError: If the tokenizer was already fitted.
        """
        if self._fitted:
            raise RuntimeError("Tokenizer vocabulary is already built")
        counts: Counter = Counter()
        for document in documents:
            counts.update(self.split(document))
        # most_common is stable, so equal counts stay in insertion (first-seen) order
        kept = counts.most_common(self.max_vocab_size)
        self.word_index = {w: i for i, (w, _) in enumerate(kept, start=1)}
        self.index_word = {i: w for w, i in self.word_index.items()}
        self.word_counts = Counter(dict(kept))
        self._fitted = True
        return self

    def encode(self, document: str) -> List[int]:
        """Map a document to vocabulary indices, dropping unknown words."""
        word_index = self.word_index
        return [word_index[w] for w in self.split(document) if w in word_index]

    def encode_all(self, documents: Iterable[str]) -> Iterator[List[int]]:
        for document in documents:
            yield self.encode(document)

    def index_of(self, word: str) -> int:
        try:
            return self.word_index[word]
        except KeyError:
            raise UnknownWordError(word) from None

    def counts_array(self) -> np.ndarray:
        """Counts indexed by vocabulary index; shape (vocab_size + 1,), entry 0 is 0."""
        counts = np.zeros(self.vocab_size + 1, dtype=np.float64)
        for word, idx in self.word_index.items():
            counts[idx] = self.word_counts[word]
        return counts
