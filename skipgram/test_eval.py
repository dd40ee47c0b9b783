import numpy as np
import pytest

from skipgram.errors import ConfigurationError, UnknownWordError
from skipgram.eval import (
    cosine_similarity,
    invert_vocabulary,
    nearest_word,
    nearest_words,
    pairwise_distances,
)
from skipgram.vectors import PAD, WordVectors

# Unit tests: nearest-neighbour query, frequency cutoff, WordVectors persistence.

INDEX_WORD = {1: "a", 2: "b", 3: "c"}


def _table() -> np.ndarray:
    # Row 0 copies "a" so a query that forgot to skip the reserved row would return it
    return np.array([[1.0, 0.0], [1.0, 0.0], [1.0, 0.2], [-1.0, 0.2]])


@pytest.mark.parametrize("metric", ["euclidean", "cosine"])
def test_nearest_word_picks_closest(metric):
    assert nearest_word(_table(), INDEX_WORD, "a", ignore_n_most_common=0, metric=metric) == "b"
    assert nearest_word(_table(), INDEX_WORD, "c", ignore_n_most_common=0, metric=metric) == "b"


def test_frequency_cutoff_skips_top_ranks():
    assert nearest_word(_table(), INDEX_WORD, "a", ignore_n_most_common=1) == "b"
    assert nearest_word(_table(), INDEX_WORD, "a", ignore_n_most_common=2) == "c"


def test_everything_filtered_returns_none():
    assert nearest_word(_table(), INDEX_WORD, "a", ignore_n_most_common=3) is None
    assert nearest_word(_table(), INDEX_WORD, "a") is None  # default cutoff 50


def test_unknown_query_word():
    with pytest.raises(LookupError):
        nearest_word(_table(), INDEX_WORD, "zzz")
    with pytest.raises(UnknownWordError):
        nearest_words(_table(), INDEX_WORD, "zzz")


def test_nearest_words_sorted_with_distances():
    found = nearest_words(_table(), INDEX_WORD, "a", k=5)
    assert [w for w, _ in found] == ["b", "c"]
    assert np.isclose(found[0][1], 0.2)
    assert np.isclose(found[1][1], np.sqrt(4.04))


def test_pairwise_distances_unknown_metric():
    with pytest.raises(ConfigurationError):
        pairwise_distances(_table(), 1, metric="manhattan")


def test_cosine_similarity():
    assert np.isclose(cosine_similarity([1.0, 0.0], [2.0, 0.0]), 1.0)
    assert np.isclose(cosine_similarity([1.0, 0.0], [0.0, 3.0]), 0.0)


def test_word_vectors_queries():
    vectors = WordVectors(_table(), INDEX_WORD)
    assert len(vectors) == 3 and vectors.dim == 2
    assert "b" in vectors and "zzz" not in vectors
    assert list(vectors) == ["a", "b", "c"]
    np.testing.assert_array_equal(vectors.vector("c"), [-1.0, 0.2])
    assert vectors.nearest("a", ignore_n_most_common=0) == "b"
    assert vectors.nearest("a", ignore_n_most_common=3) is None
    assert [w for w, _ in vectors.most_similar("c", k=1)] == ["b"]
    with pytest.raises(UnknownWordError):
        vectors.vector("zzz")


def test_word_vectors_are_immutable():
    table = _table()
    vectors = WordVectors(table, INDEX_WORD)
    with pytest.raises(ValueError):
        vectors.vectors[1, 0] = 5.0
    table[1, 0] = 5.0
    assert vectors.vectors[1, 0] == 1.0


def test_word_vectors_reject_bad_indices():
    with pytest.raises(ValueError):
        WordVectors(_table(), {0: "pad", 1: "a"})
    with pytest.raises(ValueError):
        WordVectors(_table(), {4: "out"})


def test_save_and_load(tmp_path):
    vectors = WordVectors(_table(), INDEX_WORD)
    vectors.save(str(tmp_path))
    lines = (tmp_path / "vocab.txt").read_text(encoding="utf-8").splitlines()
    assert lines == [PAD, "a", "b", "c"]
    loaded = WordVectors.load(str(tmp_path))
    np.testing.assert_array_equal(loaded.vectors, vectors.vectors)
    assert loaded.index_word == INDEX_WORD


def test_load_rejects_mismatched_files(tmp_path):
    WordVectors(_table(), INDEX_WORD).save(str(tmp_path))
    (tmp_path / "vocab.txt").write_text("<pad>\na\n", encoding="utf-8")
    with pytest.raises(ValueError):
        WordVectors.load(str(tmp_path))


def test_precomputed_word_index():
    word_index = invert_vocabulary(INDEX_WORD)
    assert word_index == {"a": 1, "b": 2, "c": 3}
    found = nearest_words(_table(), INDEX_WORD, "a", k=1, word_index=word_index)
    assert [w for w, _ in found] == ["b"]
    found = nearest_word(_table(), INDEX_WORD, "c", ignore_n_most_common=0, word_index=word_index)
    assert found == "b"
    with pytest.raises(UnknownWordError):
        nearest_word(_table(), INDEX_WORD, "zzz", word_index=word_index)
