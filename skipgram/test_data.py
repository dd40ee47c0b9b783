import numpy as np
import pytest

from skipgram.data import (
    _hits_window,
    keep_probabilities,
    make_sampling_table,
    pair_batches,
    skipgram_pairs,
)
from skipgram.errors import ConfigurationError

# Unit tests: sampling table, positive windows, negative sampling, batching.


def _uniform_table(size: int) -> np.ndarray:
    counts = np.ones(size)
    counts[0] = 0
    return make_sampling_table(counts)


def test_sampling_table_favours_frequent_words():
    probs = make_sampling_table(np.array([0.0, 10.0, 1.0, 100.0]))
    assert probs[0] == 0.0
    assert np.isclose(probs.sum(), 1.0)
    assert probs[3] > probs[1] > probs[2] > 0


def test_sampling_table_all_zero_counts():
    probs = make_sampling_table(np.zeros(4))
    assert not probs.any()


def test_keep_probabilities_drop_frequent_words():
    keep = keep_probabilities(np.array([0.0, 1000.0, 1.0]), t=1e-3)
    assert keep[1] < keep[2] <= 1.0


def test_positive_pairs_small_window():
    p, c, l = skipgram_pairs([1, 2, 3], 1, 0, _uniform_table(4))
    assert set(zip(p.tolist(), c.tolist())) == {(1, 2), (2, 1), (2, 3), (3, 2)}
    assert len(p) == 4
    assert np.all(l == 1)


def test_positive_pairs_bounded_and_within_window():
    seq = [1, 2, 3, 4, 5, 6, 7]
    W = 2
    p, c, l = skipgram_pairs(seq, W, 0, _uniform_table(8))
    assert len(p) <= len(seq) * 2 * W
    # 2 + 3 + 4 + 4 + 4 + 3 + 2
    assert len(p) == 22
    # words are distinct, so position = word - 1
    assert np.all(np.abs(p - c) <= W)
    assert np.all(p != c)


def test_negatives_per_positive_and_labels():
    table = _uniform_table(20)
    rng = np.random.default_rng(0)
    p, c, l = skipgram_pairs([1, 2, 3, 4], 1, 4, table, rng=rng)
    n_pos = int((l == 1).sum())
    assert n_pos == 6
    assert int((l == 0).sum()) == 4 * n_pos
    neg = c[l == 0]
    assert np.all((neg >= 1) & (neg < 20))


def test_negatives_avoid_window_words_when_possible():
    table = _uniform_table(10)
    rng = np.random.default_rng(1)
    p, c, l = skipgram_pairs([1, 2, 3], 2, 5, table, rng=rng, max_retries=50)
    assert not np.isin(c[l == 0], [1, 2, 3]).any()


def test_negatives_kept_when_no_alternative():
    # Every word in the vocabulary is in the window; collisions are tolerated.
    table = _uniform_table(3)
    p, c, l = skipgram_pairs([1, 2], 1, 2, table, rng=np.random.default_rng(0))
    assert int((l == 0).sum()) == 4
    assert np.isin(c[l == 0], [1, 2]).all()


def test_shuffle_keeps_the_same_triples():
    table = _uniform_table(6)
    p, c, l = skipgram_pairs([1, 2, 3, 4], 2, 0, table, shuffle=True, rng=np.random.default_rng(3))
    q, d, m = skipgram_pairs([1, 2, 3, 4], 2, 0, table)
    assert sorted(zip(p, c, l)) == sorted(zip(q, d, m))


def test_short_sequences_give_no_pairs():
    for seq in ([], [5]):
        p, c, l = skipgram_pairs(seq, 3, 2, _uniform_table(6))
        assert len(p) == len(c) == len(l) == 0


def test_invalid_window_and_negatives():
    with pytest.raises(ConfigurationError):
        skipgram_pairs([1, 2], 0, 1, _uniform_table(3))
    with pytest.raises(ConfigurationError):
        skipgram_pairs([1, 2], 1, -1, _uniform_table(3))


def test_negatives_need_a_sampling_table():
    with pytest.raises(ValueError):
        skipgram_pairs([1, 2], 1, 1, np.zeros(3))


def test_pair_batches_sizes_and_totals():
    table = _uniform_table(12)
    sequences = [[1, 2, 3, 4, 5], [6, 7], [8], [9, 10, 11]]
    batches = list(pair_batches(sequences, 7, 2, 1, table, rng=np.random.default_rng(0)))
    sizes = [len(b[0]) for b in batches]
    # positives: 14 + 2 + 0 + 4 = 20, doubled by one negative each
    assert sum(sizes) == 40
    assert all(s == 7 for s in sizes[:-1])
    assert 0 < sizes[-1] <= 7
    for pivots, contexts, labels in batches:
        assert pivots.shape == contexts.shape == labels.shape


def test_window_collision_check_is_chunked():
    rng = np.random.default_rng(0)
    seq = rng.integers(1, 20, size=50)
    positions = np.repeat(np.arange(50), 3)
    candidates = rng.integers(1, 20, size=len(positions))
    whole = _hits_window(candidates, positions, seq, 2, chunk_size=len(positions))
    pieces = _hits_window(candidates, positions, seq, 2, chunk_size=7)
    np.testing.assert_array_equal(whole, pieces)
    assert whole.any() and not whole.all()
