from typing import Iterable, Iterator, List, Optional, Sequence, Tuple

import numpy as np

from skipgram.errors import ConfigurationError

# Pair sampler for skip-gram: windowed positives plus negatives drawn from a unigram^0.75
# table over vocabulary indices. Negatives that hit the pivot's window are redrawn a few
# times and then kept; the leftover false negatives are the usual sampling noise.

Pairs = Tuple[np.ndarray, np.ndarray, np.ndarray]


def make_sampling_table(counts: np.ndarray, power: float = 0.75) -> np.ndarray:
    """Negative-sampling distribution over vocabulary indices (Mikolov et al.: power=0.75).

    Args:
        counts: 1D array indexed by vocabulary index; counts[0] belongs to the reserved index.
        power: Exponent for counts; 0.75 is standard. Defaults to 0.75.

    Returns:
        1D array of probabilities, same length as counts, with entry 0 and zero-count
        entries set to 0. All zeros if no index has a positive count.
    """
    counts = np.asarray(counts, dtype=np.float64)
    probs = np.zeros_like(counts)
    present = counts > 0
    probs[present] = np.power(counts[present], power)
    if len(probs):
        probs[0] = 0.0
    total = probs.sum()
    if total > 0:
        probs /= total
    return probs


def keep_probabilities(counts: np.ndarray, t: float = 1e-5) -> np.ndarray:
    """Per-index probability of keeping a pivot: sqrt(t / f) capped at 1.

    Args:
        counts: 1D array of counts indexed by vocabulary index.
        t: Subsampling threshold. Higher keeps more. Defaults to 1e-5.

    Returns:
        1D array of keep probabilities, same length as counts.
    """
    counts = np.asarray(counts, dtype=np.float64)
    total = counts.sum()
    if total <= 0:
        return np.ones_like(counts)
    freqs = counts / total
    keep = np.sqrt(t / np.clip(freqs, 1e-12, None))
    return np.minimum(keep, 1.0)


# Candidates checked per block in _hits_window; bounds the (block, 2W+1) scratch array
HIT_CHECK_CHUNK = 65536


def _hits_window(
    candidates: np.ndarray,
    positions: np.ndarray,
    seq: np.ndarray,
    window_size: int,
    chunk_size: int = HIT_CHECK_CHUNK,
) -> np.ndarray:
    """Mask of candidates equal to any word within window_size of their pivot position."""
    n = len(seq)
    offsets = np.arange(-window_size, window_size + 1)
    mask = np.zeros(len(candidates), dtype=bool)
    for start in range(0, len(candidates), chunk_size):
        stop = start + chunk_size
        idx = positions[start:stop, np.newaxis] + offsets  # (chunk, 2W+1)
        valid = (idx >= 0) & (idx < n)
        words = np.where(valid, seq[np.clip(idx, 0, n - 1)], -1)
        mask[start:stop] = np.any(words == candidates[start:stop, np.newaxis], axis=1)
    return mask


def skipgram_pairs(
    sequence: Sequence[int],
    window_size: int,
    negative_samples: int,
    sampling_table: np.ndarray,
    rng: Optional[np.random.Generator] = None,
    keep_probs: Optional[np.ndarray] = None,
    shuffle: bool = False,
    max_retries: int = 3,
) -> Pairs:
    """Build (pivot, context, label) triples for one encoded document.

    For each position i and offset d in 1..window_size, (w_i, w_{i-d}) and (w_i, w_{i+d})
    are positives when in bounds (no wraparound). Every positive brings negative_samples
    negatives (w_i, r, 0) with r drawn from sampling_table.

    Args:
        sequence: Vocabulary indices of one document.
        window_size: Context radius on each side.
        negative_samples: Negatives per positive; 0 gives positives only.
        sampling_table: Probabilities over vocabulary indices (see make_sampling_table).
        rng: Random generator. Defaults to None (new default_rng).
        keep_probs: Optional per-index pivot keep probabilities (see keep_probabilities).
        shuffle: Whether to shuffle the returned triples. Defaults to False.
        max_retries: Redraws for negatives that land in the pivot's window. Defaults to 3.

    Returns:
        Tuple (pivots, contexts, labels) of int64 arrays with equal length. Positives come
        first unless shuffle is set.

    Raises:
        ConfigurationError: If window_size < 1 or negative_samples < 0.
        ValueError: If negatives are requested but sampling_table has no mass.
    """
    if window_size < 1:
        raise ConfigurationError("window_size", window_size, "must be >= 1")
    if negative_samples < 0:
        raise ConfigurationError("negative_samples", negative_samples, "must be >= 0")
    if rng is None:
        rng = np.random.default_rng()
    seq = np.asarray(sequence, dtype=np.int64)
    n = len(seq)

    pivots: List[np.ndarray] = []
    contexts: List[np.ndarray] = []
    positions: List[np.ndarray] = []
    for i in range(n):
        if keep_probs is not None and rng.random() >= keep_probs[seq[i]]:
            continue
        left = seq[max(0, i - window_size) : i][::-1]
        right = seq[i + 1 : i + window_size + 1]
        # Interleave so offset d contributes (i-d, i+d) before offset d+1
        window = np.empty(len(left) + len(right), dtype=np.int64)
        k = min(len(left), len(right))
        window[0 : 2 * k : 2] = left[:k]
        window[1 : 2 * k : 2] = right[:k]
        window[2 * k :] = left[k:] if len(left) > k else right[k:]
        if len(window) == 0:
            continue
        pivots.append(np.full(len(window), seq[i], dtype=np.int64))
        contexts.append(window)
        positions.append(np.full(len(window), i, dtype=np.int64))

    if not pivots:
        empty = np.zeros(0, dtype=np.int64)
        return empty, empty.copy(), empty.copy()

    pos_pivots = np.concatenate(pivots)
    pos_contexts = np.concatenate(contexts)
    n_pos = len(pos_pivots)
    if negative_samples == 0:
        return pos_pivots, pos_contexts, np.ones(n_pos, dtype=np.int64)

    table = np.asarray(sampling_table, dtype=np.float64)
    if table.sum() <= 0:
        raise ValueError("sampling_table has no probability mass")
    neg_positions = np.repeat(np.concatenate(positions), negative_samples)
    negs = rng.choice(len(table), size=len(neg_positions), p=table)
    bad = np.flatnonzero(_hits_window(negs, neg_positions, seq, window_size))
    for _ in range(max_retries):
        if len(bad) == 0:
            break
        negs[bad] = rng.choice(len(table), size=len(bad), p=table)
        # Only the redrawn candidates can still collide
        bad = bad[_hits_window(negs[bad], neg_positions[bad], seq, window_size)]

    all_pivots = np.concatenate([pos_pivots, np.repeat(pos_pivots, negative_samples)])
    all_contexts = np.concatenate([pos_contexts, negs.astype(np.int64)])
    labels = np.concatenate(
        [np.ones(n_pos, dtype=np.int64), np.zeros(len(negs), dtype=np.int64)]
    )
    if shuffle:
        order = rng.permutation(len(labels))
        all_pivots, all_contexts, labels = all_pivots[order], all_contexts[order], labels[order]
    return all_pivots, all_contexts, labels


def pair_batches(
    sequences: Iterable[Sequence[int]],
    batch_size: int,
    window_size: int,
    negative_samples: int,
    sampling_table: np.ndarray,
    rng: Optional[np.random.Generator] = None,
    keep_probs: Optional[np.ndarray] = None,
    max_retries: int = 3,
) -> Iterator[Pairs]:
    """Yield batches of (pivots, contexts, labels) over a lazy stream of sequences.

    Triples are shuffled within each document and carried across document boundaries so
    every batch except possibly the last has exactly batch_size rows.

    Args:
        sequences: Iterable of encoded documents.
        batch_size: Triples per batch.
        window_size: Context radius.
        negative_samples: Negatives per positive.
        sampling_table: Negative-sampling distribution.
        rng: Random generator. Defaults to None.
        keep_probs: Optional pivot keep probabilities. Defaults to None.
        max_retries: Negative redraw limit. Defaults to 3.

    Yields:
        Tuples (pivots, contexts, labels) with shapes (B,), (B,), (B,).
    """
    if batch_size < 1:
        raise ConfigurationError("batch_size", batch_size, "must be >= 1")
    if rng is None:
        rng = np.random.default_rng()
    buf_p: List[np.ndarray] = []
    buf_c: List[np.ndarray] = []
    buf_l: List[np.ndarray] = []
    buffered = 0
    for sequence in sequences:
        p, c, l = skipgram_pairs(
            sequence,
            window_size,
            negative_samples,
            sampling_table,
            rng=rng,
            keep_probs=keep_probs,
            shuffle=True,
            max_retries=max_retries,
        )
        if len(p) == 0:
            continue
        buf_p.append(p)
        buf_c.append(c)
        buf_l.append(l)
        buffered += len(p)
        if buffered < batch_size:
            continue
        all_p, all_c, all_l = np.concatenate(buf_p), np.concatenate(buf_c), np.concatenate(buf_l)
        start = 0
        while buffered - start >= batch_size:
            end = start + batch_size
            yield all_p[start:end], all_c[start:end], all_l[start:end]
            start = end
        buf_p, buf_c, buf_l = [all_p[start:]], [all_c[start:]], [all_l[start:]]
        buffered -= start
    if buffered:
        yield np.concatenate(buf_p), np.concatenate(buf_c), np.concatenate(buf_l)
