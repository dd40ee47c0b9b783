from typing import Iterable, List, Optional, Tuple

import numpy as np

from skipgram.config import Word2VecConfig
from skipgram.data import keep_probabilities, make_sampling_table, pair_batches
from skipgram.model import SkipGramModel
from skipgram.optim import get_optimizer
from skipgram.tokenizer import Tokenizer
from skipgram.vectors import WordVectors

# Training loop: epochs run in sequence, each re-reading and re-encoding the documents so
# only one document's pairs are held at a time. Progress goes to stdout.


def build_vocabulary(documents: Iterable[str], max_vocab_size: int = 50000) -> Tokenizer:
    """Fit a Tokenizer on the whole corpus (one pass)."""
    return Tokenizer(max_vocab_size=max_vocab_size).fit(documents)


def train(
    model: SkipGramModel,
    tokenizer: Tokenizer,
    documents: Iterable[str],
    *,
    n_epochs: int = 5,
    batch_size: int = 256,
    window_size: int = 5,
    negative_samples: int = 4,
    sampling_power: float = 0.75,
    subsample_t: Optional[float] = None,
    seed: Optional[int] = None,
    log_every: int = 100,
) -> List[dict]:
    """Train model on skip-gram pairs from documents for a fixed number of epochs.

    Args:
        model: SkipGramModel sized for tokenizer (modified in place).
        tokenizer: Fitted tokenizer used to encode each document.
        documents: Restartable iterable of documents (a list or TextCorpus); iterated once
            per epoch.
        n_epochs: Number of passes over the corpus. Defaults to 5.
        batch_size: Pairs per optimizer step. Defaults to 256.
        window_size: Context radius. Defaults to 5.
        negative_samples: Negatives per positive. Defaults to 4.
        sampling_power: Exponent for the negative distribution. Defaults to 0.75.
        subsample_t: Frequent-pivot subsampling threshold; None disables. Defaults to None.
        seed: Random seed for sampling. Defaults to None.
        log_every: Print and record every this many steps. Defaults to 100.

    Returns:
        List of dicts with keys "epoch", "step", "loss" for plotting.

    Raises:
        ConfigurationError: If any hyperparameter is invalid; raised before the model is
            touched.
    """
    # Same checks as Word2VecConfig so bad values fail before the first update
    Word2VecConfig(
        n_epochs=n_epochs,
        batch_size=batch_size,
        window_size=window_size,
        negative_samples=negative_samples,
        sampling_power=sampling_power,
        subsample_t=subsample_t,
        seed=seed,
        log_every=log_every,
    )
    rng = np.random.default_rng(seed)
    counts = tokenizer.counts_array()
    sampling_table = make_sampling_table(counts, power=sampling_power)
    keep_probs = keep_probabilities(counts, subsample_t) if subsample_t is not None else None
    print(
        f"Training: {n_epochs} epochs, vocab {tokenizer.vocab_size}, dim {model.D}, "
        f"window {window_size}, negatives {negative_samples}"
    )

    history = []
    step = 0
    for epoch in range(n_epochs):
        print(f"Epoch {epoch + 1}/{n_epochs}")
        epoch_loss = 0.0
        epoch_steps = 0
        batches = pair_batches(
            tokenizer.encode_all(documents),
            batch_size,
            window_size,
            negative_samples,
            sampling_table,
            rng=rng,
            keep_probs=keep_probs,
        )
        for pivots, contexts, labels in batches:
            loss = model.train_batch(pivots, contexts, labels)
            step += 1
            epoch_steps += 1
            epoch_loss += loss
            if step % log_every == 0:
                history.append({"epoch": epoch + 1, "step": step, "loss": loss})
                print(f"step {step} loss {loss:.4f}")
        if epoch_steps:
            mean_loss = epoch_loss / epoch_steps
            print(f"epoch {epoch + 1} mean loss {mean_loss:.4f} over {epoch_steps} steps")
            # Ensure each epoch leaves at least one point for the loss curve
            if not history or history[-1]["step"] != step:
                history.append({"epoch": epoch + 1, "step": step, "loss": mean_loss})
        else:
            print(f"epoch {epoch + 1}: no training pairs")
    return history


def train_word2vec(
    documents: Iterable[str], config: Optional[Word2VecConfig] = None
) -> Tuple[WordVectors, Tokenizer, List[dict]]:
    """Full pipeline: vocabulary, pair sampling, training, pivot-table export.

    Args:
        documents: Restartable iterable of documents (read once for the vocabulary, then
            once per epoch).
        config: Hyperparameters. Defaults to None (Word2VecConfig()).

    Returns:
        Tuple (vectors, tokenizer, history).

    Raises:
        ConfigurationError: If config is invalid.
        TypeError: If documents is a one-shot iterator.
        ValueError: If the corpus yields an empty vocabulary.
    """
    if iter(documents) is documents:
        raise TypeError("documents must be restartable (a list or TextCorpus), not an iterator")
    if config is None:
        config = Word2VecConfig()
    config.validate()
    tokenizer = build_vocabulary(documents, config.max_vocab_size)
    if tokenizer.vocab_size == 0:
        raise ValueError("Corpus produced an empty vocabulary; nothing to train")
    print(f"Vocab size {tokenizer.vocab_size}")

    model = SkipGramModel(
        tokenizer.vocab_size + 1,
        config.embedding_dim,
        optimizer=get_optimizer(config.optimizer, config.learning_rate),
        seed=config.seed,
    )
    history = train(
        model,
        tokenizer,
        documents,
        n_epochs=config.n_epochs,
        batch_size=config.batch_size,
        window_size=config.window_size,
        negative_samples=config.negative_samples,
        sampling_power=config.sampling_power,
        subsample_t=config.subsample_t,
        seed=config.seed,
        log_every=config.log_every,
    )
    return model.export_vectors(tokenizer.index_word), tokenizer, history
