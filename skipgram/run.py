import argparse
import json
from typing import List, Optional

from skipgram.config import Word2VecConfig
from skipgram.corpus import DEMO_DOCUMENTS, TextCorpus
from skipgram.errors import ConfigurationError
from skipgram.eval import print_nearest
from skipgram.train import train_word2vec

# Entry point: train skip-gram embeddings on a directory of text files (or inline text)
# and print nearest neighbours. Usage: python -m skipgram.run [--corpus-dir DIR]

# Flags that map one-to-one onto Word2VecConfig options
CONFIG_FLAGS = [
    ("--max-vocab-size", "max_vocab_size", int),
    ("--dim", "embedding_dim", int),
    ("--window", "window_size", int),
    ("--negatives", "negative_samples", int),
    ("--epochs", "n_epochs", int),
    ("--ignore-most-common", "ignore_n_most_common", int),
    ("--batch-size", "batch_size", int),
    ("--lr", "learning_rate", float),
    ("--optimizer", "optimizer", str),
    ("--sampling-power", "sampling_power", float),
    ("--subsample-t", "subsample_t", float),
    ("--seed", "seed", int),
    ("--log-every", "log_every", int),
]


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Train skip-gram word embeddings")
    src = ap.add_mutually_exclusive_group()
    src.add_argument(
        "--corpus-dir", type=str, default=None, help="Directory of text files, one document each"
    )
    src.add_argument(
        "--text", type=str, action="append", default=None, help="Inline document (repeatable)"
    )
    ap.add_argument("--config", type=str, default=None, help="JSON file of Word2VecConfig options")
    for flag, dest, kind in CONFIG_FLAGS:
        ap.add_argument(flag, dest=dest, type=kind, default=None)
    ap.add_argument("--metric", type=str, default="euclidean", choices=["euclidean", "cosine"])
    ap.add_argument(
        "--query", type=str, action="append", default=None, help="Word to look up (repeatable)"
    )
    ap.add_argument("--k", type=int, default=5, help="Neighbours to print per query")
    ap.add_argument(
        "--save", type=str, default=None, help="Directory to write vectors.npy and vocab.txt"
    )
    return ap


def load_config(args: argparse.Namespace) -> Word2VecConfig:
    """JSON file options first, then command-line flags on top."""
    options = {}
    if args.config:
        with open(args.config, encoding="utf-8") as f:
            options.update(json.load(f))
    for _, dest, _ in CONFIG_FLAGS:
        value = getattr(args, dest)
        if value is not None:
            options[dest] = value
    return Word2VecConfig.from_dict(options)


def main(argv: Optional[List[str]] = None) -> None:
    """Train on the given corpus, print nearest neighbours, optionally save the table."""
    ap = build_parser()
    args = ap.parse_args(argv)
    try:
        config = load_config(args)
    except ConfigurationError as e:
        ap.error(str(e))

    if args.corpus_dir:
        documents = TextCorpus(args.corpus_dir)
        print(f"Corpus: {len(documents)} files from {args.corpus_dir}")
    else:
        documents = args.text or DEMO_DOCUMENTS

    vectors, tokenizer, _ = train_word2vec(documents, config)

    cutoff = min(config.ignore_n_most_common, max(0, tokenizer.vocab_size - 2))
    if cutoff != config.ignore_n_most_common:
        print(f"Vocabulary too small for cutoff {config.ignore_n_most_common}; using {cutoff}")
    print(f"Nearest neighbours (skipping the {cutoff} most common words):")
    print_nearest(
        vectors.vectors,
        vectors.index_word,
        query_words=args.query,
        k=args.k,
        ignore_n_most_common=cutoff,
        metric=args.metric,
    )

    if args.save:
        vectors.save(args.save)
        print(f"Saved {len(vectors)} vectors to {args.save}")


if __name__ == "__main__":
    main()
