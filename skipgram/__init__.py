from skipgram.config import Word2VecConfig
from skipgram.corpus import TextCorpus
from skipgram.data import make_sampling_table, pair_batches, skipgram_pairs
from skipgram.errors import ConfigurationError, UnknownWordError
from skipgram.eval import nearest_word
from skipgram.model import SkipGramModel
from skipgram.tokenizer import Tokenizer
from skipgram.train import train, train_word2vec
from skipgram.vectors import WordVectors

# Skip-gram word embeddings with negative sampling in pure NumPy, plus nearest-neighbour
# queries over the trained pivot table.

__all__ = [
    "ConfigurationError",
    "SkipGramModel",
    "TextCorpus",
    "Tokenizer",
    "UnknownWordError",
    "Word2VecConfig",
    "WordVectors",
    "make_sampling_table",
    "nearest_word",
    "pair_batches",
    "skipgram_pairs",
    "train",
    "train_word2vec",
]
