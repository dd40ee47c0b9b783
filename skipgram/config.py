from typing import Any, Dict, Optional

from skipgram.errors import ConfigurationError

# Hyperparameters for the whole pipeline, validated up front so bad values fail before
# the corpus is read.

OPTIMIZERS = ("sgd", "adagrad", "adam")


def _check_int(option: str, value: Any, minimum: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(option, value, "must be an integer")
    if value < minimum:
        raise ConfigurationError(option, value, f"must be >= {minimum}")


def _check_positive_float(option: str, value: Any, allow_zero: bool = False) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigurationError(option, value, "must be a number")
    if value < 0 or (value == 0 and not allow_zero):
        raise ConfigurationError(option, value, "must be >= 0" if allow_zero else "must be > 0")


class Word2VecConfig:
    """Options for tokenizing, sampling, training and querying.

    Attributes:
        max_vocab_size (int): Cap on vocabulary size (most frequent words kept).
        embedding_dim (int): Width of each embedding row.
        window_size (int): Context radius on each side of the pivot.
        negative_samples (int): Negatives drawn per positive pair.
        n_epochs (int): Passes over the full corpus.
        ignore_n_most_common (int): Frequency-rank cutoff for nearest-neighbour queries.
        batch_size (int): Training pairs per optimizer step.
        learning_rate (float): Optimizer step size.
        optimizer (str): One of "sgd", "adagrad", "adam".
        sampling_power (float): Exponent applied to counts for the negative distribution.
        subsample_t (float or None): Frequent-pivot subsampling threshold; None disables it.
        seed (int or None): Seed for initialization and sampling.
        log_every (int): Print progress every this many batches.
    """

    def __init__(
        self,
        max_vocab_size: int = 50000,
        embedding_dim: int = 25,
        window_size: int = 5,
        negative_samples: int = 4,
        n_epochs: int = 5,
        ignore_n_most_common: int = 50,
        batch_size: int = 256,
        learning_rate: float = 0.01,
        optimizer: str = "adam",
        sampling_power: float = 0.75,
        subsample_t: Optional[float] = None,
        seed: Optional[int] = None,
        log_every: int = 100,
    ):
        self.max_vocab_size = max_vocab_size
        self.embedding_dim = embedding_dim
        self.window_size = window_size
        self.negative_samples = negative_samples
        self.n_epochs = n_epochs
        self.ignore_n_most_common = ignore_n_most_common
        self.batch_size = batch_size
        self.learning_rate = learning_rate
        self.optimizer = optimizer
        self.sampling_power = sampling_power
        self.subsample_t = subsample_t
        self.seed = seed
        self.log_every = log_every
        self.validate()

    def validate(self) -> None:
        """Check every option; raise ConfigurationError naming the first bad one."""
        _check_int("max_vocab_size", self.max_vocab_size, 1)
        _check_int("embedding_dim", self.embedding_dim, 1)
        _check_int("window_size", self.window_size, 1)
        _check_int("negative_samples", self.negative_samples, 0)
        _check_int("n_epochs", self.n_epochs, 1)
        _check_int("ignore_n_most_common", self.ignore_n_most_common, 0)
        _check_int("batch_size", self.batch_size, 1)
        _check_int("log_every", self.log_every, 1)
        _check_positive_float("learning_rate", self.learning_rate)
        _check_positive_float("sampling_power", self.sampling_power, allow_zero=True)
        if self.subsample_t is not None:
            _check_positive_float("subsample_t", self.subsample_t)
        if self.seed is not None:
            _check_int("seed", self.seed, 0)
        if self.optimizer not in OPTIMIZERS:
            raise ConfigurationError(
                "optimizer", self.optimizer, f"must be one of {', '.join(OPTIMIZERS)}"
            )

    def to_dict(self) -> Dict[str, Any]:
        return dict(vars(self))

    @classmethod
    def from_dict(cls, options: Dict[str, Any]) -> "Word2VecConfig":
        """Build a config from a mapping (e.g. a parsed JSON file).

        Args:
            options: Option names to values; missing options keep their defaults.

        Returns:
            A validated Word2VecConfig.

        Raises:
            ConfigurationError: If a key is not a recognised option or a value is invalid.
        """
        known = set(cls().to_dict())
        for key in options:
            if key not in known:
                raise ConfigurationError(key, options[key], "unknown option")
        return cls(**options)

    def __repr__(self) -> str:
        fields = ", ".join(f"{k}={v!r}" for k, v in self.to_dict().items())
        return f"Word2VecConfig({fields})"
