from typing import Any

# Error types raised by the skip-gram pipeline. An empty nearest-neighbour result is
# returned as None rather than raised.


class ConfigurationError(ValueError):
    """Invalid hyperparameter, raised before any training begins.

    Attributes:
        option (str): Name of the offending option.
        value: The rejected value.
    """

    def __init__(self, option: str, value: Any, reason: str):
        self.option = option
        self.value = value
        super().__init__(f"invalid {option}={value!r}: {reason}")


class UnknownWordError(LookupError):
    """Word is absent from the vocabulary."""

    def __init__(self, word: str):
        self.word = word
        super().__init__(f"word not in vocabulary: {word!r}")
