import glob
import os
from typing import Iterable, Iterator, List

# Corpus input: a directory of plain-text files, one document per file, read lazily so
# memory stays bounded by the largest single file.

DEMO_DOCUMENTS = [
    "the cat sat on the mat",
    "the dog sat on the rug",
]


def iter_documents(paths: Iterable[str], encoding: str = "utf-8") -> Iterator[str]:
    """Yield the text of each file in turn.

    Args:
        paths: File paths, read in the order given.
        encoding: Text encoding. Defaults to "utf-8".

    Yields:
        One string per file.
    """
    for path in paths:
        with open(path, encoding=encoding) as f:
            yield f.read()


class TextCorpus:
    """Restartable lazy sequence of documents backed by files in a directory.

    Each call to iter() re-reads the files, so the corpus can be passed over once per
    epoch without holding every document in memory.

    Attributes:
        directory (str): Directory the files were collected from.
        paths (list): Sorted paths of the regular files matching pattern.
        encoding (str): Text encoding used when reading.
    """

    def __init__(self, directory: str, pattern: str = "*", encoding: str = "utf-8"):
        if not os.path.isdir(directory):
            raise FileNotFoundError(f"Corpus directory not found: {directory}")
        self.directory = directory
        self.encoding = encoding
        self.paths: List[str] = sorted(
            p for p in glob.glob(os.path.join(directory, pattern)) if os.path.isfile(p)
        )

    def __iter__(self) -> Iterator[str]:
        return iter_documents(self.paths, encoding=self.encoding)

    def __len__(self) -> int:
        return len(self.paths)

    def __repr__(self) -> str:
        return f"TextCorpus({self.directory!r}, {len(self.paths)} files)"
