from collections import Counter
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Hashable, List, Mapping, Optional, Tuple


@dataclass(frozen=True)
class TextLine:
    feature: str
    linenumber: int
    text: str
    chapter: int = 0
    section: int = 0


@dataclass(frozen=True)
class Document:
    """An ordered sequence of lines grouped under one feature key (a book)."""

    feature: str
    lines: Tuple[TextLine, ...] = ()

    @property
    def texts(self) -> List[str]:
        return [line.text for line in self.lines]

    def __len__(self) -> int:
        return len(self.lines)


@dataclass(frozen=True)
class TokenRecord:
    """
    One token emitted by the tokenizer.

    ``parts`` holds the constituent words of an n-gram (token_1..token_n);
    for word tokens it is a one-element tuple. ``token`` is the display
    form. ``matched`` is only set by regex detection.
    """

    linenumber: int
    feature: str
    token: str
    parts: Tuple[str, ...] = ()
    chapter: int = 0
    section: int = 0
    matched: Optional[bool] = None

    def part(self, i: int) -> str:
        """Return token_i (1-based), as in token_1..token_n."""
        return self.parts[i - 1]


@dataclass(frozen=True)
class LexiconEntry:
    sentiment: Optional[str] = None
    value: Optional[int] = None


@dataclass(frozen=True)
class SentimentRecord:
    """A token record joined with one lexicon entry."""

    record: TokenRecord
    sentiment: Optional[str] = None
    value: Optional[int] = None

    def __getattr__(self, name: str) -> Any:
        # Only reached for names not defined here; expose the token fields.
        if name == "record":
            raise AttributeError(name)
        return getattr(self.record, name)


class FrequencyTable:
    """
    Counts keyed by a tuple of grouping values.

    ``keys`` names the grouping fields in order, e.g. ("feature", "token").
    Lookups on a single-key table accept the bare value.
    """

    def __init__(self, keys: Tuple[str, ...], counts: Mapping[Tuple, int]):
        self.keys = tuple(keys)
        self._counts: Mapping[Tuple, int] = MappingProxyType(dict(counts))

    def __getitem__(self, key: Hashable) -> int:
        return self._counts.get(self._as_tuple(key), 0)

    def __contains__(self, key: Hashable) -> bool:
        return self._as_tuple(key) in self._counts

    def __len__(self) -> int:
        return len(self._counts)

    def __iter__(self):
        return iter(self._counts)

    def items(self):
        return self._counts.items()

    @property
    def total(self) -> int:
        return sum(self._counts.values())

    def most_common(self, n: Optional[int] = None) -> List[Tuple[Tuple, int]]:
        """Counts in descending order; ties keep first-encountered order."""
        ordered = sorted(self._counts.items(), key=lambda kv: kv[1], reverse=True)
        return ordered if n is None else ordered[:n]

    def rows(self, count_name: str = "n") -> List[Dict[str, Any]]:
        """Long-format rows: one dict per key with the count under ``count_name``."""
        return [
            {**dict(zip(self.keys, key)), count_name: n}
            for key, n in self._counts.items()
        ]

    def to_counter(self) -> Counter:
        return Counter(self._counts)

    def _as_tuple(self, key: Hashable) -> Tuple:
        if len(self.keys) == 1 and not (isinstance(key, tuple) and len(key) == 1):
            return (key,)
        return key

    def __repr__(self) -> str:
        return f"FrequencyTable(keys={self.keys}, groups={len(self)}, total={self.total})"


@dataclass(frozen=True)
class TfIdfRecord:
    document: str
    term: str
    n: int
    total: int
    tf: float
    df: int
    idf: float
    tf_idf: float
    rank: int


@dataclass
class WideTable:
    """
    Result of a long-to-wide pivot.

    ``fill`` is the value reported for (row, column) pairs absent from the
    long input: 0 for counts, None otherwise.
    """

    row_key: str
    column_key: str
    rows: List[Hashable]
    columns: List[Hashable]
    cells: Dict[Tuple[Hashable, Hashable], Any] = field(default_factory=dict)
    fill: Any = 0

    def get(self, row: Hashable, column: Hashable) -> Any:
        return self.cells.get((row, column), self.fill)

    def row(self, row: Hashable) -> Dict[Hashable, Any]:
        return {col: self.get(row, col) for col in self.columns}

    def as_rows(self) -> List[Dict[Hashable, Any]]:
        return [{self.row_key: r, **self.row(r)} for r in self.rows]

    def __len__(self) -> int:
        return len(self.rows)



@dataclass
class TokenizedDocument:
    feature: str
    tokens: List[TokenRecord]
    filtered_tokens: List[TokenRecord]

    @property
    def removed_count(self) -> int:
        return len(self.tokens) - len(self.filtered_tokens)


@dataclass
class AnalyzedDocument:
    tokenized: TokenizedDocument
    word_counts: Optional[FrequencyTable] = None
    sentiment: Dict[str, Dict[int, Any]] = field(default_factory=dict)
    tf_idf: List[TfIdfRecord] = field(default_factory=list)
    similarity_vector: Optional[List[float]] = None

    @property
    def feature(self) -> str:
        return self.tokenized.feature
