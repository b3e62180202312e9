import csv
import json
import logging
from pathlib import Path
from types import MappingProxyType
from typing import Dict, FrozenSet, Iterable, List, Mapping, Optional, Tuple, Union

from .analyzers.base import LexiconEntry
from .errors import InvalidInput

logger = logging.getLogger(__name__)

_FDATA = Path(__file__).parent / "fdata"


def _load_bundled_stopwords() -> FrozenSet[str]:
    """Load the English stop-word list from fdata/stopwords.json."""
    data_path = _FDATA / "stopwords.json"
    try:
        with open(data_path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return frozenset(w.lower() for w in data.get("english", []))
    except Exception as e:
        logger.error(f"Could not load bundled stopwords: {e}")
        return frozenset()


ENGLISH_STOPWORDS: FrozenSet[str] = _load_bundled_stopwords()


def load_stopwords(path: Optional[Union[str, Path]] = None) -> FrozenSet[str]:
    """
    Load a stop-word set.

    Without a path the bundled English list is returned. A ``.json`` file
    may hold a list or a dict of lists; anything else is read as one word
    per line, ``#`` starting a comment.
    """
    if path is None:
        return ENGLISH_STOPWORDS

    path = Path(path)
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".json":
        data = json.loads(text)
        if isinstance(data, dict):
            words = [w for values in data.values() for w in values]
        else:
            words = list(data)
    else:
        words = [line.split("#", 1)[0].strip() for line in text.splitlines()]

    stopwords = frozenset(w.lower() for w in words if w)
    logger.debug(f"Loaded {len(stopwords)} stop words from {path}")
    return stopwords


class Lexicon:
    """
    Read-only word -> sentiment mapping.

    A word may carry several entries (NRC lists one row per emotion); each
    entry has a ``sentiment`` label, an integer ``value``, or both.
    """

    def __init__(self, entries: Mapping[str, Iterable[LexiconEntry]], name: str = "lexicon"):
        self.name = name
        self._entries: Mapping[str, Tuple[LexiconEntry, ...]] = MappingProxyType(
            {word: tuple(values) for word, values in entries.items()}
        )

    def entries(self, word: str) -> Tuple[LexiconEntry, ...]:
        return self._entries.get(word, ())

    def __contains__(self, word: str) -> bool:
        return word in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def max_fanout(self) -> int:
        """Largest number of entries attached to a single word."""
        return max((len(v) for v in self._entries.values()), default=0)

    @property
    def has_values(self) -> bool:
        """True when any entry carries a polarity value (AFINN style)."""
        return any(e.value is not None for v in self._entries.values() for e in v)

    def sentiments(self) -> List[str]:
        labels = {e.sentiment for v in self._entries.values() for e in v if e.sentiment}
        return sorted(labels)

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, object], name: str = "lexicon") -> "Lexicon":
        """
        Build a lexicon from ``{word: value}`` style data.

        Integers become polarity values, strings become sentiment labels,
        lists expand to one entry per element.
        """
        entries: Dict[str, List[LexiconEntry]] = {}
        for word, raw in mapping.items():
            values = raw if isinstance(raw, (list, tuple)) else [raw]
            entries[word] = [_to_entry(word, v) for v in values]
        return cls(entries, name=name)

    @classmethod
    def from_rows(cls, rows: Iterable[Mapping[str, str]], name: str = "lexicon") -> "Lexicon":
        """Build a lexicon from rows with a ``word`` column and ``sentiment``/``value``."""
        entries: Dict[str, List[LexiconEntry]] = {}
        for i, row in enumerate(rows, start=1):
            word = (row.get("word") or "").strip()
            if not word:
                raise InvalidInput(f"{name}: row {i} has no word")
            sentiment = (row.get("sentiment") or "").strip() or None
            raw_value = (row.get("value") or "").strip()
            try:
                value = int(raw_value) if raw_value else None
            except ValueError:
                raise InvalidInput(f"{name}: row {i} has a non-integer value {raw_value!r}") from None
            if sentiment is None and value is None:
                raise InvalidInput(f"{name}: row {i} ({word!r}) has neither sentiment nor value")
            entries.setdefault(word, []).append(LexiconEntry(sentiment=sentiment, value=value))
        return cls(entries, name=name)

    def __repr__(self) -> str:
        return f"Lexicon(name={self.name!r}, words={len(self)})"


def _to_entry(word: str, raw: object) -> LexiconEntry:
    if isinstance(raw, LexiconEntry):
        return raw
    if isinstance(raw, bool):
        raise InvalidInput(f"lexicon value for {word!r} must be an int or a label")
    if isinstance(raw, int):
        return LexiconEntry(value=raw)
    if isinstance(raw, str):
        return LexiconEntry(sentiment=raw)
    raise InvalidInput(f"lexicon value for {word!r} must be an int or a label, got {raw!r}")


def load_lexicon(path: Union[str, Path], name: Optional[str] = None) -> Lexicon:
    """
    Load a lexicon from CSV or JSON.

    CSV files need a ``word`` column plus ``sentiment`` and/or ``value``
    (AFINN, Bing and NRC exports all fit). JSON files hold a
    ``{word: value-or-labels}`` object.
    """
    path = Path(path)
    name = name or path.stem
    if path.suffix.lower() == ".json":
        data = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise InvalidInput(f"{path}: expected a JSON object of word -> value")
        lexicon = Lexicon.from_mapping(data, name=name)
    else:
        with open(path, "r", encoding="utf-8", newline="") as f:
            lexicon = Lexicon.from_rows(csv.DictReader(f), name=name)
    logger.info(f"Loaded lexicon {name} with {len(lexicon)} words")
    return lexicon
