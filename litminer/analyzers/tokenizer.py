import re
import logging
from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Optional, Sequence, Set, Tuple, Union

from ..errors import InvalidConfiguration
from .base import Document, TextLine, TokenRecord, TokenizedDocument
from .filters import NgramStopPolicy, remove_stopwords
from .normalizer import NormalizerConfig, normalize_line, word_pattern

logger = logging.getLogger(__name__)

_REGEX_RETURNS = ("match", "detect")


@dataclass(frozen=True)
class WordMode:
    name = "word"


@dataclass(frozen=True)
class NgramMode:
    n: int = 2
    name = "ngram"

    def __post_init__(self):
        if not isinstance(self.n, int) or self.n < 1:
            raise InvalidConfiguration(f"n-gram size must be >= 1, got {self.n!r}")


@dataclass(frozen=True)
class RegexMode:
    """
    Apply ``pattern`` to every line.

    regex_return="match" emits each matched substring; "detect" emits one
    record per line whose ``matched`` flag tells whether the pattern hit.
    """

    pattern: str
    regex_return: str = "match"
    ignore_case: bool = False
    compiled: "re.Pattern" = field(init=False, repr=False, compare=False)
    name = "regex"

    def __post_init__(self):
        if self.regex_return not in _REGEX_RETURNS:
            raise InvalidConfiguration(
                f"Unknown regex_return: {self.regex_return!r}. Available: {list(_REGEX_RETURNS)}"
            )
        try:
            compiled = re.compile(self.pattern, re.IGNORECASE if self.ignore_case else 0)
        except (re.error, TypeError) as e:
            raise InvalidConfiguration(f"Invalid regex {self.pattern!r}: {e}") from e
        object.__setattr__(self, "compiled", compiled)


TokenizerMode = Union[WordMode, NgramMode, RegexMode]


def mode_from_name(
    name: str,
    n: int = 2,
    pattern: Optional[str] = None,
    regex_return: str = "match",
    ignore_case: bool = False,
) -> TokenizerMode:
    """Build a tokenizer mode from its configuration name."""
    key = (name or "").lower()
    if key in ("word", "words"):
        return WordMode()
    if key in ("ngram", "ngrams"):
        return NgramMode(n)
    if key == "regex":
        if pattern is None:
            raise InvalidConfiguration("regex mode requires a pattern")
        return RegexMode(pattern, regex_return=regex_return, ignore_case=ignore_case)
    raise InvalidConfiguration(
        f"Unknown tokenization mode: {name!r}. Available: ['word', 'ngram', 'regex']"
    )


def as_lines(
    source: Union[Document, Iterable[TextLine], Iterable[str]], feature: str = ""
) -> Tuple[TextLine, ...]:
    """
    Coerce a document, a sequence of TextLine, or plain strings into lines.

    Plain strings are numbered from 1 in the order given.
    """
    if isinstance(source, Document):
        return source.lines
    lines = []
    for i, item in enumerate(source, start=1):
        if isinstance(item, TextLine):
            lines.append(item)
        else:
            lines.append(TextLine(feature=feature, linenumber=i, text=str(item)))
    return tuple(lines)


def _words(line: TextLine, text: str, strip_numeric: bool) -> Iterator[TokenRecord]:
    for word in word_pattern(strip_numeric).findall(text):
        yield TokenRecord(
            linenumber=line.linenumber,
            feature=line.feature,
            token=word,
            parts=(word,),
            chapter=line.chapter,
            section=line.section,
        )


def _ngrams(
    line: TextLine, text: str, mode: NgramMode, strip_numeric: bool
) -> Iterator[TokenRecord]:
    words = word_pattern(strip_numeric).findall(text)
    # Windows never cross a line; short lines yield nothing.
    for start in range(len(words) - mode.n + 1):
        window = tuple(words[start : start + mode.n])
        yield TokenRecord(
            linenumber=line.linenumber,
            feature=line.feature,
            token=" ".join(window),
            parts=window,
            chapter=line.chapter,
            section=line.section,
        )


def _regex(line: TextLine, text: str, mode: RegexMode) -> Iterator[TokenRecord]:
    if mode.regex_return == "detect":
        yield TokenRecord(
            linenumber=line.linenumber,
            feature=line.feature,
            token=text,
            parts=(text,),
            chapter=line.chapter,
            section=line.section,
            matched=mode.compiled.search(text) is not None,
        )
        return
    for match in mode.compiled.finditer(text):
        yield TokenRecord(
            linenumber=line.linenumber,
            feature=line.feature,
            token=match.group(),
            parts=(match.group(),),
            chapter=line.chapter,
            section=line.section,
            matched=True,
        )


class TokenStream:
    """
    Lazy, finite, restartable sequence of token records.

    Each iteration replays the lines from the start; nothing is cached.
    """

    def __init__(
        self,
        lines: Sequence[TextLine],
        mode: TokenizerMode,
        normalizer: Optional[NormalizerConfig] = None,
    ):
        if not isinstance(mode, (WordMode, NgramMode, RegexMode)):
            raise InvalidConfiguration(f"Unknown tokenization mode: {mode!r}")
        self.lines = tuple(lines)
        self.mode = mode
        self.normalizer = normalizer

    def _prepare(self, text: str) -> str:
        if self.normalizer is None:
            return text
        return normalize_line(
            text,
            lowercase=self.normalizer.lowercase,
            strip_punct=self.normalizer.strip_punct,
            strip_numeric=self.normalizer.strip_numeric,
        )

    def __iter__(self) -> Iterator[TokenRecord]:
        strip_numeric = bool(self.normalizer and self.normalizer.strip_numeric)
        for line in self.lines:
            text = self._prepare(line.text)
            if isinstance(self.mode, WordMode):
                yield from _words(line, text, strip_numeric)
            elif isinstance(self.mode, NgramMode):
                yield from _ngrams(line, text, self.mode, strip_numeric)
            else:
                yield from _regex(line, text, self.mode)

    def tokens(self) -> List[str]:
        return [record.token for record in self]

    def __repr__(self) -> str:
        return f"TokenStream(mode={self.mode.name}, lines={len(self.lines)})"


def tokenize(
    source: Union[Document, Iterable[TextLine], Iterable[str]],
    mode: Optional[TokenizerMode] = None,
    normalizer: Optional[NormalizerConfig] = None,
    feature: str = "",
) -> TokenStream:
    """
    Tokenize lines in the given mode (word tokens by default).

    ``normalizer`` is applied line by line before splitting; pass None to
    tokenize the text as-is.
    """
    return TokenStream(as_lines(source, feature=feature), mode or WordMode(), normalizer)


class TextTokenizer:
    """
    Tokenizer for English literary text.

    Normalizes each line, splits it in the configured mode, and removes
    stop words on top. Mirrors the unnest-tokens-then-anti-join step of a
    tidy text analysis.
    """

    def __init__(
        self,
        mode: Optional[TokenizerMode] = None,
        normalizer: Optional[NormalizerConfig] = None,
        stopwords: Optional[Set[str]] = None,
        policy: Optional[NgramStopPolicy] = None,
    ):
        self.mode = mode or WordMode()
        self.normalizer = normalizer or NormalizerConfig()
        self.stopwords = frozenset(stopwords or ())
        self.policy = policy or NgramStopPolicy.ANY

    def tokenize(self, document: Document) -> TokenizedDocument:
        """
        Tokenize a document and return a TokenizedDocument.

        Args:
            document: The lines of one feature (book).

        Returns:
            TokenizedDocument with all tokens and the stop-word-filtered tokens.
        """
        if not document.lines:
            return TokenizedDocument(feature=document.feature, tokens=[], filtered_tokens=[])

        tokens = list(tokenize(document, self.mode, self.normalizer))
        filtered = remove_stopwords(
            tokens,
            self.stopwords,
            policy=self.policy,
            casefold=self.normalizer.lowercase,
        ).kept
        logger.debug(
            f"{document.feature}: {len(tokens)} tokens, {len(filtered)} after stop words"
        )
        return TokenizedDocument(
            feature=document.feature, tokens=tokens, filtered_tokens=filtered
        )
