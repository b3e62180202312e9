import re
import logging
from dataclasses import dataclass
from typing import Iterable, List

logger = logging.getLogger(__name__)

# A word is a run of letters/digits; apostrophes and hyphens are kept only
# when they sit between two such runs ("don't", "well-bred").
WORD_RE = re.compile(r"[^\W_]+(?:['’\-][^\W_]+)*", re.UNICODE)
ALPHA_WORD_RE = re.compile(r"[^\W\d_]+(?:['’\-][^\W\d_]+)*", re.UNICODE)
_DIGITS_RE = re.compile(r"\d+")
# Typographic apostrophes fold to the ASCII one used by stop-word lists.
_APOSTROPHES = str.maketrans({"\u2019": "'", "\u2018": "'"})


def word_pattern(strip_numeric: bool = False) -> "re.Pattern":
    """Return the token alphabet used for word splitting."""
    return ALPHA_WORD_RE if strip_numeric else WORD_RE


@dataclass(frozen=True)
class NormalizerConfig:
    lowercase: bool = True
    strip_punct: bool = True
    strip_numeric: bool = False


def normalize_line(
    text: str,
    lowercase: bool = True,
    strip_punct: bool = True,
    strip_numeric: bool = False,
) -> str:
    """
    Normalize a single line.

    Typographic apostrophes become ' and lowercasing happens first. With
    ``strip_punct`` every character outside the token alphabet becomes a
    boundary, so the result is the retained words joined by single spaces.
    """
    text = text.translate(_APOSTROPHES)
    if lowercase:
        text = text.lower()
    if strip_punct:
        return " ".join(word_pattern(strip_numeric).findall(text))
    if strip_numeric:
        return _DIGITS_RE.sub(" ", text)
    return text


def normalize(lines: Iterable[str], config: NormalizerConfig = None) -> List[str]:
    """Normalize every line, preserving order and line count."""
    config = config or NormalizerConfig()
    normalized = [
        normalize_line(
            line,
            lowercase=config.lowercase,
            strip_punct=config.strip_punct,
            strip_numeric=config.strip_numeric,
        )
        for line in lines
    ]
    logger.debug(f"Normalized {len(normalized)} lines")
    return normalized
