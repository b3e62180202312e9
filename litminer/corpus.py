import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Set, Tuple, Union

import chardet

from .analyzers.base import Document
from .analyzers.structure import CHAPTER_PATTERN, SECTION_WIDTH, build_document

logger = logging.getLogger(__name__)

MIN_CONFIDENCE = 0.5


def decode_bytes(raw: bytes, source: str = "<bytes>") -> str:
    """
    Decode text, trying UTF-8 first and falling back to chardet detection.

    Undecodable bytes end up as U+FFFD rather than failing the read.
    """
    try:
        return raw.decode("utf-8-sig")
    except UnicodeDecodeError:
        pass

    detected = chardet.detect(raw)
    encoding = detected.get("encoding")
    if encoding and detected.get("confidence", 0) >= MIN_CONFIDENCE:
        logger.warning(f"{source} is not UTF-8, decoding as {encoding}")
        return raw.decode(encoding, errors="replace")

    logger.warning(f"Could not detect encoding of {source}, replacing bad bytes")
    return raw.decode("utf-8", errors="replace")


def read_lines(path: Union[str, Path]) -> List[str]:
    path = Path(path)
    return decode_bytes(path.read_bytes(), source=str(path)).splitlines()


def unique_feature(stem: str, seen: Set[str]) -> str:
    """Return ``stem``, or ``stem_2``, ``stem_3``... if already taken, and mark it taken."""
    feature, i = stem, 2
    while feature in seen:
        feature = f"{stem}_{i}"
        i += 1
    if feature != stem:
        logger.warning(f"Feature key {stem!r} is already in use, renaming to {feature!r}")
    seen.add(feature)
    return feature


def read_corpus(
    paths: Iterable[Union[str, Path]],
    chapter_pattern: Optional[str] = CHAPTER_PATTERN,
    section_width: int = SECTION_WIDTH,
    seen: Optional[Set[str]] = None,
) -> List[Document]:
    """
    Read local text files into documents, one feature per file.

    The feature key is the file stem. Files sharing a stem get a numeric
    suffix so their counts never merge; pass ``seen`` to keep keys unique
    across several calls.
    """
    seen = set() if seen is None else seen
    documents = []
    for path in paths:
        path = Path(path)
        lines = read_lines(path)
        documents.append(
            build_document(
                lines,
                feature=unique_feature(path.stem, seen),
                chapter_pattern=chapter_pattern,
                section_width=section_width,
            )
        )
        logger.debug(f"Read {path}")
    return documents


def corpus_from_rows(
    rows: Iterable[Tuple[str, str]],
    chapter_pattern: Optional[str] = CHAPTER_PATTERN,
    section_width: int = SECTION_WIDTH,
) -> List[Document]:
    """Group (feature_key, line_text) rows into documents, keeping row order."""
    grouped: Dict[str, List[str]] = {}
    for feature, text in rows:
        grouped.setdefault(feature, []).append(text)
    return [
        build_document(
            texts, feature=feature, chapter_pattern=chapter_pattern, section_width=section_width
        )
        for feature, texts in grouped.items()
    ]


def collect_text_files(path: Path) -> List[Path]:
    """Collect .txt files from a file or directory path."""
    if path.is_file():
        return [path] if path.suffix.lower() == ".txt" else []
    return sorted(path.glob("*.txt"))
