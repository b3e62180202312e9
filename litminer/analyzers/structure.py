import logging
from typing import Iterable, Optional

from ..errors import InvalidConfiguration
from .base import Document, TextLine
from .tokenizer import RegexMode, tokenize

logger = logging.getLogger(__name__)

CHAPTER_PATTERN = r"^chapter [\divxlc]"
SECTION_WIDTH = 80


def build_document(
    texts: Iterable[str],
    feature: str,
    chapter_pattern: Optional[str] = CHAPTER_PATTERN,
    section_width: int = SECTION_WIDTH,
) -> Document:
    """
    Number the lines of one book and tag chapters and sections.

    Line numbers start at 1. The chapter index is a running count of lines
    matching ``chapter_pattern`` (case-insensitive), so front matter is
    chapter 0. The section is ``linenumber // section_width``.
    """
    if section_width < 1:
        raise InvalidConfiguration(f"section width must be >= 1, got {section_width}")

    texts = list(texts)
    if chapter_pattern:
        mode = RegexMode(chapter_pattern, regex_return="detect", ignore_case=True)
        headings = [r.matched for r in tokenize(texts, mode, feature=feature)]
    else:
        headings = [False] * len(texts)

    lines = []
    chapter = 0
    for linenumber, (text, is_heading) in enumerate(zip(texts, headings), start=1):
        if is_heading:
            chapter += 1
        lines.append(
            TextLine(
                feature=feature,
                linenumber=linenumber,
                text=text,
                chapter=chapter,
                section=linenumber // section_width,
            )
        )

    logger.debug(f"{feature}: {len(lines)} lines, {chapter} chapters")
    return Document(feature=feature, lines=tuple(lines))
