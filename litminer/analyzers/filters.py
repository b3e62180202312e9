import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import AbstractSet, Iterable, List

from ..errors import InvalidConfiguration
from .base import TokenRecord

logger = logging.getLogger(__name__)


class NgramStopPolicy(Enum):
    """
    When an n-gram counts as a stop n-gram.

    ANY      drop if any constituent is a stop word (bigram sentiment practice)
    BOUNDARY drop if the first or last constituent is a stop word
    ALL      drop only if every constituent is a stop word
    NONE     never drop n-grams
    """

    ANY = "any"
    BOUNDARY = "boundary"
    ALL = "all"
    NONE = "none"

    @classmethod
    def from_name(cls, name: str) -> "NgramStopPolicy":
        try:
            return cls(str(name).lower())
        except ValueError:
            raise InvalidConfiguration(
                f"Unknown n-gram stop-word policy: {name!r}. "
                f"Available: {[p.value for p in cls]}"
            ) from None


@dataclass
class FilterResult:
    kept: List[TokenRecord] = field(default_factory=list)
    removed: List[TokenRecord] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.kept) + len(self.removed)


def is_stop_record(
    record: TokenRecord,
    stopwords: AbstractSet[str],
    policy: NgramStopPolicy = NgramStopPolicy.ANY,
    casefold: bool = True,
) -> bool:
    parts = record.parts or (record.token,)
    if casefold:
        parts = tuple(p.lower() for p in parts)
    if len(parts) == 1:
        return parts[0] in stopwords
    if policy is NgramStopPolicy.ANY:
        return any(p in stopwords for p in parts)
    if policy is NgramStopPolicy.BOUNDARY:
        return parts[0] in stopwords or parts[-1] in stopwords
    if policy is NgramStopPolicy.ALL:
        return all(p in stopwords for p in parts)
    return False


def remove_stopwords(
    records: Iterable[TokenRecord],
    stopwords: AbstractSet[str],
    policy: NgramStopPolicy = NgramStopPolicy.ANY,
    casefold: bool = True,
) -> FilterResult:
    """
    Split records into kept and removed by stop-word membership.

    With ``casefold`` the stop words are compared lower-cased, which must
    match the upstream normalization. Records are never altered.
    """
    if not isinstance(policy, NgramStopPolicy):
        policy = NgramStopPolicy.from_name(policy)
    if casefold:
        stopwords = frozenset(w.lower() for w in stopwords)

    result = FilterResult()
    for record in records:
        if is_stop_record(record, stopwords, policy=policy, casefold=casefold):
            result.removed.append(record)
        else:
            result.kept.append(record)

    logger.debug(f"Stop-word filter kept {len(result.kept)}, removed {len(result.removed)}")
    return result
