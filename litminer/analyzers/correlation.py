import logging
from collections import defaultdict
from itertools import combinations
from typing import Any, Dict, Hashable, Iterable, List, Optional, Tuple

import numpy as np
from sklearn.feature_extraction import DictVectorizer
from sklearn.metrics.pairwise import cosine_similarity

from .aggregator import _field
from .base import FrequencyTable, TfIdfRecord

logger = logging.getLogger(__name__)


def _incidence(
    records: Iterable[Any], item: str, feature: str
) -> Dict[Hashable, set]:
    """item -> set of features (e.g. sections) the item occurs in."""
    seen: Dict[Hashable, set] = {}
    for row in records:
        seen.setdefault(_field(row, item), set()).add(_field(row, feature))
    return seen


def pairwise_count(
    records: Iterable[Any], item: str = "token", feature: str = "section"
) -> FrequencyTable:
    """
    Count, for each pair of items, the features in which both occur.

    Both orders (a, b) and (b, a) are present, mirroring a symmetric
    co-occurrence matrix. Self pairs are omitted.
    """
    by_feature: Dict[Hashable, List[Hashable]] = defaultdict(list)
    for it, feats in _incidence(records, item, feature).items():
        for f in feats:
            by_feature[f].append(it)

    counts: Dict[Tuple, int] = defaultdict(int)
    for items in by_feature.values():
        for a, b in combinations(items, 2):
            counts[(a, b)] += 1
            counts[(b, a)] += 1
    return FrequencyTable(("item1", "item2"), counts)


def pairwise_cor(
    records: Iterable[Any],
    item: str = "token",
    feature: str = "section",
    min_count: int = 1,
) -> Dict[Tuple[Hashable, Hashable], float]:
    """
    Phi coefficient between items over their presence in features.

    Items occurring in fewer than ``min_count`` features are skipped, as are
    items present in every feature (their correlation is undefined).
    """
    incidence = _incidence(records, item, feature)
    features = sorted({f for feats in incidence.values() for f in feats}, key=repr)
    items = [it for it, feats in incidence.items() if len(feats) >= min_count]
    if len(items) < 2 or len(features) < 2:
        return {}

    col = {f: j for j, f in enumerate(features)}
    matrix = np.zeros((len(items), len(features)), dtype=float)
    for i, it in enumerate(items):
        for f in incidence[it]:
            matrix[i, col[f]] = 1.0

    varying = matrix.std(axis=1) > 0
    kept = [it for it, ok in zip(items, varying) if ok]
    if len(kept) < 2:
        return {}

    corr = np.corrcoef(matrix[varying])
    result: Dict[Tuple[Hashable, Hashable], float] = {}
    for i, j in combinations(range(len(kept)), 2):
        phi = float(corr[i, j])
        result[(kept[i], kept[j])] = phi
        result[(kept[j], kept[i])] = phi
    logger.debug(f"Correlated {len(kept)} items over {len(features)} features")
    return result


def correlated_with(
    correlations: Dict[Tuple[Hashable, Hashable], float],
    word: Hashable,
    top: Optional[int] = 10,
) -> List[Tuple[Hashable, float]]:
    """Items most correlated with ``word``, strongest first."""
    pairs = [(b, phi) for (a, b), phi in correlations.items() if a == word]
    pairs.sort(key=lambda p: p[1], reverse=True)
    return pairs if top is None else pairs[:top]


class DocumentSimilarity:
    """
    Pairwise cosine similarity between documents' tf-idf vectors.

    Each document's vector is its tf-idf row over the union vocabulary.
    """

    def compute(self, records: List[TfIdfRecord]) -> Tuple[List[str], np.ndarray]:
        """Return (document keys, similarity matrix) in first-seen document order."""
        rows: Dict[str, Dict[str, float]] = {}
        for r in records:
            rows.setdefault(r.document, {})[r.term] = r.tf_idf
        documents = list(rows)
        if not documents:
            return [], np.zeros((0, 0))

        matrix = DictVectorizer(sparse=True).fit_transform([rows[d] for d in documents])
        return documents, cosine_similarity(matrix)
