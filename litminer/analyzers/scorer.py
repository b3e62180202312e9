import math
import logging
from collections import defaultdict
from typing import Dict, List, Optional, Tuple

import numpy as np

from ..errors import InvalidInput, InvariantViolation, ZeroTotal
from .base import FrequencyTable, TfIdfRecord

logger = logging.getLogger(__name__)


def bind_tf_idf(
    counts: FrequencyTable,
    totals: Optional[Dict[str, int]] = None,
) -> List[TfIdfRecord]:
    """
    Compute tf, idf and tf-idf for every (document, term) count.

    ``counts`` must be keyed by (document, term). ``totals`` gives each
    document's total word count; by default it is the sum of that
    document's counts. Records keep the table's order within a document,
    and ``rank`` is the 1-based position by descending count with ties in
    first-encountered order.

    A term present in every document gets idf = 0 and tf_idf = 0 exactly.
    """
    if len(counts.keys) != 2:
        raise InvalidInput(
            f"tf-idf needs counts keyed by (document, term), got {counts.keys}"
        )

    by_doc: Dict[str, List[Tuple[str, int]]] = defaultdict(list)
    doc_freq: Dict[str, int] = defaultdict(int)
    for (document, term), n in counts.items():
        if n < 0:
            raise InvariantViolation("negative count", key=(document, term))
        by_doc[document].append((term, n))
        if n > 0:
            doc_freq[term] += 1

    n_docs = len(by_doc)
    if n_docs == 0:
        raise InvalidInput("tf-idf over zero documents is undefined")

    if totals is None:
        totals = {doc: sum(n for _, n in terms) for doc, terms in by_doc.items()}

    records: List[TfIdfRecord] = []
    for document, terms in by_doc.items():
        total = totals.get(document, 0)
        if total <= 0:
            raise ZeroTotal("document has terms but a zero total", key=document)

        # sorted() is stable, so equal counts keep first-encountered order.
        order = sorted(range(len(terms)), key=lambda i: terms[i][1], reverse=True)
        ranks = {i: pos for pos, i in enumerate(order, start=1)}

        for i, (term, n) in enumerate(terms):
            df = doc_freq[term]
            if df > n_docs:
                raise InvariantViolation(
                    f"document frequency {df} exceeds {n_docs} documents", key=term
                )
            tf = n / total
            idf = math.log(n_docs / df) if df else 0.0
            tf_idf = tf * idf if idf else 0.0
            records.append(
                TfIdfRecord(
                    document=document,
                    term=term,
                    n=n,
                    total=total,
                    tf=tf,
                    df=df,
                    idf=idf,
                    tf_idf=tf_idf,
                    rank=ranks[i],
                )
            )

    logger.debug(f"Scored {len(records)} terms across {n_docs} documents")
    return records


def top_terms(
    records: List[TfIdfRecord], per_document: int = 10
) -> Dict[str, List[TfIdfRecord]]:
    """Highest tf-idf terms per document, ties broken by raw count."""
    grouped: Dict[str, List[TfIdfRecord]] = defaultdict(list)
    for record in records:
        grouped[record.document].append(record)
    return {
        doc: sorted(recs, key=lambda r: (r.tf_idf, r.n), reverse=True)[:per_document]
        for doc, recs in grouped.items()
    }


def term_frequency_by_rank(records: List[TfIdfRecord]) -> List[Tuple[str, int, float]]:
    """(document, rank, tf) series ordered by document then rank."""
    return sorted(
        ((r.document, r.rank, r.tf) for r in records),
        key=lambda row: (row[0], row[1]),
    )


def fit_power_law(
    records: List[TfIdfRecord],
    min_rank: int = 1,
    max_rank: Optional[int] = None,
) -> Dict[str, float]:
    """
    Fit log10(tf) = intercept + slope * log10(rank) over the given rank window.

    Zipf's law predicts a slope close to -1.
    """
    points = [
        (r.rank, r.tf)
        for r in records
        if r.rank >= min_rank and (max_rank is None or r.rank <= max_rank) and r.tf > 0
    ]
    if len(points) < 2:
        raise InvalidInput("need at least two (rank, tf) points to fit a power law")

    ranks = np.log10([p[0] for p in points])
    tfs = np.log10([p[1] for p in points])
    slope, intercept = np.polyfit(ranks, tfs, 1)
    return {"slope": float(slope), "intercept": float(intercept), "points": len(points)}
