import logging
from collections import Counter, defaultdict
from typing import Any, Callable, Dict, Hashable, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from ..errors import InvariantViolation
from .base import FrequencyTable, SentimentRecord, TokenRecord, WideTable

logger = logging.getLogger(__name__)

KeySpec = Union[str, Sequence[str]]

_COUNT_FILL = object()


def _field(row: Any, name: str) -> Any:
    """Read a grouping field from a record object or a mapping row."""
    if isinstance(row, Mapping):
        return row[name]
    return getattr(row, name)


def _key_names(by: KeySpec) -> Tuple[str, ...]:
    return (by,) if isinstance(by, str) else tuple(by)


def count(records: Iterable[Any], by: KeySpec = ("token",)) -> FrequencyTable:
    """
    Count records grouped by the named fields.

    Groups appear in first-encountered order. The counts always sum to the
    number of records consumed.
    """
    keys = _key_names(by)
    counts: Counter = Counter()
    consumed = 0
    for row in records:
        counts[tuple(_field(row, k) for k in keys)] += 1
        consumed += 1

    table = FrequencyTable(keys, counts)
    if table.total != consumed:
        raise InvariantViolation(
            f"frequency table sums to {table.total}, expected {consumed}", key=keys
        )
    logger.debug(f"Counted {consumed} records into {len(table)} groups by {keys}")
    return table


def join(records: Iterable[TokenRecord], lexicon) -> List[SentimentRecord]:
    """
    Inner join token records against a lexicon on the token.

    A word with several lexicon entries (NRC lists one row per emotion)
    produces one joined record per entry. Unmatched tokens are dropped and
    zero matches give an empty list.
    """
    joined: List[SentimentRecord] = []
    for record in records:
        for entry in lexicon.entries(record.token):
            joined.append(
                SentimentRecord(record=record, sentiment=entry.sentiment, value=entry.value)
            )
    logger.debug(f"Lexicon join produced {len(joined)} records")
    return joined


def filter_sentiments(
    joined: Iterable[SentimentRecord], sentiments: Iterable[str]
) -> List[SentimentRecord]:
    """Keep only joined records whose label is one of ``sentiments``."""
    wanted = set(sentiments)
    return [r for r in joined if r.sentiment in wanted]


def sum_by(
    rows: Iterable[Any], by: KeySpec = (), value_field: str = "value"
) -> Dict[Tuple, Any]:
    """
    Sum a numeric field per group.

    An empty ``by`` sums everything under the key ``()``. Rows whose value
    is None are skipped.
    """
    keys = _key_names(by)
    totals: Dict[Tuple, Any] = {}
    for row in rows:
        value = _field(row, value_field)
        if value is None:
            continue
        key = tuple(_field(row, k) for k in keys)
        totals[key] = totals.get(key, 0) + value
    return totals


def pivot(
    rows: Iterable[Any],
    row_key: str,
    column_key: str,
    value_field: Optional[str] = None,
    fill: Any = _COUNT_FILL,
    aggfunc: Callable[[List[Any]], Any] = sum,
) -> WideTable:
    """
    Reshape a long table to wide.

    One output row per distinct ``row_key`` value and one column per
    distinct ``column_key`` value, both in first-seen order. Duplicate
    (row, column) values are combined with ``aggfunc`` (sum by default).
    With ``value_field`` None every input row counts as 1, which pivots a
    table of records into counts.

    Missing combinations read as ``fill``. Unless given, that is 0 when
    counting rows, so ``positive - negative`` works directly, and None
    when ``value_field`` names the cell values.
    """
    if fill is _COUNT_FILL:
        fill = 0 if value_field is None else None

    grouped: Dict[Tuple[Hashable, Hashable], List[Any]] = defaultdict(list)
    row_order: Dict[Hashable, None] = {}
    col_order: Dict[Hashable, None] = {}

    for row in rows:
        r = _field(row, row_key)
        c = _field(row, column_key)
        row_order.setdefault(r)
        col_order.setdefault(c)
        grouped[(r, c)].append(1 if value_field is None else _field(row, value_field))

    cells = {key: aggfunc(values) for key, values in grouped.items()}
    return WideTable(
        row_key=row_key,
        column_key=column_key,
        rows=list(row_order),
        columns=list(col_order),
        cells=cells,
        fill=fill,
    )


def unpivot(wide: WideTable, value_name: str = "n", drop_fill: bool = True) -> List[Dict[str, Any]]:
    """Reshape a wide table back to long rows, dropping fill cells by default."""
    long_rows = []
    for r in wide.rows:
        for c in wide.columns:
            if drop_fill and (r, c) not in wide.cells:
                continue
            long_rows.append({wide.row_key: r, wide.column_key: c, value_name: wide.get(r, c)})
    return long_rows


def net_sentiment(
    wide: WideTable, positive: str = "positive", negative: str = "negative"
) -> Dict[Hashable, Any]:
    """
    Per row ``positive - negative``.

    Absent cells count as zero even when the table was pivoted with a None
    fill, so a section with no negative words still scores.
    """
    result = {}
    for r in wide.rows:
        pos = wide.cells.get((r, positive), 0) or 0
        neg = wide.cells.get((r, negative), 0) or 0
        result[r] = pos - neg
    return result
