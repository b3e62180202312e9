import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Optional

from ..errors import InvalidConfiguration
from .aggregator import count, filter_sentiments, join, net_sentiment, pivot, sum_by
from .base import AnalyzedDocument, SentimentRecord, TokenRecord

logger = logging.getLogger(__name__)


class SentimentAnalyzer:
    """
    Scores sentiment along a book, one score per section of lines.

    Lexicons with polarity values (AFINN) are scored by summing the values
    in each section. Label lexicons (Bing, NRC) are restricted to the
    positive/negative labels, pivoted to one column per label with zero
    fill, and scored as positive minus negative.
    """

    def __init__(self, lexicon, sentiments: Optional[Iterable[str]] = None):
        self.lexicon = lexicon
        self.sentiments = list(sentiments or ("positive", "negative"))
        if len(self.sentiments) != 2:
            raise InvalidConfiguration(
                f"sentiments must be a (positive, negative) label pair, got {self.sentiments!r}"
            )

    @property
    def uses_values(self) -> bool:
        return self.lexicon.has_values

    def join(self, tokens: Iterable[TokenRecord]) -> List[SentimentRecord]:
        return join(tokens, self.lexicon)

    def score_sections(self, tokens: Iterable[TokenRecord]) -> Dict[int, int]:
        """Section index -> sentiment score, in section order."""
        joined = self.join(tokens)
        if not joined:
            return {}

        if self.uses_values:
            totals = sum_by(joined, by="section", value_field="value")
            scores = {key[0]: value for key, value in totals.items()}
        else:
            labelled = filter_sentiments(joined, self.sentiments)
            wide = pivot(labelled, row_key="section", column_key="sentiment", fill=0)
            positive, negative = self.sentiments[0], self.sentiments[1]
            scores = net_sentiment(wide, positive=positive, negative=negative)

        return dict(sorted(scores.items()))

    def analyze(self, doc: AnalyzedDocument) -> AnalyzedDocument:
        """
        Store per-section scores under doc.sentiment[lexicon name].
        Modifies and returns the same AnalyzedDocument.
        """
        doc.sentiment[self.lexicon.name] = self.score_sections(doc.tokenized.filtered_tokens)
        return doc

    def aggregate_stats(self, doc: AnalyzedDocument) -> Dict:
        """
        Return aggregate statistics over the joined tokens:
        - sentiment_counts: joined records per label
        - total_value: sum of polarity values (AFINN)
        - coverage: fraction of filtered tokens found in the lexicon
        """
        tokens = doc.tokenized.filtered_tokens
        joined = self.join(tokens)
        labels = count((r for r in joined if r.sentiment), by="sentiment")
        matched = len({id(r.record) for r in joined})

        sentiment_counts: Dict[str, int] = defaultdict(int)
        for (label,), n in labels.items():
            sentiment_counts[label] = n

        total = len(tokens)
        return {
            "sentiment_counts": dict(sentiment_counts),
            "total_value": sum_by(joined, by=(), value_field="value").get((), 0),
            "coverage": matched / total if total > 0 else 0.0,
            "joined_record_count": len(joined),
            "total_token_count": total,
        }
