from .base import (
    AnalyzedDocument,
    Document,
    FrequencyTable,
    LexiconEntry,
    SentimentRecord,
    TextLine,
    TfIdfRecord,
    TokenRecord,
    TokenizedDocument,
    WideTable,
)
from .normalizer import NormalizerConfig, normalize
from .tokenizer import NgramMode, RegexMode, TextTokenizer, TokenStream, WordMode, tokenize
from .filters import NgramStopPolicy, remove_stopwords
from .aggregator import count, join, pivot, unpivot
from .scorer import bind_tf_idf
from .sentiment import SentimentAnalyzer
from .correlation import DocumentSimilarity

__all__ = [
    "AnalyzedDocument",
    "Document",
    "FrequencyTable",
    "LexiconEntry",
    "SentimentRecord",
    "TextLine",
    "TfIdfRecord",
    "TokenRecord",
    "TokenizedDocument",
    "WideTable",
    "NormalizerConfig",
    "normalize",
    "NgramMode",
    "RegexMode",
    "TextTokenizer",
    "TokenStream",
    "WordMode",
    "tokenize",
    "NgramStopPolicy",
    "remove_stopwords",
    "count",
    "join",
    "pivot",
    "unpivot",
    "bind_tf_idf",
    "SentimentAnalyzer",
    "DocumentSimilarity",
]
