import json
import logging
from dataclasses import asdict
from pathlib import Path
from typing import Dict, List, Optional, Set, Union

from .analyzers.aggregator import count
from .analyzers.base import AnalyzedDocument, Document, TfIdfRecord, TokenizedDocument
from .analyzers.correlation import DocumentSimilarity
from .analyzers.scorer import bind_tf_idf, top_terms
from .analyzers.sentiment import SentimentAnalyzer
from .analyzers.tokenizer import TextTokenizer
from .config import Config
from .corpus import read_corpus
from .lexicons import load_lexicon, load_stopwords

logger = logging.getLogger(__name__)

_ALL_ANALYSES = ["counts", "sentiment", "tfidf", "similarity"]


def build_tokenizer(config: Config) -> TextTokenizer:
    """Build the tokenizer and stop-word set described by a config."""
    stopwords = set()
    if config.filter.enabled:
        stopwords = set(load_stopwords(config.filter.stopwords_path))
        stopwords.update(w.lower() for w in config.filter.extra_stopwords)

    return TextTokenizer(
        mode=config.tokenizer.build(),
        normalizer=config.normalizer,
        stopwords=stopwords,
        policy=config.filter.policy,
    )


class Pipeline:
    """
    litminer end-to-end pipeline.

    Stages:
      1. Read     - local text files to line-numbered documents (corpus.py)
      2. Tokenize - normalize, split and stop-word filter via TextTokenizer
      3. Analyze  - word counts and per-section sentiment for each document
      4. Score    - tf-idf and document similarity across the collection
      5. Output   - one JSON file per document plus tfidf.json

    Usage:
        p = Pipeline(output_dir=Path("output"))
        results = p.run(text_paths)

    The analyses parameter controls which analyses run. Pass an empty list
    to tokenize only. Defaults to all analyses.
    """

    def __init__(
        self,
        output_dir: Optional[Union[str, Path]] = None,
        analyses: Optional[List[str]] = None,
        config: Optional[Config] = None,
    ):
        self.config = config or Config()
        self.output_dir = Path(output_dir or self.config.output.output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

        self.analyses = _ALL_ANALYSES if analyses is None else analyses

        self._tokenizer = build_tokenizer(self.config)
        self._sentiment: List[SentimentAnalyzer] = []
        if "sentiment" in self.analyses:
            for name, path in self.config.sentiment.lexicons.items():
                self._sentiment.append(
                    SentimentAnalyzer(
                        load_lexicon(path, name=name),
                        sentiments=self.config.sentiment.sentiments,
                    )
                )
        self._similarity = DocumentSimilarity() if "similarity" in self.analyses else None
        self.tf_idf: List[TfIdfRecord] = []

    def run(self, text_paths: List[Union[str, Path]]) -> List[Optional[AnalyzedDocument]]:
        """
        Run the full pipeline on a list of text files.

        Returns a list of AnalyzedDocument objects (same length as input).
        Files that cannot be read are represented as None and logged.
        """
        documents: List[Optional[Document]] = []
        seen: Set[str] = set()
        for path in text_paths:
            try:
                documents.extend(
                    read_corpus(
                        [path],
                        chapter_pattern=self.config.structure.chapter_pattern,
                        section_width=self.config.structure.section_width,
                        seen=seen,
                    )
                )
            except OSError as e:
                logger.error(f"Could not read {path}: {e}")
                documents.append(None)
        return self.run_documents(documents)

    def run_documents(
        self, documents: List[Optional[Document]]
    ) -> List[Optional[AnalyzedDocument]]:
        """Analyze already-loaded documents; None entries pass through."""
        from rich.progress import Progress, SpinnerColumn

        analyzed: List[Optional[AnalyzedDocument]] = []
        with Progress(SpinnerColumn(), *Progress.get_default_columns(), transient=True) as progress:
            task = progress.add_task("Analyzing documents...", total=len(documents))
            for document in documents:
                analyzed.append(None if document is None else self._process_one(document))
                progress.update(task, advance=1)

        valid = [d for d in analyzed if d is not None]
        features = [d.feature for d in valid]
        duplicates = sorted({f for f in features if features.count(f) > 1})
        if duplicates:
            logger.warning(f"Documents share feature keys {duplicates}; their counts will merge")
        if valid and ("tfidf" in self.analyses or self._similarity):
            self._score_collection(valid)

        for doc in valid:
            self._save_json(doc)
        if self.tf_idf:
            self._save_tf_idf()

        return analyzed

    def _process_one(self, document: Document) -> AnalyzedDocument:
        """Tokenize and analyze one document."""
        tokenized: TokenizedDocument = self._tokenizer.tokenize(document)
        doc = AnalyzedDocument(tokenized=tokenized)
        self._process_one_direct(doc)
        return doc

    def _process_one_direct(self, doc: AnalyzedDocument) -> AnalyzedDocument:
        """Run per-document analyses on an already-tokenized document."""
        if "counts" in self.analyses or "tfidf" in self.analyses:
            doc.word_counts = count(doc.tokenized.filtered_tokens, by="token")
        for analyzer in self._sentiment:
            analyzer.analyze(doc)
        return doc

    def _score_collection(self, docs: List[AnalyzedDocument]) -> None:
        """tf-idf over the collection, treating each feature as a document."""
        tokens = [t for d in docs for t in d.tokenized.filtered_tokens]
        if not tokens:
            logger.warning("No tokens left after filtering, skipping tf-idf")
            return

        counts = count(tokens, by=("feature", "token"))
        self.tf_idf = bind_tf_idf(counts)

        by_doc: Dict[str, List[TfIdfRecord]] = {}
        for record in self.tf_idf:
            by_doc.setdefault(record.document, []).append(record)
        for doc in docs:
            doc.tf_idf = by_doc.get(doc.feature, [])

        if self._similarity:
            features, matrix = self._similarity.compute(self.tf_idf)
            for doc in docs:
                if doc.feature in features:
                    doc.similarity_vector = matrix[features.index(doc.feature)].tolist()

    def _save_json(self, doc: AnalyzedDocument) -> Path:
        """Serialize an AnalyzedDocument to a JSON file in output_dir."""
        out_path = self.output_dir / f"{doc.feature}.json"
        top = self.config.output.top_terms

        payload = {
            "feature": doc.feature,
            "token_count": len(doc.tokenized.tokens),
            "filtered_token_count": len(doc.tokenized.filtered_tokens),
            "word_counts": [
                {"token": key[0], "n": n}
                for key, n in (doc.word_counts.most_common(top) if doc.word_counts else [])
            ],
            "sentiment": {
                name: [{"section": s, "sentiment": v} for s, v in scores.items()]
                for name, scores in doc.sentiment.items()
            },
            "tf_idf": [
                asdict(r) for r in top_terms(doc.tf_idf, per_document=top).get(doc.feature, [])
            ],
            "similarity_vector": doc.similarity_vector,
        }

        try:
            out_path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
            logger.info(f"Saved analysis to {out_path}")
        except OSError as e:
            logger.error(f"Failed to save JSON for {doc.feature}: {e}")

        return out_path

    def _save_tf_idf(self) -> Path:
        out_path = self.output_dir / "tfidf.json"
        rows = [asdict(r) for r in self.tf_idf]
        out_path.write_text(json.dumps(rows, ensure_ascii=False), encoding="utf-8")
        logger.info(f"Saved {len(rows)} tf-idf rows to {out_path}")
        return out_path

