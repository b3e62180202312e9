import argparse
import sys
import json
import logging
from pathlib import Path
from typing import List, Optional

from ..errors import LitminerError

logger = logging.getLogger(__name__)


def create_parser() -> argparse.ArgumentParser:
    """Create the main argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog="litminer",
        description="litminer - tidy text mining for literary corpora",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable verbose output"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    _add_tokenize_subparser(subparsers)
    _add_count_subparser(subparsers)
    _add_sentiment_subparser(subparsers)
    _add_tfidf_subparser(subparsers)
    _add_run_subparser(subparsers)

    return parser


def _add_input_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-i", "--input", type=Path, required=True, help="Input .txt file or directory"
    )
    parser.add_argument(
        "-c", "--config", type=Path, default=None, help="YAML configuration file"
    )
    parser.add_argument(
        "--no-stopwords", action="store_true", help="Keep stop words"
    )


def _add_tokenize_subparser(subparsers):
    """Add the tokenize subcommand."""
    tokenize_parser = subparsers.add_parser(
        "tokenize", help="Tokenize text into words or n-grams"
    )
    _add_input_arguments(tokenize_parser)
    tokenize_parser.add_argument(
        "--ngram", type=int, default=None, help="Emit n-grams of this size instead of words"
    )
    tokenize_parser.add_argument(
        "-o", "--output", type=Path, default=None, help="Write tokens to this JSON file"
    )


def _add_count_subparser(subparsers):
    """Add the count subcommand."""
    count_parser = subparsers.add_parser("count", help="Count token frequencies")
    _add_input_arguments(count_parser)
    count_parser.add_argument(
        "--ngram", type=int, default=None, help="Count n-grams of this size"
    )
    count_parser.add_argument(
        "--by-feature", action="store_true", help="Count per book instead of overall"
    )
    count_parser.add_argument(
        "--top", type=int, default=20, help="Number of rows to show (default: 20)"
    )


def _add_sentiment_subparser(subparsers):
    """Add the sentiment subcommand."""
    sentiment_parser = subparsers.add_parser(
        "sentiment", help="Score sentiment per section against a lexicon"
    )
    _add_input_arguments(sentiment_parser)
    sentiment_parser.add_argument(
        "--lexicon", type=Path, required=True, help="Lexicon CSV or JSON file"
    )
    sentiment_parser.add_argument(
        "--section-width", type=int, default=None, help="Lines per section (default: 80)"
    )


def _add_tfidf_subparser(subparsers):
    """Add the tfidf subcommand."""
    tfidf_parser = subparsers.add_parser(
        "tfidf", help="Rank terms by tf-idf across books"
    )
    _add_input_arguments(tfidf_parser)
    tfidf_parser.add_argument(
        "--top", type=int, default=10, help="Terms to show per book (default: 10)"
    )
    tfidf_parser.add_argument(
        "--zipf", action="store_true", help="Also fit the rank/frequency power law"
    )


def _add_run_subparser(subparsers):
    """Add the run subcommand (full pipeline)."""
    run_parser = subparsers.add_parser(
        "run", help="Run full pipeline: tokenize -> count -> sentiment -> tf-idf"
    )
    _add_input_arguments(run_parser)
    run_parser.add_argument(
        "-o", "--output", type=Path, default=None, help="Output directory (default: output)"
    )
    run_parser.add_argument(
        "--analyses",
        type=str,
        default="all",
        help="Comma-separated analyses: counts,sentiment,tfidf,similarity (default: all)",
    )
    run_parser.add_argument(
        "--lexicon",
        type=Path,
        action="append",
        default=[],
        help="Lexicon file; may be repeated",
    )


def _load_config(args):
    from ..config import Config

    config = Config.from_yaml(args.config) if args.config else Config()
    if args.no_stopwords:
        config.filter.enabled = False
    ngram = getattr(args, "ngram", None)
    if ngram is not None:
        config.tokenizer.mode = "ngram"
        config.tokenizer.n = ngram
    section_width = getattr(args, "section_width", None)
    if section_width is not None:
        config.structure.section_width = section_width
    config.validate()
    return config


def _tokenize_inputs(args, config):
    from ..corpus import collect_text_files, read_corpus
    from ..pipeline import build_tokenizer

    text_files = collect_text_files(args.input)
    if not text_files:
        print(f"No .txt files found in {args.input}")
        return None

    documents = read_corpus(
        text_files,
        chapter_pattern=config.structure.chapter_pattern,
        section_width=config.structure.section_width,
    )
    tokenizer = build_tokenizer(config)
    return [tokenizer.tokenize(doc) for doc in documents]


def _print_table(title: str, columns: List[str], rows: List[List]) -> None:
    from rich.console import Console
    from rich.table import Table

    table = Table(title=title)
    for column in columns:
        table.add_column(column)
    for row in rows:
        table.add_row(*[f"{v:.5f}" if isinstance(v, float) else str(v) for v in row])
    Console().print(table)


def cmd_tokenize(args) -> int:
    """Execute the tokenize command."""
    config = _load_config(args)
    tokenized = _tokenize_inputs(args, config)
    if tokenized is None:
        return 1

    rows = [
        {
            "linenumber": t.linenumber,
            "feature": t.feature,
            "chapter": t.chapter,
            "token": t.token,
            **{f"token_{i}": p for i, p in enumerate(t.parts, start=1) if len(t.parts) > 1},
        }
        for doc in tokenized
        for t in doc.filtered_tokens
    ]

    if args.output:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_text(json.dumps(rows, ensure_ascii=False), encoding="utf-8")
        print(f"Wrote {len(rows)} tokens to {args.output}")
    else:
        for row in rows:
            print(json.dumps(row, ensure_ascii=False))
    return 0


def cmd_count(args) -> int:
    """Execute the count command."""
    from ..analyzers.aggregator import count

    config = _load_config(args)
    tokenized = _tokenize_inputs(args, config)
    if tokenized is None:
        return 1

    by = ("feature", "token") if args.by_feature else ("token",)
    table = count((t for doc in tokenized for t in doc.filtered_tokens), by=by)
    _print_table(
        f"Token counts ({table.total} tokens)",
        list(by) + ["n"],
        [list(key) + [n] for key, n in table.most_common(args.top)],
    )
    return 0


def cmd_sentiment(args) -> int:
    """Execute the sentiment command."""
    from ..analyzers.sentiment import SentimentAnalyzer
    from ..lexicons import load_lexicon

    config = _load_config(args)
    tokenized = _tokenize_inputs(args, config)
    if tokenized is None:
        return 1

    analyzer = SentimentAnalyzer(
        load_lexicon(args.lexicon), sentiments=config.sentiment.sentiments
    )
    rows = []
    for doc in tokenized:
        for section, score in analyzer.score_sections(doc.filtered_tokens).items():
            rows.append([doc.feature, section, score])

    _print_table(f"Sentiment by section ({analyzer.lexicon.name})", ["feature", "index", "sentiment"], rows)
    return 0


def cmd_tfidf(args) -> int:
    """Execute the tfidf command."""
    from ..analyzers.aggregator import count
    from ..analyzers.scorer import bind_tf_idf, fit_power_law, top_terms

    config = _load_config(args)
    tokenized = _tokenize_inputs(args, config)
    if tokenized is None:
        return 1

    counts = count((t for doc in tokenized for t in doc.filtered_tokens), by=("feature", "token"))
    records = bind_tf_idf(counts)

    rows = []
    for document, top in top_terms(records, per_document=args.top).items():
        rows.extend([document, r.term, r.n, r.tf, r.idf, r.tf_idf] for r in top)
    _print_table("tf-idf", ["document", "term", "n", "tf", "idf", "tf_idf"], rows)

    if args.zipf:
        fit = fit_power_law(records)
        print(f"log10(tf) = {fit['intercept']:.4f} + {fit['slope']:.4f} * log10(rank)")
    return 0


def cmd_run(args) -> int:
    """Execute the full pipeline."""
    from ..corpus import collect_text_files
    from ..pipeline import Pipeline

    config = _load_config(args)
    for lexicon in args.lexicon:
        config.sentiment.lexicons[lexicon.stem] = str(lexicon)

    text_files = collect_text_files(args.input)
    if not text_files:
        print(f"No .txt files found in {args.input}")
        return 1

    if args.analyses == "all":
        analyses = None
    else:
        analyses = [a.strip() for a in args.analyses.split(",")]

    print(f"Processing {len(text_files)} text file(s)...")

    pipeline = Pipeline(output_dir=args.output, analyses=analyses, config=config)
    results = pipeline.run(text_files)

    successful = sum(1 for r in results if r is not None)
    print(f"Processed {successful}/{len(text_files)} documents")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO, format="%(message)s"
    )

    if args.command is None:
        parser.print_help()
        return 0

    commands = {
        "tokenize": cmd_tokenize,
        "count": cmd_count,
        "sentiment": cmd_sentiment,
        "tfidf": cmd_tfidf,
        "run": cmd_run,
    }

    try:
        return commands[args.command](args)
    except LitminerError as e:
        logger.error(f"{args.command} failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
