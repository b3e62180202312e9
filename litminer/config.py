"""Configuration loading for litminer runs."""

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from .analyzers.filters import NgramStopPolicy
from .analyzers.normalizer import NormalizerConfig
from .analyzers.structure import CHAPTER_PATTERN, SECTION_WIDTH
from .analyzers.tokenizer import TokenizerMode, mode_from_name
from .errors import InvalidConfiguration


@dataclass
class TokenizerConfig:
    """Tokenization mode and its parameters."""

    mode: str = "word"
    n: int = 2
    pattern: Optional[str] = None
    regex_return: str = "match"

    def build(self) -> TokenizerMode:
        return mode_from_name(
            self.mode, n=self.n, pattern=self.pattern, regex_return=self.regex_return
        )


@dataclass
class FilterConfig:
    """Stop-word filtering."""

    enabled: bool = True
    stopwords_path: Optional[str] = None
    extra_stopwords: List[str] = field(default_factory=list)
    ngram_policy: str = "any"

    @property
    def policy(self) -> NgramStopPolicy:
        return NgramStopPolicy.from_name(self.ngram_policy)


@dataclass
class StructureConfig:
    """Chapter and section tagging."""

    chapter_pattern: Optional[str] = CHAPTER_PATTERN
    section_width: int = SECTION_WIDTH


@dataclass
class SentimentConfig:
    """Lexicon files, keyed by a short name such as afinn, bing or nrc."""

    lexicons: Dict[str, str] = field(default_factory=dict)
    sentiments: List[str] = field(default_factory=lambda: ["positive", "negative"])


@dataclass
class OutputConfig:
    output_dir: str = "output"
    top_terms: int = 10


@dataclass
class Config:
    """Top-level run configuration."""

    normalizer: NormalizerConfig = field(default_factory=NormalizerConfig)
    tokenizer: TokenizerConfig = field(default_factory=TokenizerConfig)
    filter: FilterConfig = field(default_factory=FilterConfig)
    structure: StructureConfig = field(default_factory=StructureConfig)
    sentiment: SentimentConfig = field(default_factory=SentimentConfig)
    output: OutputConfig = field(default_factory=OutputConfig)

    @classmethod
    def from_dict(cls, data: Dict[str, Any], base_dir: Optional[Path] = None) -> "Config":
        """Build config from a dictionary; unknown sections or keys are rejected."""
        data = data or {}
        unknown = set(data) - {f.name for f in fields(cls)}
        if unknown:
            raise InvalidConfiguration(f"Unknown config sections: {sorted(unknown)}")

        sections = {
            "normalizer": NormalizerConfig,
            "tokenizer": TokenizerConfig,
            "filter": FilterConfig,
            "structure": StructureConfig,
            "sentiment": SentimentConfig,
            "output": OutputConfig,
        }
        built = {}
        for name, section_cls in sections.items():
            try:
                built[name] = section_cls(**(data.get(name) or {}))
            except TypeError as e:
                raise InvalidConfiguration(f"Bad [{name}] section: {e}") from e

        config = cls(**built)
        if base_dir is not None:
            config._resolve_paths(base_dir)
        config.validate()
        return config

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "Config":
        """Load config from YAML; relative paths resolve against the file's directory."""
        config_path = Path(path).resolve()
        with config_path.open("r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh) or {}
        if not isinstance(data, dict):
            raise InvalidConfiguration(f"{config_path}: expected a mapping at top level")
        return cls.from_dict(data, base_dir=config_path.parent)

    def validate(self) -> None:
        """Raise InvalidConfiguration if any section holds an unusable value."""
        self.tokenizer.build()
        NgramStopPolicy.from_name(self.filter.ngram_policy)
        if self.structure.section_width < 1:
            raise InvalidConfiguration("structure.section_width must be >= 1")
        if len(self.sentiment.sentiments) != 2:
            raise InvalidConfiguration(
                "sentiment.sentiments must list exactly two labels (positive, negative), "
                f"got {self.sentiment.sentiments!r}"
            )

    def _resolve_paths(self, base_dir: Path) -> None:
        def resolve(raw: str) -> str:
            p = Path(raw).expanduser()
            return str(p if p.is_absolute() else (base_dir / p).resolve())

        if self.filter.stopwords_path:
            self.filter.stopwords_path = resolve(self.filter.stopwords_path)
        self.sentiment.lexicons = {
            name: resolve(p) for name, p in self.sentiment.lexicons.items()
        }
        self.output.output_dir = resolve(self.output.output_dir)
