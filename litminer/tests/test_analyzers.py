import pytest
from litminer.analyzers.base import TextLine, TokenRecord, Document


class TestDataClasses:
    def test_token_record_fields(self):
        rec = TokenRecord(
            linenumber=3,
            feature="Emma",
            token="dear harriet",
            parts=("dear", "harriet"),
            chapter=1,
        )
        assert rec.part(1) == "dear"
        assert rec.part(2) == "harriet"
        assert rec.section == 0
        assert rec.matched is None

    def test_records_are_immutable(self):
        rec = TokenRecord(linenumber=1, feature="", token="x", parts=("x",))
        with pytest.raises(AttributeError):
            rec.token = "y"

    def test_document_texts(self):
        doc = Document(
            feature="pp",
            lines=(TextLine("pp", 1, "It is a truth"), TextLine("pp", 2, "universally")),
        )
        assert doc.texts == ["It is a truth", "universally"]
        assert len(doc) == 2


class TestNormalizer:
    def test_lowercase_and_strip_punct(self):
        from litminer.analyzers.normalizer import normalize

        assert normalize(["Don't STOP, well-bred 42!"]) == ["don't stop well-bred 42"]

    def test_strip_numeric(self):
        from litminer.analyzers.normalizer import NormalizerConfig, normalize

        config = NormalizerConfig(strip_numeric=True)
        assert normalize(["Chapter 12: well-bred"], config) == ["chapter well-bred"]

    def test_keep_punct(self):
        from litminer.analyzers.normalizer import NormalizerConfig, normalize

        config = NormalizerConfig(lowercase=True, strip_punct=False)
        assert normalize(["Hello, World!"], config) == ["hello, world!"]

    def test_typographic_apostrophe_folded(self):
        from litminer.analyzers.normalizer import normalize_line

        assert normalize_line("I don\u2019t know") == "i don't know"

    def test_edge_hyphens_and_underscores_dropped(self):
        from litminer.analyzers.normalizer import normalize_line

        assert normalize_line("--_very_ 'odd'--") == "very odd"

    def test_empty_input(self):
        from litminer.analyzers.normalizer import normalize

        assert normalize([]) == []


class TestTokenizer:
    def test_word_scenario(self):
        from litminer.analyzers.normalizer import NormalizerConfig
        from litminer.analyzers.tokenizer import tokenize

        lines = ["Because I could not stop for Death", "He kindly stopped for me"]
        stream = tokenize(lines, normalizer=NormalizerConfig())
        assert stream.tokens() == [
            "because", "i", "could", "not", "stop", "for", "death",
            "he", "kindly", "stopped", "for", "me",
        ]

    def test_word_records_carry_line_index(self):
        from litminer.analyzers.tokenizer import tokenize

        records = list(tokenize(["one two", "three"], feature="poem"))
        assert [r.linenumber for r in records] == [1, 1, 2]
        assert all(r.feature == "poem" for r in records)

    def test_bigrams(self):
        from litminer.analyzers.tokenizer import NgramMode, tokenize

        records = list(tokenize(["the cat sat"], NgramMode(2)))
        assert [r.parts for r in records] == [("the", "cat"), ("cat", "sat")]
        assert [r.token for r in records] == ["the cat", "cat sat"]

    def test_ngram_short_line_yields_nothing(self):
        from litminer.analyzers.tokenizer import NgramMode, tokenize

        assert list(tokenize(["hi"], NgramMode(2))) == []

    def test_ngrams_do_not_cross_lines(self):
        from litminer.analyzers.tokenizer import NgramMode, tokenize

        tokens = tokenize(["a b", "c d"], NgramMode(2)).tokens()
        assert tokens == ["a b", "c d"]

    def test_trigram_parts(self):
        from litminer.analyzers.tokenizer import NgramMode, tokenize

        records = list(tokenize(["a b c d"], NgramMode(3)))
        assert len(records) == 2
        assert records[1].part(3) == "d"

    def test_invalid_ngram_size(self):
        from litminer.analyzers.tokenizer import NgramMode
        from litminer.errors import InvalidConfiguration

        with pytest.raises(InvalidConfiguration):
            NgramMode(0)

    def test_regex_match(self):
        from litminer.analyzers.tokenizer import RegexMode, tokenize

        assert tokenize(["a1 b22", "none"], RegexMode(r"\d+")).tokens() == ["1", "22"]

    def test_regex_detect(self):
        from litminer.analyzers.tokenizer import RegexMode, tokenize

        mode = RegexMode(r"^chapter", regex_return="detect", ignore_case=True)
        flags = [r.matched for r in tokenize(["CHAPTER 1", "text"], mode)]
        assert flags == [True, False]

    def test_invalid_regex(self):
        from litminer.analyzers.tokenizer import RegexMode
        from litminer.errors import InvalidConfiguration

        with pytest.raises(InvalidConfiguration):
            RegexMode("(")

    def test_unknown_regex_return(self):
        from litminer.analyzers.tokenizer import RegexMode
        from litminer.errors import InvalidConfiguration

        with pytest.raises(InvalidConfiguration):
            RegexMode("a", regex_return="count")

    def test_unknown_mode_name(self):
        from litminer.analyzers.tokenizer import mode_from_name
        from litminer.errors import InvalidConfiguration

        with pytest.raises(InvalidConfiguration):
            mode_from_name("sentence")

    def test_mode_from_name(self):
        from litminer.analyzers.tokenizer import NgramMode, WordMode, mode_from_name

        assert mode_from_name("word") == WordMode()
        assert mode_from_name("ngram", n=3) == NgramMode(3)

    def test_stream_is_restartable(self):
        from litminer.analyzers.tokenizer import tokenize

        stream = tokenize(["one two three"])
        assert list(stream) == list(stream)

    def test_empty_input(self):
        from litminer.analyzers.tokenizer import tokenize

        assert list(tokenize([])) == []

    def test_text_tokenizer_filters_stopwords(self):
        from litminer.analyzers.structure import build_document
        from litminer.analyzers.tokenizer import TextTokenizer

        doc = build_document(["It is a truth universally acknowledged"], "pp")
        result = TextTokenizer(stopwords={"it", "is", "a"}).tokenize(doc)
        assert [t.token for t in result.filtered_tokens] == [
            "truth", "universally", "acknowledged",
        ]
        assert result.removed_count == 3

    def test_curly_apostrophe_contractions_are_stop_words(self):
        from litminer.analyzers.structure import build_document
        from litminer.analyzers.tokenizer import TextTokenizer
        from litminer.lexicons import ENGLISH_STOPWORDS

        doc = build_document(["I don\u2019t know"], "pp")
        result = TextTokenizer(stopwords=ENGLISH_STOPWORDS).tokenize(doc)
        assert [t.token for t in result.filtered_tokens] == ["know"]

    def test_text_tokenizer_empty_document(self):
        from litminer.analyzers.base import Document
        from litminer.analyzers.tokenizer import TextTokenizer

        result = TextTokenizer().tokenize(Document(feature="empty"))
        assert result.tokens == []
        assert result.filtered_tokens == []


class TestFilters:
    def _records(self, lines, n=None):
        from litminer.analyzers.tokenizer import NgramMode, tokenize

        return list(tokenize(lines, NgramMode(n) if n else None))

    def test_conservation(self):
        from litminer.analyzers.filters import remove_stopwords

        records = self._records(["the cat sat on the mat"])
        result = remove_stopwords(records, {"the", "on"})
        assert len(result.kept) + len(result.removed) == len(records)
        assert [r.token for r in result.kept] == ["cat", "sat", "mat"]

    def test_idempotent(self):
        from litminer.analyzers.filters import remove_stopwords

        records = self._records(["the cat sat on the mat"])
        once = remove_stopwords(records, {"the", "on"}).kept
        twice = remove_stopwords(once, {"the", "on"}).kept
        assert once == twice

    def test_records_are_not_altered(self):
        from litminer.analyzers.filters import remove_stopwords

        records = self._records(["the cat"])
        kept = remove_stopwords(records, {"the"}).kept
        assert kept[0] is records[1]

    def test_casefold(self):
        from litminer.analyzers.filters import remove_stopwords

        records = self._records(["The cat"])
        assert len(remove_stopwords(records, {"the"}).kept) == 1
        assert len(remove_stopwords(records, {"the"}, casefold=False).kept) == 2

    def test_bigram_any_policy(self):
        from litminer.analyzers.filters import NgramStopPolicy, remove_stopwords

        records = self._records(["of the lady catherine"], n=2)
        kept = remove_stopwords(records, {"of", "the"}, policy=NgramStopPolicy.ANY).kept
        assert [r.token for r in kept] == ["lady catherine"]

    def test_bigram_all_policy(self):
        from litminer.analyzers.filters import NgramStopPolicy, remove_stopwords

        records = self._records(["of the lady catherine"], n=2)
        kept = remove_stopwords(records, {"of", "the"}, policy=NgramStopPolicy.ALL).kept
        assert [r.token for r in kept] == ["the lady", "lady catherine"]

    def test_boundary_policy_on_trigrams(self):
        from litminer.analyzers.filters import NgramStopPolicy, remove_stopwords

        records = self._records(["lady of rosings"], n=3)
        kept = remove_stopwords(records, {"of"}, policy=NgramStopPolicy.BOUNDARY).kept
        assert [r.token for r in kept] == ["lady of rosings"]

    def test_none_policy_keeps_ngrams(self):
        from litminer.analyzers.filters import remove_stopwords

        records = self._records(["of the"], n=2)
        assert len(remove_stopwords(records, {"of", "the"}, policy="none").kept) == 1

    def test_unknown_policy(self):
        from litminer.analyzers.filters import NgramStopPolicy
        from litminer.errors import InvalidConfiguration

        with pytest.raises(InvalidConfiguration):
            NgramStopPolicy.from_name("either")


class TestStructure:
    def test_chapters_increment_on_headings(self):
        from litminer.analyzers.structure import build_document

        doc = build_document(
            ["PRIDE AND PREJUDICE", "Chapter 1", "text", "CHAPTER II", "more"], "pp"
        )
        assert [line.chapter for line in doc.lines] == [0, 1, 1, 2, 2]

    def test_chapters_non_decreasing(self):
        from litminer.analyzers.structure import build_document

        doc = build_document(["x", "chapter 1", "y", "chapter 2", "z"], "pp")
        chapters = [line.chapter for line in doc.lines]
        assert chapters == sorted(chapters)

    def test_sections(self):
        from litminer.analyzers.structure import build_document

        doc = build_document(["a"] * 5, "pp", section_width=2)
        assert [line.linenumber for line in doc.lines] == [1, 2, 3, 4, 5]
        assert [line.section for line in doc.lines] == [0, 1, 1, 2, 2]

    def test_tokens_inherit_structure(self):
        from litminer.analyzers.structure import build_document
        from litminer.analyzers.tokenizer import tokenize

        doc = build_document(["front", "Chapter 1", "word"], "pp", section_width=2)
        last = list(tokenize(doc))[-1]
        assert (last.token, last.chapter, last.section, last.linenumber) == ("word", 1, 1, 3)

    def test_invalid_section_width(self):
        from litminer.analyzers.structure import build_document
        from litminer.errors import InvalidConfiguration

        with pytest.raises(InvalidConfiguration):
            build_document(["a"], "pp", section_width=0)
